import asyncio
import unittest
from unittest.mock import Mock, AsyncMock

from hamcrest import assert_that, is_
from serial import SerialException

from devicehub.errors import TransportConnectError, TransportNotOpenError
from devicehub.transport.base import EndpointAddress
from devicehub.transport.serial_transport import SerialTransport


class SerialTransportTest(unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        self.reader = asyncio.StreamReader()
        self.writer = Mock()
        self.writer.closed = False
        self.writer.is_closing.side_effect = lambda: self.writer.closed
        self.writer.drain = AsyncMock()
        self.writer.wait_closed = AsyncMock()

        def do_close():
            self.writer.closed = True

        self.writer.close.side_effect = do_close
        self.open_connection = AsyncMock(return_value=(self.reader, self.writer))
        self.address = EndpointAddress('serial', path='/dev/ttyUSB0')
        self.sut = SerialTransport(baudrate=9600, open_connection=self.open_connection)

    async def test_open_configures_port(self):
        await self.sut.open(self.address)
        self.open_connection.assert_awaited_once_with(url='/dev/ttyUSB0', baudrate=9600)
        assert_that(self.sut.is_open, is_(True))

    async def test_open_when_open_does_nothing(self):
        await self.sut.open(self.address)
        await self.sut.open(self.address)
        self.open_connection.assert_awaited_once()

    async def test_open_failure(self):
        self.open_connection.side_effect = SerialException("no such port")
        with self.assertRaises(TransportConnectError):
            await self.sut.open(self.address)
        assert_that(self.sut.is_open, is_(False))

    async def test_send_and_receive(self):
        await self.sut.open(self.address)
        assert_that(await self.sut.send(b'abc'), is_(3))
        self.writer.write.assert_called_once_with(b'abc')
        self.writer.drain.assert_awaited_once()
        self.reader.feed_data(b'ok')
        buffer = bytearray(8)
        assert_that(await self.sut.receive_into(buffer), is_(2))
        assert_that(bytes(buffer[:2]), is_(b'ok'))

    async def test_cancelled_receive_keeps_later_data(self):
        await self.sut.open(self.address)
        with self.assertRaises(asyncio.TimeoutError):
            await asyncio.wait_for(self.sut.receive(3), 0.05)
        self.reader.feed_data(b'ABCDEF')
        assert_that(await self.sut.receive(3), is_(b'ABC'))
        assert_that(await self.sut.receive(3), is_(b'DEF'))

    async def test_receive_at_end_of_stream(self):
        await self.sut.open(self.address)
        self.reader.feed_eof()
        assert_that(await self.sut.receive_into(bytearray(4)), is_(0))

    async def test_requires_open(self):
        with self.assertRaises(TransportNotOpenError):
            await self.sut.send(b'abc')

    async def test_close_releases_once(self):
        await self.sut.open(self.address)
        await self.sut.close()
        await self.sut.close()
        self.writer.close.assert_called_once_with()
        self.writer.wait_closed.assert_awaited_once()
        assert_that(self.sut.is_open, is_(False))


if __name__ == '__main__':  # pragma: no cover
    unittest.main()
