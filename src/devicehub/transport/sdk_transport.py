from devicehub.transport.base import Transport, EndpointAddress


class SdkTransport(Transport):
    """
    A pass-through for devices driven by an in-process vendor library rather than a socket.
    send() reports the whole payload as written and receive_into() never yields data.
    """
    scheme = 'sdk'

    def __init__(self):
        self._open = False
        self.address = None

    @property
    def is_open(self) -> bool:
        return self._open

    async def open(self, address: EndpointAddress):
        self.address = address
        self._open = True

    async def send(self, payload) -> int:
        self.check_open()
        return len(payload)

    async def receive_into(self, buffer) -> int:
        self.check_open()
        return 0

    async def close(self):
        self._open = False
