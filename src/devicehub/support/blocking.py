import asyncio


async def run_blocking(fn, *args):
    """ runs a blocking call on the loop's default executor and awaits its result. """
    return await asyncio.get_event_loop().run_in_executor(None, fn, *args)
