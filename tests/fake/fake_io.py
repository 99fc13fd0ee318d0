import asyncio


class FakeLocalInput:
    """
    Local input fed by the test.

    Units pushed with `push` are returned by `read_unit` in order; pushing
    None signals end-of-input and pushing an exception makes `read_unit`
    raise it.
    """
    hint = "fake input ready"

    def __init__(self) -> None:
        self._queue: asyncio.Queue[bytes | BaseException | None] = asyncio.Queue()
        self.entered = False
        self.exited = False

    def push(self, *units: bytes | BaseException | None) -> None:
        for unit in units:
            self._queue.put_nowait(unit)

    async def read_unit(self) -> bytes | None:
        unit = await self._queue.get()
        if isinstance(unit, BaseException):
            raise unit
        return unit

    def __enter__(self):
        self.entered = True
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.exited = True


class FakeSink:
    def __init__(self) -> None:
        self.messages: list[bytes] = []
        self.echoed: list[bytes] = []
        self.notices: list[str] = []

    def emit(self, message: bytes) -> None:
        self.messages.append(message)

    def echo(self, data: bytes) -> None:
        self.echoed.append(data)

    def notice(self, text: str) -> None:
        self.notices.append(text)
