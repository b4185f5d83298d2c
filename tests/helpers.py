import json

import httpx


class SleepRecorder:
    """Stands in for asyncio.sleep and records requested waits."""

    def __init__(self) -> None:
        self.waits: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.waits.append(seconds)

    @property
    def total(self) -> float:
        return sum(self.waits)


class FakeUpstream:
    """Serves queued responses and records every request it receives."""

    def __init__(self, responses: list | None = None) -> None:
        self.responses = list(responses or [])
        self.requests: list[httpx.Request] = []

    def queue(self, *responses) -> "FakeUpstream":
        self.responses.extend(responses)
        return self

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.responses:
            raise AssertionError(f"Unexpected request: {request.url}")
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        if callable(item):
            return item(request)
        return item

    @property
    def calls(self) -> int:
        return len(self.requests)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


def ok(payload) -> httpx.Response:
    return httpx.Response(200, content=json.dumps(payload).encode())


def status(code: int) -> httpx.Response:
    return httpx.Response(code)


def chart_payload(points: int = 3, start: int = 1_700_000_000_000, step: int = 3_600_000) -> dict:
    stamps = [start + i * step for i in range(points)]
    return {
        "prices": [[ts, 100.0 + i] for i, ts in enumerate(stamps)],
        "market_caps": [[ts, 1e9 + i] for i, ts in enumerate(stamps)],
        "total_volumes": [[ts, 1e6 + i] for i, ts in enumerate(stamps)],
    }


