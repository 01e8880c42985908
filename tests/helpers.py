"""Test helpers: a controllable clock and mock HTTP transports."""
import httpx


TARGET_URL = "http://target.test/health"


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


def client_factory_for(handler):
    """Build a client factory whose clients answer through ``handler``."""
    def factory():
        return httpx.AsyncClient(transport=httpx.MockTransport(handler), follow_redirects=True)
    return factory


class ScriptedTarget:
    """Mock target answering each request with the next scripted step.

    A step is either an int status code or a callable taking the request and
    returning a response or raising. Status code steps advance the clock by
    ``latency`` seconds.
    """

    def __init__(self, clock: FakeClock, steps, latency: float = 0.12):
        self.clock = clock
        self.steps = list(steps)
        self.latency = latency
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        step = self.steps.pop(0) if len(self.steps) > 1 else self.steps[0]
        if callable(step):
            return step(request)
        self.clock.advance(self.latency)
        return httpx.Response(step, json={"status": "ok"})

    @property
    def timeouts(self):
        return [r.extensions["timeout"]["read"] for r in self.requests]


def timeout_after(clock: FakeClock, seconds: float):
    def step(request):
        clock.advance(seconds)
        raise httpx.ReadTimeout("timed out", request=request)
    return step


def refused(request):
    raise httpx.ConnectError("Connection refused", request=request)
