import os
import sys
import asyncio
import inspect
from typing import Any, List, Optional

import pytest

# Ensure project root is on sys.path so `import flight_finder` and `import main` work
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from flight_finder.errors import TransportError
from flight_finder.llm.transport import ModelReply
from flight_finder.obs.metrics import reset_metrics


def pytest_pyfunc_call(pyfuncitem):
    """Allow running async tests without pytest-asyncio.

    If the test function is a coroutine, run it in a fresh event loop.
    """
    testfunction = pyfuncitem.obj
    if inspect.iscoroutinefunction(testfunction):
        funcargs = pyfuncitem.funcargs
        sig = inspect.signature(testfunction)
        # Filter only the parameters that the test function expects
        allowed = {name: funcargs[name] for name in sig.parameters.keys() if name in funcargs}
        asyncio.run(testfunction(**allowed))
        return True
    return None


class FakeTransport:
    """In-memory ModelTransport that records prompts and replays canned replies."""

    def __init__(self, reply: Optional[ModelReply] = None, error: Optional[TransportError] = None):
        self.reply = reply or ModelReply(text="")
        self.error = error
        self.search_prompts: List[str] = []
        self.structured_calls: List[tuple] = []

    async def search(self, prompt: str) -> ModelReply:
        self.search_prompts.append(prompt)
        if self.error:
            raise self.error
        return self.reply

    async def generate_structured(self, prompt: str, schema: Any) -> ModelReply:
        self.structured_calls.append((prompt, schema))
        if self.error:
            raise self.error
        return self.reply

    @property
    def call_count(self) -> int:
        return len(self.search_prompts) + len(self.structured_calls)


@pytest.fixture
def fake_transport():
    return FakeTransport()


@pytest.fixture
def make_gateway(fake_transport):
    """Build a gateway whose transport is the fake, recording factory calls."""
    from flight_finder.gateway import FlightFinderGateway

    def _make(api_key: Optional[str] = "test-key", **kwargs):
        factory_calls = []

        def factory(key, model):
            factory_calls.append((key, model))
            return fake_transport

        gateway = FlightFinderGateway(api_key=api_key, transport_factory=factory, **kwargs)
        gateway.factory_calls = factory_calls
        return gateway

    return _make


@pytest.fixture(autouse=True)
def clean_metrics():
    reset_metrics()
    yield
    reset_metrics()
