import sys
import time
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


class FakeResponse:
    def __init__(self, status_code=200, text="Oh yeah! it worked"):
        self.status_code = status_code
        self.text = text


class FakeTransport:
    """Stands in for ``requests.request``; counts calls and can delay."""

    def __init__(self, status_code=200, text="Oh yeah! it worked", delay=0.0):
        self.status_code = status_code
        self.text = text
        self.delay = delay
        self.calls = []

    def __call__(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        if self.delay:
            time.sleep(self.delay)
        return FakeResponse(self.status_code, self.text)


@pytest.fixture
def make_transport():
    return FakeTransport


@pytest.fixture
def attributes():
    return {"url": "http://127.0.0.1:3034"}
