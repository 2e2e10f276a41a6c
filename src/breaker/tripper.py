"""Timeout-bounded request execution with a single discrete outcome."""

from __future__ import annotations

import concurrent.futures
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Union

import requests

logger = logging.getLogger(__name__)

TIMEOUT_STATUS = 500
TIMEOUT_MESSAGE = "Request timed out"

RequestSpec = Union[str, Mapping[str, Any]]


class TripOutcome(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class TripResult:
    outcome: TripOutcome
    status_code: Optional[int]
    body: str
    response: Any = None

    @property
    def ok(self) -> bool:
        return self.outcome is TripOutcome.SUCCESS


def _split_spec(request_spec: RequestSpec) -> tuple[str, str, Dict[str, Any]]:
    if isinstance(request_spec, str):
        return "GET", request_spec, {}
    kwargs = dict(request_spec)
    try:
        url = kwargs.pop("url")
    except KeyError:
        raise ValueError("request spec requires a 'url'") from None
    method = str(kwargs.pop("method", "GET")).upper()
    return method, url, kwargs


class TimeTripper:
    """Run one request against a deadline.

    The request runs on a worker thread while the caller waits on the
    future. Whichever finishes first decides the result. When the deadline
    wins, the future is abandoned and its late result is only logged.
    """

    def __init__(
        self,
        request_spec: RequestSpec,
        timeout: float,
        send: Optional[Callable[..., Any]] = None,
    ) -> None:
        self.method, self.url, self.kwargs = _split_spec(request_spec)
        self.timeout = timeout
        self._send = send or requests.request
        # Keeps an abandoned worker from hanging on a dead socket forever.
        self.kwargs.setdefault("timeout", timeout)

    def run(self) -> TripResult:
        executor = concurrent.futures.ThreadPoolExecutor(max_workers=1, thread_name_prefix="tripper")
        try:
            future = executor.submit(self._send, self.method, self.url, **self.kwargs)
            try:
                response = future.result(timeout=self.timeout)
            except concurrent.futures.TimeoutError:
                future.add_done_callback(self._discard_late)
                return self._timed_out()
            except requests.Timeout:
                return self._timed_out()
            except requests.RequestException as exc:
                logger.debug("%s %s raised %s", self.method, self.url, exc)
                return TripResult(TripOutcome.FAILURE, None, f"Request failed: {exc}")
        finally:
            executor.shutdown(wait=False)

        body = getattr(response, "text", "")
        if response.status_code == 200:
            return TripResult(TripOutcome.SUCCESS, 200, body, response)
        return TripResult(TripOutcome.FAILURE, response.status_code, body, response)

    def _timed_out(self) -> TripResult:
        logger.debug("%s %s exceeded %.3fs", self.method, self.url, self.timeout)
        return TripResult(TripOutcome.TIMEOUT, TIMEOUT_STATUS, TIMEOUT_MESSAGE)

    def _discard_late(self, future: concurrent.futures.Future) -> None:
        logger.debug("Discarding late completion for %s %s", self.method, self.url)
