"""
POST with a wall-clock deadline.

A plain ``timeout=`` in requests bounds the connect and each socket read, so
a server trickling bytes can hold a request open forever. Here the body is
streamed and a timer closes the response once the total budget is spent.
"""
import logging
import threading
import time
from typing import NamedTuple

import requests

from . import settings

logger = logging.getLogger(__name__)


class DeadlineExceeded(requests.exceptions.Timeout):
    """The whole request did not finish within its deadline."""


class Reply(NamedTuple):
    status_code: int
    text: str

    @property
    def ok(self) -> bool:
        return self.status_code < 400


def post_within(http, url: str, seconds: float, **kwargs) -> Reply:
    """
    POSTs and reads the full body, giving up after ``seconds`` in total.

    Raises DeadlineExceeded (a requests Timeout) when the budget runs out, and
    lets every other requests exception through.
    """
    started = time.monotonic()
    connect = min(settings.CONNECT_TIMEOUT_SECONDS, seconds)
    response = http.post(url, timeout=(connect, seconds), stream=True, **kwargs)

    remaining = seconds - (time.monotonic() - started)
    expired = threading.Event()

    def expire():
        expired.set()
        response.close()

    timer = threading.Timer(max(remaining, 0), expire)
    timer.daemon = True
    timer.start()
    try:
        body = response.content
    except (requests.exceptions.RequestException, OSError, ValueError, AttributeError):
        # reads on a response closed by the timer fail in transport-specific ways
        if expired.is_set():
            raise DeadlineExceeded(f"No complete response within {seconds} seconds")
        raise
    finally:
        timer.cancel()
        response.close()

    if expired.is_set():
        raise DeadlineExceeded(f"No complete response within {seconds} seconds")

    text = body.decode(response.encoding or "utf-8", errors="replace") if body else ""
    logger.debug("Read %d bytes from %s in %.1fs", len(body or b""), url, time.monotonic() - started)
    return Reply(response.status_code, text)
