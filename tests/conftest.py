import threading

import pytest

from ai_recruiter.pipeline.models import ResumeUpload


class FakeResponse:
    encoding = "utf-8"

    def __init__(self, status_code=200, text=""):
        self.status_code = status_code
        self.text = text
        self.closed = False

    @property
    def ok(self):
        return self.status_code < 400

    @property
    def content(self):
        return self.text.encode("utf-8")

    def close(self):
        self.closed = True


class StalledResponse(FakeResponse):
    """Sends a first byte, then nothing more until the response is closed."""

    def __init__(self):
        super().__init__(200, "{")
        self._closed = threading.Event()

    @property
    def content(self):
        self._closed.wait(timeout=5)
        return b"{"

    def close(self):
        self.closed = True
        self._closed.set()


class FakeSession:
    """Stands in for requests: replays outcomes in order, repeating the last one."""

    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def post(self, url, **kwargs):
        self.calls.append((url, kwargs))
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def make_session():
    def _make(*outcomes):
        return FakeSession(outcomes)
    return _make


@pytest.fixture
def make_response():
    return FakeResponse


@pytest.fixture
def stalled_response():
    return StalledResponse()


@pytest.fixture
def make_resume():
    def _make(name="john.pdf", index=0):
        return ResumeUpload(
            resume_id=f"res1700000000000-{index}",
            file_name=name,
            content=b"%PDF-1.4 resume",
            content_type="application/pdf",
        )
    return _make
