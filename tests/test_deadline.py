import json
import time

import pytest

from ai_recruiter import settings
from ai_recruiter.backend.proxy import forward_to_upstream
from ai_recruiter.deadline import DeadlineExceeded, post_within
from ai_recruiter.pipeline.fanout import upload_question

URL = "http://proxy.test/api/webhook"


def test_full_body_is_read(make_session, make_response):
    session = make_session(make_response(201, json.dumps({"ok": True})))
    reply = post_within(session, URL, 5, data=b"x")

    assert reply.ok
    assert reply.status_code == 201
    assert json.loads(reply.text) == {"ok": True}
    _, kwargs = session.calls[0]
    assert kwargs["timeout"] == (min(settings.CONNECT_TIMEOUT_SECONDS, 5), 5)


def test_trickling_body_is_aborted_at_the_deadline(make_session, stalled_response):
    started = time.monotonic()
    with pytest.raises(DeadlineExceeded):
        post_within(make_session(stalled_response), URL, 0.1)

    assert stalled_response.closed
    assert time.monotonic() - started < 4


def test_stalled_upload_becomes_a_question_error(make_session, stalled_response, make_resume):
    result = upload_question(make_resume(), "JD", "Q?", url=URL, timeout=0.1,
                             session=make_session(stalled_response))
    assert result["answer"]["error"].startswith("Request timed out after")


def test_stalled_upstream_maps_to_504(make_session, stalled_response):
    status, body = forward_to_upstream(b"x", "text/plain", url=URL, timeout=0.1,
                                       session=make_session(stalled_response))
    assert status == 504
    assert body["timeout"] is True
