import json
import smtplib

import pytest
import requests
from fastapi.testclient import TestClient

from ai_recruiter.backend import main
from ai_recruiter.backend import proxy


@pytest.fixture
def client():
    return TestClient(main.app)


@pytest.fixture
def upstream(monkeypatch, make_response):
    """Replaces the upstream call; set .outcome to a response or an exception."""
    class Upstream:
        outcome = make_response(200, json.dumps({"q1_answer": "Score: 70"}))
        calls = []

    def fake_post(url, **kwargs):
        Upstream.calls.append((url, kwargs))
        if isinstance(Upstream.outcome, Exception):
            raise Upstream.outcome
        return Upstream.outcome

    Upstream.calls = []
    monkeypatch.setattr(proxy.requests, "post", fake_post)
    return Upstream


def test_health_check(client):
    assert client.get("/").json()["status"] == "live"


def test_multipart_body_is_forwarded_unchanged(client, upstream):
    response = client.post(
        "/api/webhook",
        data={"job_description": "JD", "question": "Score?"},
        files={"files[]": ("john.pdf", b"%PDF-1.4", "application/pdf")},
    )

    assert response.status_code == 200
    assert response.json() == {"q1_answer": "Score: 70"}
    assert response.headers["access-control-allow-origin"] == "*"
    _, kwargs = upstream.calls[0]
    assert kwargs["headers"]["Content-Type"].startswith("multipart/form-data; boundary=")
    assert b'name="files[]"; filename="john.pdf"' in kwargs["data"]
    assert kwargs["timeout"][1] == 900


def test_non_json_upstream_body_is_wrapped(client, upstream, make_response):
    upstream.outcome = make_response(200, "Processing started")
    response = client.post("/api/webhook", content=b"x", headers={"Content-Type": "text/plain"})
    assert response.json() == {"response": "Processing started"}


def test_upstream_error_status_is_passed_through(client, upstream, make_response):
    upstream.outcome = make_response(502, "bad gateway")
    response = client.post("/api/webhook", content=b"x")
    assert response.status_code == 502
    assert response.json() == {"error": "bad gateway"}


def test_upstream_timeout_maps_to_504(client, upstream):
    upstream.outcome = requests.exceptions.ReadTimeout("slow")
    response = client.post("/api/webhook", content=b"x")
    assert response.status_code == 504
    assert response.json()["timeout"] is True


def test_empty_body_is_rejected(client, upstream):
    response = client.post("/api/webhook", content=b"")
    assert response.status_code == 400
    assert upstream.calls == []


def test_preflight_and_other_methods(client):
    preflight = client.options("/api/webhook")
    assert preflight.status_code == 200
    assert preflight.headers["access-control-allow-methods"] == "POST, OPTIONS"
    assert preflight.headers["access-control-allow-headers"] == "Content-Type"

    response = client.get("/api/webhook")
    assert response.status_code == 405
    assert response.json() == {"error": "Method not allowed"}


def test_send_email(client, monkeypatch):
    sent = []
    monkeypatch.setattr(main, "send_analysis_notification", lambda count: sent.append(count) or "<id@ai-recruiter>")

    response = client.post("/api/send-email", json={"resumeCount": 3})

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Email sent successfully", "messageId": "<id@ai-recruiter>"}
    assert sent == [3]


@pytest.mark.parametrize("body", [{}, {"resumeCount": 0}])
def test_send_email_requires_resume_count(client, body):
    assert client.post("/api/send-email", json=body).status_code == 400


def test_send_email_failure(client, monkeypatch):
    def fail(count):
        raise smtplib.SMTPAuthenticationError(535, b"bad credentials")

    monkeypatch.setattr(main, "send_analysis_notification", fail)
    response = client.post("/api/send-email", json={"resumeCount": 1})
    assert response.status_code == 500
    assert response.json()["error"] == "Failed to send email"
