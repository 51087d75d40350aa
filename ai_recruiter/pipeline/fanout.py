import json
import logging
from typing import Any, Callable, Dict, List, Optional, Sequence

import requests

from .. import settings
from ..deadline import post_within
from .models import ProgressEvent, ResumeUpload

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ProgressEvent], None]

UNUSED_RESPOND_NODE = "Unused Respond to Webhook"
UNUSED_RESPOND_NODE_HELP = (
    'Workflow Error: The workflow has an unused "Respond to Webhook" node. '
    "Please check the workflow configuration and ensure the Respond to Webhook "
    "node is properly connected."
)


def default_webhook_url() -> str:
    return settings.API_URL.rstrip("/") + settings.WEBHOOK_PATH


def error_message(response) -> str:
    """Human-readable message for a non-success response."""
    fallback = (
        f"Server error ({response.status_code}). "
        "Please check the workflow configuration."
    )
    try:
        text = response.text
    except (requests.RequestException, ValueError):
        return fallback

    message = text
    try:
        body = json.loads(text)
    except ValueError:
        body = None
    if isinstance(body, dict):
        message = body.get("message") or body.get("error") or text
        if not isinstance(message, str):
            message = json.dumps(message)
    message = message or fallback

    if UNUSED_RESPOND_NODE in message:
        return UNUSED_RESPOND_NODE_HELP
    return message


def parse_success_body(text: str) -> Any:
    """JSON body of a successful upload; arrays keep only their first element."""
    try:
        data = json.loads(text)
    except ValueError:
        return {"response": text}
    if isinstance(data, list):
        if len(data) > 1:
            logger.info("Workflow returned %d elements; keeping the first", len(data))
        return data[0] if data else {}
    return data


def upload_question(
    resume: ResumeUpload,
    job_description: str,
    question: str,
    url: Optional[str] = None,
    timeout: Optional[float] = None,
    session: Optional[requests.Session] = None,
) -> Dict[str, Any]:
    """
    Sends one resume, the job description and a single question to the proxy.

    Returns {"question": ..., "answer": payload}. Timeouts, network failures and
    error statuses come back as {"answer": {"error": message}} instead of raising.
    """
    url = url or default_webhook_url()
    timeout = timeout or settings.REQUEST_TIMEOUT_SECONDS
    http = session or requests
    data = {"job_description": job_description, "question": question}
    files = [("files[]", (resume.file_name, resume.content, resume.content_type))]

    name = resume.file_name
    logger.info(">>> Uploading %s for question: %s", name, question)
    try:
        response = post_within(http, url, timeout, data=data, files=files)
    except requests.exceptions.Timeout:
        minutes = round(timeout / 60)
        logger.warning("!!! Upload of %s timed out", name)
        return {"question": question, "answer": {"error": f"Request timed out after {minutes} minutes"}}
    except requests.exceptions.ConnectionError as e:
        logger.warning("!!! Cannot reach %s: %s", url, e)
        return {"question": question, "answer": {"error": f"Cannot connect to the API server at {url}"}}
    except requests.exceptions.RequestException as e:
        logger.warning("!!! Upload of %s failed: %s", name, e)
        return {"question": question, "answer": {"error": f"Request failed: {e}"}}

    if not response.ok:
        message = error_message(response)
        logger.warning("!!! Upload of %s returned %s: %s", name, response.status_code, message)
        return {"question": question, "answer": {"error": message}}

    logger.info("<<< Received answer for %s", name)
    return {"question": question, "answer": parse_success_body(response.text)}


def fan_out_resume(
    resume: ResumeUpload,
    job_description: str,
    questions: Sequence[str],
    url: Optional[str] = None,
    timeout: Optional[float] = None,
    session: Optional[requests.Session] = None,
    on_progress: Optional[ProgressCallback] = None,
    offset: int = 0,
    total: Optional[int] = None,
) -> List[Dict[str, Any]]:
    """One upload per question, strictly one after another."""
    total = total if total is not None else len(questions)
    results = []
    for position, question in enumerate(questions, start=1):
        results.append(upload_question(resume, job_description, question, url, timeout, session))
        if on_progress is not None:
            on_progress(ProgressEvent(
                current=offset + position,
                total=total,
                resume_name=resume.file_name,
                question=question,
            ))
    return results


def fan_out(
    resumes: Sequence[ResumeUpload],
    job_description: str,
    questions: Sequence[str],
    url: Optional[str] = None,
    timeout: Optional[float] = None,
    session: Optional[requests.Session] = None,
    on_progress: Optional[ProgressCallback] = None,
) -> List[Dict[str, Any]]:
    """
    Runs the fan-out for every resume in turn.

    Returns one item per resume: {"resume_id", "resume_file", "responses"},
    where responses holds exactly one entry per question.
    """
    total = len(resumes) * len(questions)
    batches = []
    for index, resume in enumerate(resumes):
        responses = fan_out_resume(
            resume,
            job_description,
            questions,
            url=url,
            timeout=timeout,
            session=session,
            on_progress=on_progress,
            offset=index * len(questions),
            total=total,
        )
        batches.append({
            "resume_id": resume.resume_id,
            "resume_file": resume.file_name,
            "responses": responses,
        })
    return batches
