import json
import logging
from typing import Any, Optional, Tuple

import requests

from .. import settings
from ..deadline import post_within

logger = logging.getLogger(__name__)


def forward_to_upstream(
    body: bytes,
    content_type: Optional[str],
    url: Optional[str] = None,
    timeout: Optional[float] = None,
    session: Optional[requests.Session] = None,
) -> Tuple[int, Any]:
    """
    Forwards a raw request body to the workflow engine and returns (status, json_body).

    The body and its Content-Type are passed through unmodified so the multipart
    boundary survives. Upstream error statuses are passed through; a timeout maps
    to 504 and any other transport failure to 500.
    """
    if not body:
        return 400, {"error": "Request body is empty"}

    url = url or settings.UPSTREAM_WEBHOOK_URL
    timeout = timeout or settings.UPSTREAM_TIMEOUT_SECONDS
    http = session or requests
    headers = {"Content-Type": content_type or "application/octet-stream"}

    logger.info(">>> Forwarding %d bytes to workflow engine", len(body))
    try:
        response = post_within(http, url, timeout, data=body, headers=headers)
    except requests.exceptions.Timeout:
        minutes = round(timeout / 60)
        logger.error("!!! Workflow engine did not respond within %s minutes", minutes)
        return 504, {
            "error": f"The workflow engine did not respond within {minutes} minutes",
            "timeout": True,
        }
    except requests.exceptions.RequestException as e:
        logger.error("!!! Proxy error: %s", e)
        return 500, {
            "error": str(e) or "Failed to forward request to webhook",
            "details": type(e).__name__,
        }

    if not response.ok:
        error_text = response.text or f"HTTP error! status: {response.status_code}"
        logger.warning("!!! Workflow engine returned %s", response.status_code)
        return response.status_code, {"error": error_text}

    text = response.text
    try:
        data = json.loads(text)
    except ValueError:
        data = {"response": text}
    logger.info("<<< Workflow engine answered %s", response.status_code)
    return 200, data
