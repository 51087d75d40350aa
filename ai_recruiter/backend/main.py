import logging
import smtplib
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel
import uvicorn

from .. import settings
from .notify import send_analysis_notification
from .proxy import forward_to_upstream

logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}
OTHER_METHODS = ["GET", "PUT", "PATCH", "DELETE"]

app = FastAPI(
    title="AI Recruiter",
    description="Proxy between the recruiter UI and the resume analysis workflow engine",
    version="1.0.0"
)


@app.get("/")
async def check():
    return {"status": "live", "message": "AI Recruiter API is running"}


class EmailRequest(BaseModel):
    resumeCount: Optional[int] = None


def _method_not_allowed() -> JSONResponse:
    return JSONResponse({"error": "Method not allowed"}, status_code=405)


def _preflight() -> Response:
    return Response(status_code=200, headers=CORS_HEADERS)


@app.options("/api/webhook")
async def webhook_preflight():
    return _preflight()


@app.post("/api/webhook")
async def webhook(request: Request):
    body = await request.body()
    content_type = request.headers.get("content-type")
    status_code, payload = await run_in_threadpool(forward_to_upstream, body, content_type)
    return JSONResponse(payload, status_code=status_code, headers=CORS_HEADERS)


@app.api_route("/api/webhook", methods=OTHER_METHODS)
async def webhook_other_methods():
    return _method_not_allowed()


@app.options("/api/send-email")
async def send_email_preflight():
    return _preflight()


@app.post("/api/send-email")
async def send_email(email_request: EmailRequest):
    resume_count = email_request.resumeCount
    if not resume_count or resume_count < 1:
        return JSONResponse({"error": "Resume count is required"}, status_code=400, headers=CORS_HEADERS)

    try:
        message_id = await run_in_threadpool(send_analysis_notification, resume_count)
    except (smtplib.SMTPException, OSError, ValueError) as e:
        logger.error("!!! Error sending email: %s", e)
        return JSONResponse(
            {"error": "Failed to send email", "message": str(e)},
            status_code=500,
            headers=CORS_HEADERS,
        )

    return JSONResponse(
        {"success": True, "message": "Email sent successfully", "messageId": message_id},
        headers=CORS_HEADERS,
    )


@app.api_route("/api/send-email", methods=OTHER_METHODS)
async def send_email_other_methods():
    return _method_not_allowed()


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
