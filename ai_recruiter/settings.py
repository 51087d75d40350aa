# settings.py
import os

from dotenv import load_dotenv

load_dotenv()

# Frontend -> proxy
API_URL = os.getenv("API_URL", "http://localhost:8000")
WEBHOOK_PATH = "/api/webhook"
REQUEST_TIMEOUT_SECONDS = int(os.getenv("REQUEST_TIMEOUT_SECONDS", "600"))
CONNECT_TIMEOUT_SECONDS = int(os.getenv("CONNECT_TIMEOUT_SECONDS", "30"))

# Proxy -> upstream workflow engine
UPSTREAM_WEBHOOK_URL = os.getenv(
    "UPSTREAM_WEBHOOK_URL", "http://localhost:5678/webhook/resume-analysis"
)
UPSTREAM_TIMEOUT_SECONDS = int(os.getenv("UPSTREAM_TIMEOUT_SECONDS", "900"))

# Chat
GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY")
CHAT_MODELS = [
    name.strip()
    for name in os.getenv("CHAT_MODELS", "gemini-2.5-flash,gemini-2.5-pro,gemini-1.5-flash").split(",")
    if name.strip()
]

# Notification email
SMTP_SERVER = os.getenv("SMTP_SERVER", "smtp.gmail.com")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USERNAME = os.getenv("SMTP_USERNAME", "")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD", "")
SMTP_USE_SSL = os.getenv("SMTP_USE_SSL", "false").lower() == "true"
SMTP_USE_TLS = os.getenv("SMTP_USE_TLS", "true").lower() != "false"
SENDER_EMAIL = os.getenv("SENDER_EMAIL", SMTP_USERNAME)
RECIPIENT_EMAIL = os.getenv("RECIPIENT_EMAIL", "")

# UI
RESUMES_PER_PAGE = int(os.getenv("RESUMES_PER_PAGE", "5"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
