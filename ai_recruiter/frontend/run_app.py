#!/usr/bin/env python3
"""
Starts the AI Recruiter proxy API (unless one already answers at API_URL)
and then the Streamlit interface. Ctrl+C stops both.
"""

import subprocess
import sys
import time
from pathlib import Path
from urllib.parse import urlparse

import requests

from ai_recruiter import settings

REPO_ROOT = Path(__file__).resolve().parent.parent.parent
FRONTEND_DIR = Path(__file__).resolve().parent
STREAMLIT_PORT = 8501
STARTUP_WAIT_SECONDS = 30


def api_is_live():
    try:
        return requests.get(f"{settings.API_URL.rstrip('/')}/", timeout=5).ok
    except requests.exceptions.RequestException:
        return False


def wait_until(check, seconds):
    deadline = time.monotonic() + seconds
    while time.monotonic() < deadline:
        if check():
            return True
        time.sleep(1)
    return False


def launch_api():
    """Spawns uvicorn for the proxy on the port named in API_URL. Returns None on failure."""
    port = urlparse(settings.API_URL).port or 8000
    command = [
        sys.executable, "-m", "uvicorn", "ai_recruiter.backend.main:app",
        "--host", "0.0.0.0", "--port", str(port),
        # the proxy may hold a request open for the whole upstream timeout
        "--timeout-keep-alive", str(settings.UPSTREAM_TIMEOUT_SECONDS),
    ]
    print(f">>> Launching proxy API on port {port}")
    try:
        process = subprocess.Popen(command, cwd=REPO_ROOT)
    except OSError as e:
        print(f"!!! Could not launch proxy API: {e}")
        return None

    if wait_until(api_is_live, STARTUP_WAIT_SECONDS):
        print(f"<<< Proxy API is up at {settings.API_URL}")
        return process

    print(f"!!! Proxy API did not come up within {STARTUP_WAIT_SECONDS} seconds")
    process.terminate()
    return None


def launch_ui():
    command = [
        sys.executable, "-m", "streamlit", "run", "app.py",
        "--server.port", str(STREAMLIT_PORT),
        "--server.address", "0.0.0.0",
    ]
    print(f">>> Launching recruiter UI at http://localhost:{STREAMLIT_PORT}")
    try:
        subprocess.run(command, cwd=FRONTEND_DIR)
    except OSError as e:
        print(f"!!! Could not launch recruiter UI: {e}")


def main():
    print("🚀 AI Recruiter")

    api_process = None
    if api_is_live():
        print(f"✅ Reusing proxy API at {settings.API_URL}")
    else:
        api_process = launch_api()
        if api_process is None:
            print("❌ The UI needs the proxy API; giving up")
            sys.exit(1)

    try:
        launch_ui()
    except KeyboardInterrupt:
        print("\n🛑 Stopping")
    finally:
        if api_process is not None:
            api_process.terminate()
            api_process.wait()


if __name__ == "__main__":
    main()
