import io
import logging

from PyPDF2 import PdfReader
from PyPDF2.errors import PdfReadError

logger = logging.getLogger(__name__)


def extract_text_from_pdf(pdf_content: bytes) -> str:
    """Extracts text from PDF content bytes."""
    text = ""
    try:
        reader = PdfReader(io.BytesIO(pdf_content))
        for page in reader.pages:
            page_text = page.extract_text()
            if page_text:
                text += page_text + "\n"
    except (PdfReadError, ValueError) as e:
        logger.warning("!!! Error reading PDF: %s", e)
    return text


def read_job_description(file_name: str, content: bytes) -> str:
    """
    Job description text from an uploaded file.

    PDFs go through PyPDF2; anything else is read as UTF-8 text, the way a
    browser reads a text file.
    """
    if file_name.lower().endswith(".pdf"):
        return extract_text_from_pdf(content)
    return content.decode("utf-8", errors="replace")
