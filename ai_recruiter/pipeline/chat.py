# chat.py
import logging
from typing import Callable, Dict, List, Optional, Sequence

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions

from .. import settings
from .export import stringify
from .models import ResumeGroup
from .scoring import format_score

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTION = (
    "You are an expert HR Analyst helping a recruiter review candidates. "
    "Answer only from the analysis results provided. If the results do not "
    "contain the information, say so plainly."
)

# Errors meaning "this model is not available to this key": try the next one.
MODEL_UNAVAILABLE_ERRORS = (
    google_exceptions.NotFound,
    google_exceptions.PermissionDenied,
)


class ChatError(RuntimeError):
    """Raised when no configured model could answer."""


def format_candidate_context(group: ResumeGroup) -> str:
    """Plain-text rendering of one candidate's analysis results."""
    lines = [f"Candidate: {group.resume_name}"]
    if group.resume_file:
        lines.append(f"Resume file: {group.resume_file}")
    if group.processed_at:
        lines.append(f"Processed at: {group.processed_at.isoformat()}")
    for number, entry in enumerate(group.questions, start=1):
        lines.append("")
        lines.append(f"Q{number}: {stringify(entry.question) or '(no question)'}")
        if entry.error:
            lines.append(f"Error: {entry.error}")
        lines.append(f"Answer: {stringify(entry.answer) or 'N/A'}")
        lines.append(f"Score: {format_score(entry.extracted_score)}")
        explanation = stringify(entry.explanation)
        if explanation:
            lines.append(f"Explanation: {explanation}")
    return "\n".join(lines)


def build_prompt(group: ResumeGroup, question: str) -> str:
    return f"""
    Here are the analysis results for one candidate:
    ---
    {format_candidate_context(group)}
    ---

    Recruiter's question: {question.strip()}
    """


def _default_model_factory(model_name: str):
    if not settings.GOOGLE_API_KEY:
        raise ChatError("GOOGLE_API_KEY is not set")
    genai.configure(api_key=settings.GOOGLE_API_KEY)
    return genai.GenerativeModel(model_name, system_instruction=SYSTEM_INSTRUCTION)


def complete(
    prompt: str,
    models: Optional[Sequence[str]] = None,
    model_factory: Optional[Callable[[str], object]] = None,
) -> str:
    """
    Sends the prompt to the first model that accepts it.

    Models are tried in order; only "model not accessible" errors move on to
    the next one. Any other failure is raised as ChatError immediately.
    """
    models = list(models or settings.CHAT_MODELS)
    factory = model_factory or _default_model_factory
    failures: List[str] = []

    for model_name in models:
        logger.info(">>> Asking %s", model_name)
        try:
            response = factory(model_name).generate_content(prompt)
        except MODEL_UNAVAILABLE_ERRORS as e:
            logger.warning("!!! Model %s not accessible: %s", model_name, e)
            failures.append(f"{model_name}: {e}")
            continue
        except google_exceptions.GoogleAPICallError as e:
            raise ChatError(f"{model_name}: {e}") from e

        try:
            text = (response.text or "").strip()
        except ValueError as e:
            # Blocked or empty candidates make .text raise
            raise ChatError(f"{model_name} returned no text: {e}") from e
        if not text:
            raise ChatError(f"{model_name} returned an empty response")
        logger.info("<<< %s answered (%d chars)", model_name, len(text))
        return text

    raise ChatError("No chat model is accessible. Tried: " + "; ".join(failures or models))


def ask_about_candidates(
    groups: Sequence[ResumeGroup],
    question: str,
    models: Optional[Sequence[str]] = None,
    model_factory: Optional[Callable[[str], object]] = None,
) -> List[Dict[str, Optional[str]]]:
    """One completion per selected candidate; failures are reported per candidate."""
    answers = []
    for group in groups:
        try:
            answer = complete(build_prompt(group, question), models, model_factory)
            answers.append({"candidate": group.resume_name, "answer": answer, "error": None})
        except ChatError as e:
            answers.append({"candidate": group.resume_name, "answer": None, "error": str(e)})
    return answers
