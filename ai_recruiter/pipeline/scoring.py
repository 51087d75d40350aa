import json
import re
from typing import Any, Optional

SCORE_PATTERN = re.compile(r"score:\s*(\d+)", re.IGNORECASE)
BARE_NUMBER_PATTERN = re.compile(r"^(\d+)%?$")
SCORE_QUESTION_PATTERN = re.compile(r"score", re.IGNORECASE)


def answer_text(answer: Any) -> str:
    """Text the score patterns are matched against; objects are pretty-printed JSON."""
    if answer is None:
        return ""
    if isinstance(answer, str):
        return answer
    if isinstance(answer, (dict, list)):
        return json.dumps(answer, indent=2, ensure_ascii=False, default=str)
    return str(answer)


def explicit_score(answer: Any) -> Optional[int]:
    """Digits following "Score:", with no range check."""
    match = SCORE_PATTERN.search(answer_text(answer))
    return int(match.group(1)) if match else None


def extract_score(answer: Any, question: Optional[str] = None) -> Optional[int]:
    """
    Recovers a numeric score from a free-text answer.

    "Score: 87" anywhere in the answer wins. Otherwise, when the question asks
    about a score, an answer that is just a number from 0 to 100 (optionally
    with "%") is taken. Anything else has no score; callers show "N/A".
    """
    score = explicit_score(answer)
    if score is not None:
        return score

    if not question or not SCORE_QUESTION_PATTERN.search(question):
        return None
    match = BARE_NUMBER_PATTERN.match(answer_text(answer).strip())
    if not match:
        return None
    value = int(match.group(1))
    return value if 0 <= value <= 100 else None


def format_score(score: Optional[int]) -> str:
    return "N/A" if score is None else str(score)
