import re
from typing import List

# "?," or "?;" joins several questions on one line
QUESTION_JOINER = re.compile(r"\?[,;]\s*")

SUGGESTED_QUESTIONS = [
    "What is the candidate ATS score?",
    "Evaluate the candidate's technical skills and experience.",
    "What are the candidate's strengths and weaknesses?",
    "How well does the candidate match the job requirements?",
]


def parse_questions(text: str) -> List[str]:
    """
    Splits a free-text question block into individual questions.

    One question per line; a line may also hold several questions joined by
    "?," or "?;". Duplicates are kept. An empty block gives an empty list.
    """
    questions: List[str] = []
    for line in (text or "").splitlines():
        line = line.strip()
        if not line:
            continue
        if not QUESTION_JOINER.search(line):
            questions.append(line)
            continue
        for fragment in QUESTION_JOINER.split(line):
            fragment = fragment.strip()
            if not fragment:
                continue
            if not fragment.endswith("?"):
                fragment += "?"
            questions.append(fragment)
    return [q for q in (q.strip() for q in questions) if q]


def append_suggested_question(current: str, suggestion: str) -> str:
    """Adds a suggested question on its own line unless the block already has it."""
    suggestion = suggestion.strip()
    if not suggestion:
        return current
    existing = [line.strip() for line in (current or "").splitlines()]
    if suggestion in existing:
        return current
    base = (current or "").rstrip()
    return f"{base}\n{suggestion}" if base else suggestion
