import io
import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE

from .aggregator import display_stem
from .models import ResumeGroup
from .scoring import explicit_score

SHEET_NAME = "Response Data"
EXPORT_COLUMNS = [
    "Candidate Name",
    "Resume File",
    "Question/Criteria",
    "Score/Answer",
    "Explanation",
]


def stringify(value: Any) -> str:
    """Flat text for a table cell: objects as indented JSON, arrays one item per line."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        return "\n".join(stringify(item) for item in value)
    if isinstance(value, dict):
        return json.dumps(value, indent=2, ensure_ascii=False, default=str)
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def group_score(group: ResumeGroup) -> Optional[int]:
    """First score found scanning the group's answers in order."""
    for entry in group.questions:
        if entry.extracted_score is not None:
            return entry.extracted_score
    return None


def filter_groups(groups: Sequence[ResumeGroup], min_score: Optional[int] = None) -> List[ResumeGroup]:
    """Keeps groups scoring at least min_score; None keeps everything."""
    if min_score is None:
        return list(groups)
    kept = []
    for group in groups:
        score = group_score(group)
        if score is not None and score >= min_score:
            kept.append(group)
    return kept


def resolve_answer_cell(answer: Any, error: Optional[str] = None) -> str:
    text = stringify(answer)
    score = explicit_score(text)
    if score is not None:
        return str(score)
    if not text and error:
        return f"Error: {error}"
    return text


def export_rows(groups: Sequence[ResumeGroup]) -> List[Dict[str, str]]:
    """One flat row per (candidate, question)."""
    rows = []
    for group in groups:
        resume_file = display_stem(group.resume_file)
        for entry in group.questions:
            rows.append({
                "Candidate Name": group.resume_name,
                "Resume File": resume_file,
                "Question/Criteria": stringify(entry.question),
                "Score/Answer": resolve_answer_cell(entry.answer, entry.error),
                "Explanation": stringify(entry.explanation),
            })
    return rows


def build_workbook(rows: Sequence[Dict[str, str]]) -> bytes:
    """Writes the rows to a single-sheet xlsx workbook."""
    cleaned = [{k: ILLEGAL_CHARACTERS_RE.sub("", v) for k, v in row.items()} for row in rows]
    df = pd.DataFrame(cleaned, columns=EXPORT_COLUMNS)
    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name=SHEET_NAME)
    return buf.getvalue()


def export_filename(now: Optional[datetime] = None) -> str:
    """File name stamped in UTC; naive datetimes are taken as UTC already."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    timestamp = now.strftime("%Y-%m-%dT%H-%M-%S")
    return f"webhook-response-{timestamp}.xlsx"
