import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .models import CanonicalRecord
from .payloads import (
    ArrayOfRecord,
    FlatRecord,
    NestedAnswerRecord,
    PlainText,
    RawPayload,
    classify_payload,
)
from .scoring import extract_score

logger = logging.getLogger(__name__)

# Fields whose presence means a record already carries an answer. Checked per
# record, before a wrapping {"question", "answer"} overlays its own question.
ANSWER_FIELDS = ("q1_answer", "q1_answe", "q1_question", "question", "q1_explanation")


def _absent(value: Any) -> bool:
    return value is None or value == ""


def _overlay(defaults: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(defaults)
    for key, value in overrides.items():
        if value is not None:
            merged[key] = value
    return merged


def _flatten(payload: Optional[RawPayload]) -> Dict[str, Any]:
    if payload is None:
        return {}
    if isinstance(payload, FlatRecord):
        return _merge_text_field(dict(payload.fields))
    if isinstance(payload, PlainText):
        return {"q1_answer": payload.text} if payload.text else {}
    if isinstance(payload, ArrayOfRecord):
        if payload.discarded:
            logger.debug("Keeping first of %d array elements", payload.discarded + 1)
        return _flatten(payload.first)
    if isinstance(payload, NestedAnswerRecord):
        return _merge_text_field(_overlay(_flatten(payload.answer), payload.top))
    return {}


def _merge_text_field(fields: Dict[str, Any]) -> Dict[str, Any]:
    text = fields.get("text")
    if not isinstance(text, str):
        return fields
    if not all(_absent(fields.get(key)) for key in ANSWER_FIELDS):
        return fields
    try:
        parsed = json.loads(text)
    except ValueError:
        return fields
    return _overlay(_flatten(classify_payload(parsed)), fields)


def coerce_text(value: Any) -> Optional[str]:
    """Renders a scalar or JSON value as text; objects become indented JSON."""
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(value, indent=2, ensure_ascii=False, default=str)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """ISO-8601 strings, datetimes and epoch milliseconds; naive values are taken as UTC."""
    parsed = None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            parsed = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _first_present(fields: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if not _absent(fields.get(key)):
            return fields[key]
    return None


def normalize_response(
    payload: Any,
    resume_id: Optional[str] = None,
    resume_file: Optional[str] = None,
) -> CanonicalRecord:
    """
    Turns one raw workflow response into a CanonicalRecord.

    Nested "answer" objects and JSON hidden in a "text" field are merged in as
    defaults under the fields already present. Question fields are always text;
    answer and explanation keep their original type. Never raises: a payload
    that cannot be read yields a record carrying only the request metadata.
    """
    try:
        fields = _flatten(classify_payload(payload))

        answer = _first_present(fields, "q1_answer", "q1_answe")
        if _absent(answer) and isinstance(fields.get("response"), str):
            answer = fields["response"]

        question = coerce_text(_first_present(fields, "question"))
        q1_question = coerce_text(_first_present(fields, "q1_question"))
        if _absent(question):
            question = q1_question
        if _absent(q1_question):
            q1_question = question

        raw_error = fields.get("error")
        error = coerce_text(raw_error) if raw_error not in (None, "", False) else None

        return CanonicalRecord(
            candidate_name=coerce_text(_first_present(fields, "candidate_name")),
            resume_file=coerce_text(_first_present(fields, "resume_file")) or resume_file,
            resume_id=coerce_text(_first_present(fields, "resume_id")) or resume_id,
            question=question,
            q1_question=q1_question,
            q1_answer=answer,
            q1_explanation=_first_present(fields, "q1_explanation"),
            extracted_score=extract_score(answer, question),
            error=error,
            processed_at=parse_timestamp(_first_present(fields, "processed_at", "processed_dt")),
        )
    except (TypeError, ValueError) as e:
        logger.warning("!!! Could not normalize response for %s: %s", resume_file or resume_id, e)
        return CanonicalRecord(resume_id=resume_id, resume_file=resume_file)
