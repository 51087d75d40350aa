"""
Shapes of the raw JSON returned by the workflow engine.

The engine has no fixed response schema. Every payload is resolved once into
one of four variants so the normalizer never handles an untyped value:

    FlatRecord          {"candidate_name": ..., "q1_answer": ..., ...}
    NestedAnswerRecord  {"question": ..., "answer": <any of these shapes>}
                        (both keys required; a lone "answer" stays a FlatRecord field)
    ArrayOfRecord       [<payload>, ...]   (only the first element is kept)
    PlainText           "free text"
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union


@dataclass(frozen=True)
class FlatRecord:
    fields: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class PlainText:
    text: str = ""


@dataclass(frozen=True)
class NestedAnswerRecord:
    top: Dict[str, Any]
    answer: "RawPayload"


@dataclass(frozen=True)
class ArrayOfRecord:
    # Remaining elements are discarded; multi-element arrays are not merged.
    first: Optional["RawPayload"]
    discarded: int = 0


RawPayload = Union[FlatRecord, NestedAnswerRecord, ArrayOfRecord, PlainText]


def classify_payload(value: Any) -> RawPayload:
    """Resolves an untyped JSON value into its payload variant."""
    if isinstance(value, list):
        if not value:
            return ArrayOfRecord(first=None)
        return ArrayOfRecord(first=classify_payload(value[0]), discarded=len(value) - 1)
    if isinstance(value, dict):
        if "question" in value and isinstance(value.get("answer"), (dict, list, str)):
            top = {k: v for k, v in value.items() if k != "answer"}
            return NestedAnswerRecord(top=top, answer=classify_payload(value["answer"]))
        return FlatRecord(fields=dict(value))
    if value is None:
        return FlatRecord()
    if isinstance(value, str):
        return PlainText(text=value)
    return PlainText(text=str(value))
