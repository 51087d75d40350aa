from datetime import datetime
from typing import Any, Optional, Tuple

from pydantic import BaseModel, ConfigDict


class ResumeUpload(BaseModel):
    """A resume file selected for analysis."""
    model_config = ConfigDict(frozen=True)

    resume_id: str
    file_name: str
    content: bytes
    content_type: str = "application/octet-stream"


class ProgressEvent(BaseModel):
    """Position of the last completed upload within the (resumes x questions) matrix."""
    model_config = ConfigDict(frozen=True)

    current: int
    total: int
    resume_name: str
    question: str


class CanonicalRecord(BaseModel):
    """
    Normalized answer for one (resume, question) pair.

    Attributes:
        candidate_name: Name reported by the workflow engine.
        resume_file: File name of the resume (from the payload or the request).
        resume_id: Identifier assigned when the resume was selected.
        question / q1_question: The question text; always text, always backfilled from each other.
        q1_answer: The answer, left as text or a JSON object.
        q1_explanation: The explanation, left as text or a JSON object.
        extracted_score: Score recovered from the answer, or None.
        error: Transport or upstream error for this question.
        processed_at: Timestamp reported by the workflow engine.
    """
    model_config = ConfigDict(frozen=True)

    candidate_name: Optional[str] = None
    resume_file: Optional[str] = None
    resume_id: Optional[str] = None
    question: Optional[str] = None
    q1_question: Optional[str] = None
    q1_answer: Any = None
    q1_explanation: Any = None
    extracted_score: Optional[int] = None
    error: Optional[str] = None
    processed_at: Optional[datetime] = None


class QuestionEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    question: Optional[str] = None
    answer: Any = None
    explanation: Any = None
    extracted_score: Optional[int] = None
    error: Optional[str] = None
    processed_at: Optional[datetime] = None


class ResumeGroup(BaseModel):
    """All answers for one candidate; processed_at is the earliest timestamp seen."""
    model_config = ConfigDict(frozen=True)

    resume_name: str
    resume_file: Optional[str] = None
    resume_id: Optional[str] = None
    processed_at: Optional[datetime] = None
    questions: Tuple[QuestionEntry, ...] = ()


class RunSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    total: int
    succeeded: int
    failed: int
