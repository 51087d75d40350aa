from typing import TypedDict, List, Dict, Any

from .models import CanonicalRecord, ResumeGroup, ResumeUpload, RunSummary


class AnalysisState(TypedDict):
    """
    Represents the state of one analysis run.

    Attributes:
        job_description: The job description text sent with every upload.
        question_text: The raw question block typed by the user.
        resumes: The resumes selected for the run.
        questions: The parsed, individual questions.
        batches: Raw fan-out results, one item per resume.
        records: Canonical records, one per (resume, question).
        groups: Records grouped per candidate.
        summary: Success/failure counts for the run.
    """
    job_description: str
    question_text: str
    resumes: List[ResumeUpload]
    questions: List[str]
    batches: List[Dict[str, Any]]
    records: List[CanonicalRecord]
    groups: List[ResumeGroup]
    summary: RunSummary
