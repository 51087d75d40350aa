import os
import re
from typing import Dict, Hashable, List, Optional, Sequence

from .models import CanonicalRecord, QuestionEntry, ResumeGroup, RunSummary

EXTENSION_PATTERN = re.compile(r"\.[^./\\\s]+$")


def display_stem(file_name: Optional[str]) -> str:
    """File name without directory or extension, as shown to users."""
    if not file_name:
        return ""
    return os.path.splitext(os.path.basename(file_name.strip()))[0]


def identity_key(record: CanonicalRecord, index: int) -> Hashable:
    """
    Candidate identity: the resume file name (else the candidate name),
    trimmed, lower-cased and without extension. Records with neither get a
    positional key that cannot collide with a real name.
    """
    source = record.resume_file if record.resume_file and record.resume_file.strip() else record.candidate_name
    if source and source.strip():
        key = EXTENSION_PATTERN.sub("", source.strip().lower()).strip()
        if key:
            return ("identity", key)
    return ("position", index)


def group_records(records: Sequence[CanonicalRecord]) -> List[ResumeGroup]:
    """Merges records into one group per candidate, in first-seen order."""
    builders: Dict[Hashable, dict] = {}

    for index, record in enumerate(records):
        key = identity_key(record, index)
        builder = builders.get(key)
        if builder is None:
            builder = builders[key] = {
                "resume_name": None,
                "resume_file": None,
                "resume_id": None,
                "processed_at": None,
                "questions": [],
            }

        if not builder["resume_name"] and record.candidate_name:
            builder["resume_name"] = record.candidate_name
        if not builder["resume_file"] and record.resume_file:
            builder["resume_file"] = record.resume_file
        if not builder["resume_id"] and record.resume_id:
            builder["resume_id"] = record.resume_id

        # Earliest timestamp wins.
        if record.processed_at is not None and (
            builder["processed_at"] is None or record.processed_at < builder["processed_at"]
        ):
            builder["processed_at"] = record.processed_at

        builder["questions"].append(
            QuestionEntry(
                question=record.question,
                answer=record.q1_answer,
                explanation=record.q1_explanation,
                extracted_score=record.extracted_score,
                error=record.error,
                processed_at=record.processed_at,
            )
        )

    groups = []
    for position, builder in enumerate(builders.values(), start=1):
        name = builder["resume_name"] or display_stem(builder["resume_file"]) or f"Candidate {position}"
        groups.append(
            ResumeGroup(
                resume_name=name,
                resume_file=builder["resume_file"],
                resume_id=builder["resume_id"],
                processed_at=builder["processed_at"],
                questions=tuple(builder["questions"]),
            )
        )
    return groups


def summarize_run(records: Sequence[CanonicalRecord]) -> RunSummary:
    failed = sum(1 for record in records if record.error)
    return RunSummary(total=len(records), succeeded=len(records) - failed, failed=failed)
