import io
import re
from datetime import datetime, timedelta, timezone

import pandas as pd

from ai_recruiter.pipeline.export import (
    EXPORT_COLUMNS,
    SHEET_NAME,
    build_workbook,
    export_filename,
    export_rows,
    filter_groups,
    group_score,
    stringify,
)
from ai_recruiter.pipeline.models import QuestionEntry, ResumeGroup


def _group(name, *entries, resume_file=None):
    return ResumeGroup(resume_name=name, resume_file=resume_file or f"{name.lower()}.pdf", questions=tuple(entries))


def _scored(score):
    return QuestionEntry(question="Score?", answer=f"Score: {score}" if score is not None else "no idea",
                         extracted_score=score)


def test_filter_by_threshold():
    groups = [_group("A", _scored(90)), _group("B", _scored(70)), _group("C", _scored(None))]

    assert [g.resume_name for g in filter_groups(groups, 80)] == ["A"]
    assert [g.resume_name for g in filter_groups(groups, 0)] == ["A", "B"]
    assert len(filter_groups(groups, None)) == 3


def test_group_score_is_the_first_score_found():
    group = _group("A", _scored(None), _scored(40), _scored(95))
    assert group_score(group) == 40
    assert filter_groups([group], 50) == []


def test_export_rows_columns_and_score_resolution():
    group = _group(
        "Ann",
        QuestionEntry(question="ATS score?", answer="Score: 88. Strong backend profile.",
                      explanation="Matches 9/10 skills", extracted_score=88),
        QuestionEntry(question="Strengths?", answer="Leadership", explanation=None),
        resume_file="Ann_Resume.v2.pdf",
    )
    rows = export_rows([group])

    assert list(rows[0].keys()) == EXPORT_COLUMNS
    assert rows[0] == {
        "Candidate Name": "Ann",
        "Resume File": "Ann_Resume.v2",
        "Question/Criteria": "ATS score?",
        "Score/Answer": "88",
        "Explanation": "Matches 9/10 skills",
    }
    assert rows[1]["Score/Answer"] == "Leadership"
    assert rows[1]["Explanation"] == ""


def test_export_flattens_objects_and_arrays():
    group = _group("Bo", QuestionEntry(question="Skills?", answer={"python": True}, explanation=["one", "two"]))
    row = export_rows([group])[0]

    assert row["Score/Answer"] == '{\n  "python": true\n}'
    assert row["Explanation"] == "one\ntwo"


def test_export_shows_errors_for_failed_questions():
    group = _group("Cy", QuestionEntry(question="Q?", error="Request timed out after 10 minutes"))
    assert export_rows([group])[0]["Score/Answer"] == "Error: Request timed out after 10 minutes"


def test_export_is_repeatable():
    groups = [_group("A", _scored(90), QuestionEntry(question="Q", answer={"k": [1, 2]}))]
    assert export_rows(groups) == export_rows(groups)
    assert build_workbook(export_rows(groups))[:2] == b"PK"


def test_workbook_has_one_sheet_with_the_rows():
    rows = export_rows([_group("A", _scored(90)), _group("B", _scored(None))])
    df = pd.read_excel(io.BytesIO(build_workbook(rows)), sheet_name=SHEET_NAME, dtype=str, keep_default_na=False)

    assert list(df.columns) == EXPORT_COLUMNS
    assert df["Score/Answer"].tolist() == ["90", "no idea"]


def test_stringify():
    assert stringify(None) == ""
    assert stringify(12) == "12"
    assert stringify([{"a": 1}, "b"]) == '{\n  "a": 1\n}\nb'


def test_export_filename():
    assert export_filename(datetime(2024, 6, 1, 9, 5, 7)) == "webhook-response-2024-06-01T09-05-07.xlsx"


def test_export_filename_is_stamped_in_utc():
    ist = timezone(timedelta(hours=5, minutes=30))
    assert export_filename(datetime(2024, 6, 1, 9, 5, 7, tzinfo=ist)) == "webhook-response-2024-06-01T03-35-07.xlsx"

    name = export_filename()
    stamped = datetime.strptime(re.search(r"\d{4}-\d\d-\d\dT\d\d-\d\d-\d\d", name).group(), "%Y-%m-%dT%H-%M-%S")
    assert abs(stamped.replace(tzinfo=timezone.utc) - datetime.now(timezone.utc)) < timedelta(minutes=1)
