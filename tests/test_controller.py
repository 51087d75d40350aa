from ai_recruiter.frontend.controller import (
    ViewState,
    group_id,
    page_slice,
    selected_groups,
    total_pages,
    visible_groups,
)
from ai_recruiter.pipeline.documents import read_job_description
from ai_recruiter.pipeline.models import QuestionEntry, ResumeGroup


def _group(index, score):
    return ResumeGroup(
        resume_name=f"Candidate {index}",
        resume_id=f"res-{index}",
        questions=(QuestionEntry(question="Score?", answer=str(score), extracted_score=score),),
    )


GROUPS = [_group(i, score) for i, score in enumerate([95, 40, 88, 81, 60, 99, 85])]


def test_view_state_changes_return_new_snapshots():
    view = ViewState()
    selected = view.toggle("res-1")

    assert view.selected_ids == frozenset()
    assert selected.selected_ids == {"res-1"}
    assert selected.toggle("res-1").selected_ids == frozenset()


def test_changing_filter_returns_to_first_page():
    view = ViewState(page=3).with_filter(80)
    assert (view.min_score, view.page) == (80, 1)


def test_visible_groups_filter_then_paginate():
    view = ViewState(min_score=80)
    first = visible_groups(GROUPS, view, per_page=3)
    second = visible_groups(GROUPS, view.with_page(2), per_page=3)

    assert [g.resume_name for g in first] == ["Candidate 0", "Candidate 2", "Candidate 3"]
    assert [g.resume_name for g in second] == ["Candidate 5", "Candidate 6"]


def test_page_slice_clamps_out_of_range_pages():
    assert page_slice([1, 2, 3], page=9, per_page=2) == [3]
    assert page_slice([], page=1, per_page=5) == []
    assert total_pages(0, 5) == 1
    assert total_pages(11, 5) == 3


def test_selected_groups():
    view = ViewState().with_selection(["res-2", "res-6"])
    assert [group_id(g) for g in selected_groups(GROUPS, view)] == ["res-2", "res-6"]


def test_text_job_description_is_decoded():
    assert read_job_description("jd.txt", "Senior engineer – Python".encode("utf-8")) == "Senior engineer – Python"
