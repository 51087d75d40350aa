"""
View parameters for the results screen.

The results themselves (a list of ResumeGroup) are an immutable snapshot
replaced on every run; ViewState only holds what the user is currently
looking at. Every change returns a new ViewState.
"""
import math
from dataclasses import dataclass, field, replace
from typing import FrozenSet, List, Optional, Sequence, TypeVar

from ai_recruiter.pipeline.export import filter_groups
from ai_recruiter.pipeline.models import ResumeGroup

T = TypeVar("T")

SCORE_FILTERS = {
    "All candidates": None,
    "Score 90+": 90,
    "Score 80+": 80,
    "Score 70+": 70,
    "Score 60+": 60,
    "Score 50+": 50,
}


@dataclass(frozen=True)
class ViewState:
    min_score: Optional[int] = None
    selected_ids: FrozenSet[str] = field(default_factory=frozenset)
    page: int = 1

    def with_filter(self, min_score: Optional[int]) -> "ViewState":
        return replace(self, min_score=min_score, page=1)

    def toggle(self, group_id: str) -> "ViewState":
        selected = set(self.selected_ids)
        if group_id in selected:
            selected.remove(group_id)
        else:
            selected.add(group_id)
        return replace(self, selected_ids=frozenset(selected))

    def with_selection(self, group_ids) -> "ViewState":
        return replace(self, selected_ids=frozenset(group_ids))

    def with_page(self, page: int) -> "ViewState":
        return replace(self, page=page)


def group_id(group: ResumeGroup) -> str:
    return group.resume_id or group.resume_file or group.resume_name


def total_pages(item_count: int, per_page: int) -> int:
    return max(1, math.ceil(item_count / per_page))


def page_slice(items: Sequence[T], page: int, per_page: int) -> List[T]:
    """Items on a 1-based page; out-of-range pages are clamped."""
    page = min(max(1, page), total_pages(len(items), per_page))
    start = (page - 1) * per_page
    return list(items[start:start + per_page])


def visible_groups(groups: Sequence[ResumeGroup], view: ViewState, per_page: int) -> List[ResumeGroup]:
    return page_slice(filter_groups(groups, view.min_score), view.page, per_page)


def selected_groups(groups: Sequence[ResumeGroup], view: ViewState) -> List[ResumeGroup]:
    return [g for g in groups if group_id(g) in view.selected_ids]
