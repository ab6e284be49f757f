"""AssignmentRankingPolicy — deterministic ordering of admins for an appeal."""

from __future__ import annotations

from collections.abc import Iterable

from appeal_engine.domain.entities.admin_workload import AdminWorkload
from appeal_engine.domain.entities.assignment import AssignmentCandidate
from appeal_engine.domain.entities.category_expertise import AdminCategoryExpertise
from appeal_engine.domain.errors import InvalidCategoryError
from appeal_engine.domain.value_objects.enums import AppealCategory


def coerce_category(value: AppealCategory | str) -> AppealCategory:
    """Accept an AppealCategory or its value; anything else is a caller bug."""
    if isinstance(value, AppealCategory):
        return value
    try:
        return AppealCategory(value)
    except ValueError:
        raise InvalidCategoryError(value) from None


def build_candidates(
    category: AppealCategory,
    workloads: Iterable[AdminWorkload],
    expertise: Iterable[AdminCategoryExpertise],
) -> list[AssignmentCandidate]:
    """Join workload rows with the category's expertise rows.

    Unavailable admins are dropped here, whatever their expertise. Admins
    without an expertise row for *category* get level 0 and ratio 0.0.
    Expertise rows of other categories are ignored.
    """
    by_admin = {e.admin_id: e for e in expertise if e.category == category}
    candidates = []
    for w in workloads:
        if not w.is_available:
            continue
        e = by_admin.get(w.admin_id)
        candidates.append(
            AssignmentCandidate(
                admin_id=w.admin_id,
                active_appeals_count=w.active_appeals_count,
                experience_level=e.experience_level if e else 0,
                success_ratio=e.success_ratio if e else 0.0,
                last_activity_at=w.last_activity_at,
            )
        )
    return candidates


def _ranking_key(c: AssignmentCandidate) -> tuple:
    # Never-active admins sort as the oldest activity
    never_active = c.last_activity_at is None
    return (
        -c.experience_level,
        c.active_appeals_count,
        -c.success_ratio,
        not never_active,
        c.last_activity_at if not never_active else 0,
        c.admin_id,
    )


def rank_candidates(
    category: AppealCategory | str,
    candidates: Iterable[AssignmentCandidate],
) -> list[AssignmentCandidate]:
    """Pure function: order candidates best-first for an appeal in *category*.

    Tie-break chain (each rule only applies when all previous ones tie):
      1. Higher experience level in the category (no record = level 0).
      2. Fewer active appeals.
      3. Higher success ratio.
      4. Older last activity (never active = oldest).
      5. Lower admin id.

    The candidates are expected to be built for *category* already (see
    build_candidates); the category is validated so a bad value fails here
    rather than producing a silent, meaningless ranking.

    Returns:
        The full ordered list, so a caller can fall through to the next
        admin when a claim fails. Empty input gives an empty list.
    """
    coerce_category(category)
    return sorted(candidates, key=_ranking_key)
