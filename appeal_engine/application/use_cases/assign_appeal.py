"""AssignmentCoordinator — pick an admin for an appeal and claim them safely."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import TypeVar

from appeal_engine.application.ports.expertise_repo import ExpertiseRepository
from appeal_engine.application.ports.workload_repo import WorkloadRepository
from appeal_engine.domain.entities.assignment import AssignmentCandidate, AssignmentResult
from appeal_engine.domain.errors import TransientStoreError, UnknownAdminError
from appeal_engine.domain.policies.assignment_ranking import (
    build_candidates,
    coerce_category,
    rank_candidates,
)
from appeal_engine.domain.policies.experience_level import MIN_EXPERIENCE_LEVEL
from appeal_engine.domain.value_objects.enums import AppealCategory

logger = logging.getLogger(__name__)

T = TypeVar("T")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ClaimStatus(str, Enum):
    CLAIMED = "claimed"
    CONFLICT = "conflict"  # row changed since the snapshot (or admin went unavailable)
    TIMED_OUT = "timed_out"
    FAILED = "failed"  # transient store errors on every attempt


@dataclass
class _Walk:
    claimed: AssignmentCandidate | None = None
    lost_race: bool = False  # at least one claim hit a conflict
    progressed: bool = False  # a lost claim found the counter moved


class AssignmentCoordinator:
    """Turns the pure ranking into a concurrency-safe assignment.

    There is no global lock: every call reads its own snapshot, ranks it and
    only contends with other calls at the per-admin conditional update
    (WorkloadRepository.try_claim). Nothing read here outlives one call.
    """

    def __init__(
        self,
        workload_repo: WorkloadRepository,
        expertise_repo: ExpertiseRepository,
        *,
        claim_timeout: float = 2.0,
        claim_retry_attempts: int = 3,
        retry_backoff: float = 0.05,
        max_rounds: int = 8,
        default_experience_level: int = MIN_EXPERIENCE_LEVEL,
        clock: Callable[[], datetime] = utc_now,
    ):
        if claim_retry_attempts < 1:
            raise ValueError("claim_retry_attempts must be at least 1")
        if max_rounds < 1:
            raise ValueError("max_rounds must be at least 1")
        self._workloads = workload_repo
        self._expertise = expertise_repo
        self._claim_timeout = claim_timeout
        self._retry_attempts = claim_retry_attempts
        self._retry_backoff = retry_backoff
        self._max_rounds = max_rounds
        self._default_level = default_experience_level
        self._now = clock

    async def assign(
        self,
        ticket_id: int,
        category: AppealCategory | str,
        exclude_admin_ids: Iterable[int] = (),
    ) -> AssignmentResult:
        """Assign an appeal to the best available admin.

        Algorithm:
        1. Read a fresh snapshot of available admins + category expertise
        2. Rank it (AssignmentRankingPolicy)
        3. Walk the ranking, trying a conditional claim on each admin
        4. On a lost claim, re-read only that admin: if the counter moved
           and the admin still ranks first, claim again at the new count
        5. If the ranking order changed or the list ran out after lost
           claims, take a new snapshot and repeat

        Lost claims are retried for as long as other calls keep landing
        theirs, so a burst of N assigns on one admin ends with N claims.
        Only rounds in which no other claim landed count towards
        max_rounds.

        Never raises for runtime conditions: an empty pool or a degraded
        store gives NO_CANDIDATE and the appeal stays unassigned.

        Raises:
            InvalidCategoryError: if *category* is not an appeal category.
        """
        category = coerce_category(category)
        excluded = frozenset(exclude_admin_ids)

        round_no = 0
        stalled_rounds = 0
        while stalled_rounds < self._max_rounds:
            round_no += 1
            try:
                candidates = await self._with_retries(self._load_candidates, category)
            except TransientStoreError:
                logger.warning(
                    "Appeal %s: workload snapshot unavailable, leaving unassigned",
                    ticket_id,
                )
                return AssignmentResult.no_candidate(ticket_id, degraded=True)

            ranked = [
                c for c in rank_candidates(category, candidates)
                if c.admin_id not in excluded
            ]
            if not ranked:
                logger.info(
                    "Appeal %s (%s): no available admins", ticket_id, category.value
                )
                return AssignmentResult.no_candidate(ticket_id)

            walk = await self._walk(category, ranked)
            if walk.claimed is not None:
                await self._ensure_expertise(walk.claimed.admin_id, category)
                logger.info(
                    "Appeal %s (%s) → admin %s (active before: %d, level: %d, round: %d)",
                    ticket_id, category.value, walk.claimed.admin_id,
                    walk.claimed.active_appeals_count, walk.claimed.experience_level,
                    round_no,
                )
                return AssignmentResult.assigned(ticket_id, walk.claimed.admin_id)

            if not walk.lost_race:
                # Every candidate timed out or kept failing: the store is degraded
                logger.warning(
                    "Appeal %s: every claim attempt failed, leaving unassigned", ticket_id
                )
                return AssignmentResult.no_candidate(ticket_id, degraded=True)

            if not walk.progressed:
                stalled_rounds += 1
            logger.debug(
                "Appeal %s: lost claim race on round %d, re-reading workload",
                ticket_id, round_no,
            )

        logger.warning(
            "Appeal %s: no claim progress for %d rounds, leaving unassigned",
            ticket_id, self._max_rounds,
        )
        return AssignmentResult.no_candidate(ticket_id)

    async def claim_admin(
        self,
        ticket_id: int,
        admin_id: int,
        category: AppealCategory | str | None = None,
    ) -> AssignmentResult:
        """Claim a slot on a specific admin, bypassing the ranking.

        Used when a human picked the admin. Conflicts only mean the counter
        moved under us, so the row is re-read and the claim retried.

        Raises:
            UnknownAdminError: if the admin has no workload record.
            InvalidCategoryError: if *category* is given and invalid.
        """
        if category is not None:
            category = coerce_category(category)

        expected: int | None = None
        stalled = 0
        while stalled < self._max_rounds:
            try:
                workload = await self._with_retries(self._workloads.get_by_admin, admin_id)
            except TransientStoreError:
                logger.warning(
                    "Appeal %s: could not read admin %s workload", ticket_id, admin_id
                )
                return AssignmentResult.no_candidate(ticket_id, degraded=True)
            if workload is None:
                raise UnknownAdminError(admin_id)
            if not workload.is_available:
                logger.warning(
                    "Appeal %s: admin %s is unavailable, cannot claim", ticket_id, admin_id
                )
                return AssignmentResult.no_candidate(ticket_id)
            if workload.active_appeals_count == expected:
                # Counter is back where the failed claim saw it
                stalled += 1
            expected = workload.active_appeals_count

            candidate = AssignmentCandidate(
                admin_id=admin_id,
                active_appeals_count=expected,
                experience_level=0,
                success_ratio=0.0,
                last_activity_at=workload.last_activity_at,
            )
            status = await self._claim(candidate)
            if status == ClaimStatus.CLAIMED:
                if category is not None:
                    await self._ensure_expertise(admin_id, category)
                logger.info("Appeal %s → admin %s (direct claim)", ticket_id, admin_id)
                return AssignmentResult.assigned(ticket_id, admin_id)
            if status != ClaimStatus.CONFLICT:
                return AssignmentResult.no_candidate(ticket_id, degraded=True)

        logger.warning(
            "Appeal %s: direct claim on admin %s made no progress for %d rounds",
            ticket_id, admin_id, self._max_rounds,
        )
        return AssignmentResult.no_candidate(ticket_id)

    # ─── Internals ───────────────────────────────────────────────────

    async def _load_candidates(self, category: AppealCategory) -> list[AssignmentCandidate]:
        workloads = await self._workloads.get_available()
        if not workloads:
            return []
        expertise = await self._expertise.get_for_category(category)
        return build_candidates(category, workloads, expertise)

    async def _walk(
        self,
        category: AppealCategory,
        ranked: list[AssignmentCandidate],
    ) -> _Walk:
        """Try the ranked candidates in order until one claim sticks."""
        walk = _Walk()
        queue = list(ranked)
        while queue:
            candidate = queue.pop(0)
            status = await self._claim(candidate)
            if status == ClaimStatus.CLAIMED:
                walk.claimed = candidate
                return walk
            if status != ClaimStatus.CONFLICT:
                continue

            walk.lost_race = True
            fresh = await self._reread(candidate)
            if fresh is None or fresh.active_appeals_count == candidate.active_appeals_count:
                continue
            walk.progressed = True
            if rank_candidates(category, [fresh, *queue])[0] is not fresh:
                # Order changed: the rest of this snapshot is stale too
                return walk
            queue.insert(0, fresh)
        return walk

    async def _reread(self, candidate: AssignmentCandidate) -> AssignmentCandidate | None:
        """Refresh one candidate's counters; None if it is gone or unreadable."""
        try:
            workload = await self._with_retries(
                self._workloads.get_by_admin, candidate.admin_id
            )
        except TransientStoreError:
            return None
        if workload is None or not workload.is_available:
            return None
        return replace(
            candidate,
            active_appeals_count=workload.active_appeals_count,
            last_activity_at=workload.last_activity_at,
        )

    async def _claim(self, candidate: AssignmentCandidate) -> ClaimStatus:
        """One conditional claim, retried on transient errors, bounded by a timeout."""
        for attempt in range(1, self._retry_attempts + 1):
            try:
                claimed = await asyncio.wait_for(
                    self._workloads.try_claim(
                        candidate.admin_id,
                        candidate.active_appeals_count,
                        self._now(),
                    ),
                    timeout=self._claim_timeout,
                )
            except asyncio.TimeoutError:
                logger.warning(
                    "Claim on admin %s timed out after %.2fs",
                    candidate.admin_id, self._claim_timeout,
                )
                return ClaimStatus.TIMED_OUT
            except TransientStoreError as e:
                logger.warning(
                    "Claim on admin %s failed (attempt %d/%d): %s",
                    candidate.admin_id, attempt, self._retry_attempts, e,
                )
                if attempt < self._retry_attempts:
                    await asyncio.sleep(self._retry_backoff)
                continue
            return ClaimStatus.CLAIMED if claimed else ClaimStatus.CONFLICT
        return ClaimStatus.FAILED

    async def _ensure_expertise(self, admin_id: int, category: AppealCategory) -> None:
        # The claim is already committed; a missing expertise row is recreated on close.
        try:
            await self._expertise.ensure(admin_id, category, self._default_level, self._now())
        except TransientStoreError as e:
            logger.warning(
                "Could not create expertise record for admin %s / %s: %s",
                admin_id, category.value, e,
            )

    async def _with_retries(self, op: Callable[..., Awaitable[T]], *args) -> T:
        attempt = 1
        while True:
            try:
                return await op(*args)
            except TransientStoreError as e:
                if attempt >= self._retry_attempts:
                    raise
                logger.warning(
                    "Store read failed (attempt %d/%d): %s",
                    attempt, self._retry_attempts, e,
                )
                attempt += 1
                await asyncio.sleep(self._retry_backoff)
