"""
Milestone tracking and derived project progress.

A ``ProgressStore`` is the single source of truth for one project's
milestone list. ``progress`` is never stored; it is computed from the
milestone list on every read, so the two can not disagree. Every mutation
replaces the milestone tuple in one assignment and then notifies the
subscribed listeners with a snapshot of the new state.
"""

from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Callable, Iterable, Iterator, List, Optional, Tuple

import structlog

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Milestone:
    """A titled, dated task with a binary completion flag."""
    id: str
    title: str
    due_date: date
    completed: bool = False
    description: Optional[str] = None
    start_date: Optional[date] = None
    completed_at: Optional[datetime] = None

    def is_overdue(self, today: date) -> bool:
        return not self.completed and self.due_date < today


def compute_progress(completed: int, total: int) -> int:
    """
    Integer percentage of completed milestones.

    Rounds half up on the exact ratio (1 of 8 gives 13) and returns 0 for an
    empty list.
    """
    if total <= 0:
        return 0
    return (200 * completed + total) // (2 * total)


@dataclass(frozen=True)
class ProgressSnapshot:
    """Consistent read of a store at one point in time."""
    name: str
    milestones: Tuple[Milestone, ...]
    progress: int

    @property
    def total(self) -> int:
        return len(self.milestones)

    @property
    def completed_count(self) -> int:
        return sum(1 for m in self.milestones if m.completed)


Listener = Callable[[ProgressSnapshot], None]


class ProgressStore:
    """Milestone list plus derived completion percentage for one project."""

    def __init__(
        self,
        name: str = "Sample Project",
        milestones: Iterable[Milestone] = (),
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._name = name
        self._milestones: Tuple[Milestone, ...] = tuple(milestones)
        self._listeners: List[Listener] = []
        self._clock = clock or datetime.utcnow

    @property
    def name(self) -> str:
        return self._name

    @property
    def milestones(self) -> Tuple[Milestone, ...]:
        return self._milestones

    @property
    def completed_count(self) -> int:
        return sum(1 for m in self._milestones if m.completed)

    @property
    def progress(self) -> int:
        return compute_progress(self.completed_count, len(self._milestones))

    def get_progress(self) -> int:
        return self.progress

    def __len__(self) -> int:
        return len(self._milestones)

    def __iter__(self) -> Iterator[Milestone]:
        return iter(self._milestones)

    def __contains__(self, milestone_id: object) -> bool:
        return any(m.id == milestone_id for m in self._milestones)

    def get_milestone(self, milestone_id: str) -> Optional[Milestone]:
        for milestone in self._milestones:
            if milestone.id == milestone_id:
                return milestone
        return None

    def snapshot(self) -> ProgressSnapshot:
        milestones = self._milestones
        return ProgressSnapshot(
            name=self._name,
            milestones=milestones,
            progress=compute_progress(sum(1 for m in milestones if m.completed), len(milestones)),
        )

    def add_milestone(self, milestone: Milestone) -> None:
        """Append a milestone. Ids are expected to be unique; duplicates are not rejected."""
        self._commit(self._milestones + (milestone,))

    def toggle_milestone(self, milestone_id: str) -> None:
        """Flip the completion flag of ``milestone_id``. Unknown ids are ignored."""
        if milestone_id not in self:
            return
        now = self._clock()
        self._commit(tuple(
            self._with_completed(m, not m.completed, now) if m.id == milestone_id else m
            for m in self._milestones
        ))

    def set_completed(self, milestone_id: str, completed: bool) -> None:
        """Force the completion flag of ``milestone_id``. Unknown ids are ignored."""
        if not any(m.id == milestone_id and m.completed != completed for m in self._milestones):
            return
        now = self._clock()
        self._commit(tuple(
            self._with_completed(m, completed, now) if m.id == milestone_id else m
            for m in self._milestones
        ))

    def rename(self, name: str) -> None:
        if name == self._name:
            return
        self._name = name
        self._notify()

    def upcoming(self, limit: Optional[int] = None) -> List[Milestone]:
        """Incomplete milestones ordered by due date, earliest first."""
        pending = sorted((m for m in self._milestones if not m.completed), key=lambda m: m.due_date)
        return pending if limit is None else pending[:limit]

    def overdue(self, today: date) -> List[Milestone]:
        return [m for m in self._milestones if m.is_overdue(today)]

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` for change notifications. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @staticmethod
    def _with_completed(milestone: Milestone, completed: bool, now: datetime) -> Milestone:
        if milestone.completed == completed:
            return milestone
        return replace(milestone, completed=completed, completed_at=now if completed else None)

    def _commit(self, milestones: Tuple[Milestone, ...]) -> None:
        self._milestones = milestones
        self._notify()

    def _notify(self) -> None:
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                logger.error(
                    "Progress listener failed",
                    project=snapshot.name,
                    listener=getattr(listener, "__name__", repr(listener)),
                    error=str(e),
                    exc_info=True,
                )
