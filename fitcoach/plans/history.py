"""Plan records and per-subject plan history.

A PlanRecord wraps a validated plan with the metadata the caller stores
alongside it. Records are immutable and append-only: regenerating a plan
adds a newer record that supersedes older overlapping ones for "current
plan" lookups, while older records stay available as history.
"""

from collections import defaultdict
from datetime import UTC, date, datetime, timedelta
from uuid import uuid4

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from fitcoach.planning.pipeline import GeneratedPlan
from fitcoach.planning.request import GenerationRequest, Language, PlanKind
from fitcoach.planning.schemas import MealPlan, WorkoutPlan


class PlanRecord(BaseModel):
    """A persisted meal or workout plan.

    Attributes:
        id: Record identifier
        user_id: Subject the plan belongs to
        kind: meal or workout
        plan: Validated plan document
        language: Language the plan text is written in
        check_in_id: Check-in that informed the plan, if any
        start_date: First day covered by the plan
        end_date: start_date plus the plan duration
        created_at: When the record was created (UTC)
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid4().hex)
    user_id: str
    kind: PlanKind
    plan: MealPlan | WorkoutPlan
    language: Language
    check_in_id: str | None = None
    start_date: date
    end_date: date
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date

    def to_row(self) -> dict:
        """Storage row with the plan in its wire (camelCase) shape."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "kind": self.kind.value,
            "plan_data": self.plan.to_document(),
            "language": self.language.value,
            "check_in_id": self.check_in_id,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "created_at": self.created_at.isoformat(),
        }


def build_plan_record(
    request: GenerationRequest,
    generated: GeneratedPlan,
    start_date: date | None = None,
) -> PlanRecord:
    """Wrap a pipeline result into a record covering the requested duration."""
    start = start_date or datetime.now(UTC).date()
    return PlanRecord(
        user_id=request.profile.id,
        kind=generated.kind,
        plan=generated.plan,
        language=request.language,
        check_in_id=request.check_in.id if request.check_in else None,
        start_date=start,
        end_date=start + timedelta(days=request.plan_duration_days),
    )


class PlanHistory:
    """In-memory, append-only plan store keyed by subject and plan kind."""

    def __init__(self) -> None:
        self._records: dict[tuple[str, PlanKind], list[PlanRecord]] = defaultdict(list)

    def add(self, record: PlanRecord) -> PlanRecord:
        records = self._records[(record.user_id, record.kind)]
        superseded = [r.id for r in records if r.start_date <= record.end_date and record.start_date <= r.end_date]
        records.append(record)
        if superseded:
            logger.info(
                "Plan supersedes earlier plans",
                user_id=record.user_id,
                kind=record.kind.value,
                plan_id=record.id,
                superseded=superseded,
            )
        return record

    def history(self, user_id: str, kind: PlanKind) -> list[PlanRecord]:
        """All records for a subject, newest first."""
        records = self._records.get((user_id, kind), [])
        # Insertion order breaks created_at ties
        ordered = sorted(enumerate(records), key=lambda pair: (pair[1].created_at, pair[0]), reverse=True)
        return [record for _, record in ordered]

    def current(self, user_id: str, kind: PlanKind, on: date | None = None) -> PlanRecord | None:
        """The newest record whose date range covers ``on`` (default: today, UTC)."""
        day = on or datetime.now(UTC).date()
        for record in self.history(user_id, kind):
            if record.covers(day):
                return record
        return None
