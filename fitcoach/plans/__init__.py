"""Plan records - immutable, append-only storage shape for generated plans."""

from fitcoach.plans.history import PlanHistory, PlanRecord, build_plan_record

__all__ = [
    "PlanHistory",
    "PlanRecord",
    "build_plan_record",
]
