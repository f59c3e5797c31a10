"""Result models for move batches."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Optional

MoveStatus = Literal["moved", "skipped", "failed", "not_attempted"]
BatchStatus = Literal["success", "partial", "failed", "aborted"]


@dataclass(slots=True)
class MoveOutcome:
    """Result for a single dragged item within a batch."""

    item_id: str
    name: str
    status: MoveStatus
    attempts: int = 0
    duplicate_action: Optional[str] = None

    error_type: Optional[str] = None
    error_message: Optional[str] = None
    error_details: Optional[dict[str, Any]] = None


@dataclass(slots=True)
class MoveBatchResult:
    """
    Aggregate result for one drop.

    status:
        - success: every item moved (or was skipped as a no-op)
        - partial: an error stopped the batch after at least one move
        - failed: an error stopped the batch before anything moved
        - aborted: no valid target; no API call was made
    """

    status: BatchStatus
    target_id: Optional[str]
    outcomes: list[MoveOutcome] = field(default_factory=list)
    stopped_item_id: Optional[str] = None
    summary: dict[str, int] = field(default_factory=dict)

    @property
    def moved_ids(self) -> list[str]:
        return [o.item_id for o in self.outcomes if o.status == "moved"]


def summarize_outcomes(outcomes: list[MoveOutcome]) -> dict[str, int]:
    summary: dict[str, int] = {"moved": 0, "skipped": 0, "failed": 0, "not_attempted": 0}
    for outcome in outcomes:
        summary[outcome.status] = summary.get(outcome.status, 0) + 1
    return summary
