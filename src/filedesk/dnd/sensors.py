"""
Activation sensors: decide when a press becomes a drag.

A press must be held for delay_ms without the pointer travelling further
than tolerance_px. Travelling further before the delay elapses means the
user is clicking or scrolling, so the press is abandoned. Releasing before
activation is a click.

Time is supplied by the caller (event timestamps), which keeps the sensors
deterministic under test.
"""

from __future__ import annotations

import logging
from typing import Literal, Optional

from filedesk.config import ActivationConstraint, DragConfig
from filedesk.errors import InvalidStateError
from filedesk.events import PointerType

from .geometry import Point

logger = logging.getLogger(__name__)

SensorPhase = Literal["idle", "pending", "active"]
MoveResult = Literal["ignored", "pending", "aborted", "activated", "moved"]
ReleaseResult = Literal["ignored", "click", "drop"]


class ActivationSensor:
    def __init__(self, constraint: ActivationConstraint) -> None:
        self.constraint = constraint
        self._phase: SensorPhase = "idle"
        self._origin: Optional[Point] = None
        self._pressed_at: float = 0.0

    @property
    def phase(self) -> SensorPhase:
        return self._phase

    @property
    def is_active(self) -> bool:
        return self._phase == "active"

    @property
    def origin(self) -> Optional[Point]:
        return self._origin

    def press(self, point: Point, time_ms: float) -> None:
        self._phase = "pending"
        self._origin = point
        self._pressed_at = time_ms

    def move(self, point: Point, time_ms: float) -> MoveResult:
        if self._phase == "idle":
            return "ignored"
        if self._phase == "active":
            return "moved"

        if self._delay_elapsed(time_ms):
            self._activate()
            return "activated"

        if self._origin is None:
            raise InvalidStateError("Pending press has no origin", details={"phase": self._phase})
        if self._origin.distance_to(point) > self.constraint.tolerance_px:
            logger.debug("Press abandoned: moved beyond %spx", self.constraint.tolerance_px)
            self.cancel()
            return "aborted"
        return "pending"

    def poll(self, time_ms: float) -> bool:
        """Activate a pending press whose delay has elapsed; True on activation."""
        if self._phase == "pending" and self._delay_elapsed(time_ms):
            self._activate()
            return True
        return False

    def release(self) -> ReleaseResult:
        phase = self._phase
        self.cancel()
        if phase == "pending":
            return "click"
        if phase == "active":
            return "drop"
        return "ignored"

    def cancel(self) -> None:
        self._phase = "idle"
        self._origin = None
        self._pressed_at = 0.0

    # ----------------------------
    # Internals
    # ----------------------------
    def _delay_elapsed(self, time_ms: float) -> bool:
        return time_ms - self._pressed_at >= self.constraint.delay_ms

    def _activate(self) -> None:
        self._phase = "active"
        logger.debug("Drag activated after %sms hold", self.constraint.delay_ms)


class PointerSensor(ActivationSensor):
    def __init__(self, config: Optional[DragConfig] = None) -> None:
        super().__init__((config or DragConfig()).pointer)


class TouchSensor(ActivationSensor):
    def __init__(self, config: Optional[DragConfig] = None) -> None:
        super().__init__((config or DragConfig()).touch)


def sensor_for(pointer_type: PointerType, config: Optional[DragConfig] = None) -> ActivationSensor:
    """Touch input gets the longer hold; mouse and pen share the pointer sensor."""
    if pointer_type == "touch":
        return TouchSensor(config)
    return PointerSensor(config)
