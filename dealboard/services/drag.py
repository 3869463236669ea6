"""Drag interaction - turns pointer and keyboard gestures into move intents.

The tracker is a two-state machine (idle, dragging). A pointer press only
becomes a drag after travelling ``activation_distance`` pixels, so a plain
click never produces an intent. Releasing over one of the four stage zones
emits a ``MoveIntent``; releasing anywhere else emits nothing.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum

from ..config import settings
from ..errors import UnknownStageError
from ..schemas.deal import DealStage

logger = logging.getLogger(__name__)


class DragState(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"


@dataclass(frozen=True)
class MoveIntent:
    deal_id: str
    stage: DealStage


def drop_zone(zone_id: object) -> DealStage | None:
    """Stage a drop-zone id stands for, or None if it is not a zone."""
    if zone_id is None:
        return None
    try:
        return DealStage.parse(zone_id)
    except UnknownStageError:
        return None


class DragTracker:
    def __init__(self, activation_distance: float | None = None):
        if activation_distance is None:
            activation_distance = settings.drag_activation_distance
        self.activation_distance = activation_distance
        self.state = DragState.IDLE
        self.deal_id: str | None = None
        self._origin: tuple[float, float] | None = None

    @property
    def dragging(self) -> bool:
        return self.state is DragState.DRAGGING

    def pointer_down(self, deal_id: str, x: float, y: float) -> None:
        self._reset()
        self.deal_id = deal_id
        self._origin = (x, y)

    def pointer_move(self, x: float, y: float) -> None:
        if self._origin is None or self.dragging:
            return
        ox, oy = self._origin
        if math.hypot(x - ox, y - oy) >= self.activation_distance:
            self.state = DragState.DRAGGING

    def pointer_up(self, zone_id: object = None) -> MoveIntent | None:
        return self._release(zone_id)

    def key_pick(self, deal_id: str) -> None:
        """Keyboard pick-up skips the distance check."""
        self._reset()
        self.deal_id = deal_id
        self.state = DragState.DRAGGING

    def key_drop(self, zone_id: object) -> MoveIntent | None:
        return self._release(zone_id)

    def cancel(self) -> None:
        self._reset()

    def _release(self, zone_id: object) -> MoveIntent | None:
        deal_id, was_dragging = self.deal_id, self.dragging
        self._reset()
        if not was_dragging or deal_id is None:
            return None
        stage = drop_zone(zone_id)
        if stage is None:
            logger.debug("Deal %s dropped outside any stage", deal_id)
            return None
        return MoveIntent(deal_id=deal_id, stage=stage)

    def _reset(self) -> None:
        self.state = DragState.IDLE
        self.deal_id = None
        self._origin = None


async def dispatch_intent(controller, intent: MoveIntent | None):
    """Hand a move intent to the controller.

    Drops onto the deal's current stage are passed through too; the
    controller treats them as a no-op.
    """
    if intent is None:
        return None
    logger.debug("Moving deal %s to %s", intent.deal_id, intent.stage.value)
    return await controller.transition(intent.deal_id, intent.stage)
