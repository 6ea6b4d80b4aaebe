# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Focus/selection state machine.

Exactly one mode is active at a time:
    NONE          nothing to show (no events, or just reset)
    SINGLE_EVENT  deep-dive on one CME id
    TIMELINE      animate the whole filtered set

The controller never holds an id that is absent from the active set;
reconcile() drops a dangling selection back to NONE.
"""
import logging
from collections.abc import Collection
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class FocusMode(Enum):
    NONE = "none"
    SINGLE_EVENT = "single-event"
    TIMELINE = "timeline"


@dataclass(frozen=True)
class FocusState:
    """Read-only snapshot of the focus mode."""
    mode: FocusMode = FocusMode.NONE
    selected_id: str | None = None


class FocusController:
    """Owns FocusState and enforces mode mutual exclusion."""

    def __init__(self) -> None:
        self._state = FocusState()

    @property
    def state(self) -> FocusState:
        return self._state

    @property
    def mode(self) -> FocusMode:
        return self._state.mode

    @property
    def selected_id(self) -> str | None:
        return self._state.selected_id

    def select(self, event_id: str, known_ids: Collection[str]) -> bool:
        """Enter SINGLE_EVENT for a known id; unknown or non-string ids are ignored."""
        if not isinstance(event_id, str):
            logger.debug("Ignoring selection of non-string id %r", event_id)
            return False
        if event_id not in known_ids:
            logger.debug("Ignoring selection of unknown event %r", event_id)
            return False
        self._state = FocusState(FocusMode.SINGLE_EVENT, event_id)
        return True

    def clear(self, has_events: bool) -> None:
        """Drop any selection; TIMELINE if there is something to animate."""
        self._state = FocusState(FocusMode.TIMELINE if has_events else FocusMode.NONE)

    def enter_timeline(self) -> None:
        self._state = FocusState(FocusMode.TIMELINE)

    def reset(self) -> None:
        self._state = FocusState()

    def reconcile(self, active_ids: Collection[str]) -> bool:
        """Fall back to NONE if the selected event left the active set.

        Returns:
            True if the selection was dropped.
        """
        selected = self._state.selected_id
        if self._state.mode is FocusMode.SINGLE_EVENT and selected not in active_ids:
            logger.debug("Selected event %s left the active set", selected)
            self._state = FocusState()
            return True
        return False
