from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from .menu import MenuEntry, selectable_entries

logger = logging.getLogger(__name__)


class DispatcherState(Enum):
    LOADING = "loading"
    READY = "ready"
    ANSWERED = "answered"
    FAILED = "failed"


class InputAction(Enum):
    CURSOR_UP = "cursor_up"
    CURSOR_DOWN = "cursor_down"
    SUBMIT = "submit"
    OTHER_KEY = "other_key"


EVENT_LOADED = "loaded"
EVENT_CURSOR = "cursor"
EVENT_KEY = "key"
EVENT_NAVIGATE = "navigate"
EVENT_ANSWER = "answer"
EVENT_FAIL = "fail"

TERMINAL_STATES = frozenset({DispatcherState.ANSWERED, DispatcherState.FAILED})

TRANSITIONS: dict[tuple[DispatcherState, str], DispatcherState] = {
    (DispatcherState.LOADING, EVENT_LOADED): DispatcherState.READY,
    (DispatcherState.LOADING, EVENT_KEY): DispatcherState.LOADING,
    (DispatcherState.LOADING, EVENT_FAIL): DispatcherState.FAILED,
    (DispatcherState.READY, EVENT_CURSOR): DispatcherState.READY,
    (DispatcherState.READY, EVENT_KEY): DispatcherState.READY,
    (DispatcherState.READY, EVENT_NAVIGATE): DispatcherState.LOADING,
    (DispatcherState.READY, EVENT_ANSWER): DispatcherState.ANSWERED,
    (DispatcherState.READY, EVENT_FAIL): DispatcherState.FAILED,
}


class InputDispatcher:
    """Owns the current menu and cursor and guards which input is accepted.

    Every change goes through ``TRANSITIONS``; an event with no entry for the
    current state is ignored, which is how input during loading and after
    the session has ended is dropped.
    """

    def __init__(self) -> None:
        self.state = DispatcherState.LOADING
        self.menu: list[MenuEntry] = []
        self.cursor = 0

    @property
    def is_finished(self) -> bool:
        return self.state in TERMINAL_STATES

    @property
    def is_loading(self) -> bool:
        return self.state is DispatcherState.LOADING

    @property
    def selectable_count(self) -> int:
        return len(selectable_entries(self.menu))

    def _fire(self, event: str) -> bool:
        target = TRANSITIONS.get((self.state, event))
        if target is None:
            logger.debug("Ignored %s while %s", event, self.state.value)
            return False
        if target is not self.state:
            logger.debug("%s -> %s on %s", self.state.value, target.value, event)
        self.state = target
        return True

    def loaded(self, menu: list[MenuEntry]) -> bool:
        if not self._fire(EVENT_LOADED):
            return False
        self.menu = list(menu)
        self.cursor = 0
        return True

    def move(self, delta: int) -> bool:
        count = self.selectable_count
        if self.state is DispatcherState.READY and count == 0:
            return False
        if not self._fire(EVENT_CURSOR):
            return False
        self.cursor = (self.cursor + delta) % count
        return True

    def key(self) -> bool:
        return self._fire(EVENT_KEY)

    def navigate(self) -> bool:
        return self._fire(EVENT_NAVIGATE)

    def answer(self) -> bool:
        return self._fire(EVENT_ANSWER)

    def fail(self) -> bool:
        return self._fire(EVENT_FAIL)

    def current_entry(self) -> Optional[MenuEntry]:
        entries = selectable_entries(self.menu)
        if not entries:
            return None
        return entries[self.cursor % len(entries)]

    def menu_index(self) -> int:
        """Position of the cursor in ``menu``, counting separators."""
        position = -1
        for index, entry in enumerate(self.menu):
            if entry.is_separator:
                continue
            position += 1
            if position == self.cursor:
                return index
        return 0
