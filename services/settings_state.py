"""Single owner of the current settings, with explicit subscribers.

Views that depend on settings subscribe to one SettingsState instance
they are handed; every write goes through it and notifies them.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from services.models import SettingsSnapshot
from services.settings_history_manager import SettingsHistoryManager

logger = logging.getLogger(__name__)

Subscriber = Callable[[Optional[SettingsSnapshot]], None]


class SettingsState:

    def __init__(self, manager: SettingsHistoryManager):
        self.manager = manager
        self._current: Optional[SettingsSnapshot] = None
        self._loaded = False
        self._subscribers: List[Subscriber] = []

    @property
    def current(self) -> Optional[SettingsSnapshot]:
        if not self._loaded:
            self.refresh(notify=False)
        return self._current

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback``; returns a function that unregisters it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def refresh(self, notify: bool = True) -> Optional[SettingsSnapshot]:
        self._current = self.manager.get_current()
        self._loaded = True
        if notify:
            self._notify()
        return self._current

    def amend(self, patch: Dict[str, Any]) -> SettingsSnapshot:
        """Apply ``patch`` to this week's settings and notify subscribers."""
        amended = self.manager.amend_current_week(patch)
        self.refresh()
        return amended

    def branch(self, patch: Dict[str, Any]) -> SettingsSnapshot:
        """Schedule ``patch`` from next week and notify subscribers."""
        created = self.manager.branch_next_week(patch)
        self.refresh()
        return created

    def _notify(self) -> None:
        for callback in list(self._subscribers):
            callback(self._current)
