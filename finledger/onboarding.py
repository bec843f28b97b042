"""
Onboarding Progress

First-run guidance walks the user through three actions: add an income,
add an expense, create a goal. Progress is kept outside the ledger
document as two scalar storage values (completion flag and current step)
so that it survives reloads and is erased by a reset.
"""

from enum import Enum
from typing import Optional

from finledger.config import get_settings
from finledger.config.settings import StorageSettings
from finledger.services.storage import KeyValueStorageInterface


class OnboardingAction(str, Enum):
    INCOME_ADDED = "income_added"
    EXPENSE_ADDED = "expense_added"
    GOAL_ADDED = "goal_added"


# step the action is expected at -> step it leads to (None = finished)
_TRANSITIONS = {
    OnboardingAction.INCOME_ADDED: (1, 2),
    OnboardingAction.EXPENSE_ADDED: (2, 3),
    OnboardingAction.GOAL_ADDED: (3, None),
}

LAST_STEP = 3


class OnboardingTracker:

    def __init__(
        self,
        storage: KeyValueStorageInterface,
        settings: Optional[StorageSettings] = None,
    ):
        self._storage = storage
        self._settings = settings or get_settings().storage

    @property
    def completed(self) -> bool:
        return self._storage.read(self._settings.onboarding_completed_key) == "true"

    @property
    def step(self) -> int:
        raw = self._storage.read(self._settings.onboarding_step_key)
        try:
            step = int(raw) if raw is not None else 0
        except ValueError:
            return 0
        return step if 0 <= step <= LAST_STEP else 0

    @property
    def should_show_welcome(self) -> bool:
        return not self.completed and self.step == 0

    def _set_step(self, step: int) -> None:
        self._storage.write(self._settings.onboarding_step_key, str(step))

    def start(self) -> int:
        """Begin the guided flow at step 1."""
        if not self.completed:
            self._set_step(1)
        return self.step

    def record(self, action: OnboardingAction) -> int:
        """
        Advance when `action` is the one the current step waits for.

        Returns:
            The step after the action (0 once completed)
        """
        if self.completed:
            return 0
        expected, following = _TRANSITIONS[action]
        if self.step != expected:
            return self.step
        if following is None:
            self.complete()
            return 0
        self._set_step(following)
        return following

    def complete(self) -> None:
        """Finish (or skip) onboarding."""
        self._storage.write(self._settings.onboarding_completed_key, "true")
        self._set_step(0)

    skip = complete
