"""Verification run state machine."""

import logging
from datetime import datetime, timezone
from typing import List, Tuple

from .models import TRANSITIONS, VerificationStatus

logger = logging.getLogger(__name__)


class VerificationStateMachine:
    """Tracks one run: NOT_STARTED -> RUNNING -> terminal.

    Raises ValueError on any transition not listed in ``TRANSITIONS``.
    """

    def __init__(self, label: str = ""):
        self.label = label
        self.status = VerificationStatus.NOT_STARTED
        self.history: List[Tuple[VerificationStatus, VerificationStatus, datetime]] = []

    def can_transition(self, to_status: VerificationStatus) -> bool:
        return to_status in TRANSITIONS.get(self.status, ())

    def transition(self, to_status: VerificationStatus) -> None:
        if not self.can_transition(to_status):
            raise ValueError(
                f"Invalid verification transition {self.status.value} -> {to_status.value}"
                + (f" for {self.label}" if self.label else "")
            )
        self.history.append((self.status, to_status, datetime.now(timezone.utc)))
        logger.debug(f"Verification {self.label}: {self.status.value} -> {to_status.value}")
        self.status = to_status

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal
