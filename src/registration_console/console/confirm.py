"""Confirmation gate in front of destructive actions."""

from typing import Optional

from registration_console.models.base import UserId
from registration_console.models.enums import GateState
from registration_console.observability.logging import get_logger

logger = get_logger(__name__)

CONFIRM_TITLE = "Confirm Deletion"
CONFIRM_MESSAGE = (
    "Are you sure you want to delete this user? This action cannot be undone."
)


class DeletionGate:
    """Holds at most one deletion target until it is confirmed or cancelled.

    The gate has a single target slot: requesting a second deletion while a
    confirmation is open replaces the first target.
    """

    title = CONFIRM_TITLE
    message = CONFIRM_MESSAGE

    def __init__(self):
        self.state = GateState.IDLE
        self.target: Optional[UserId] = None

    @property
    def is_open(self) -> bool:
        return self.state == GateState.AWAITING_CONFIRMATION

    def request(self, user_id: UserId) -> None:
        if self.is_open and self.target != user_id:
            logger.info(
                "Pending deletion target replaced",
                extra={
                    "extra_fields": {
                        "previous_target": self.target,
                        "target": user_id,
                    }
                },
            )
        self.target = user_id
        self.state = GateState.AWAITING_CONFIRMATION

    def confirm(self) -> Optional[UserId]:
        """Closes the prompt and hands back the target to delete.

        Returns:
            The confirmed identifier, or None if nothing was pending.
        """
        if not self.is_open or self.target is None:
            return None
        target = self.target
        self._close()
        return target

    def cancel(self) -> None:
        self._close()

    def _close(self) -> None:
        self.state = GateState.IDLE
        self.target = None
