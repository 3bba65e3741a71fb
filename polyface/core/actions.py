"""One-shot user actions modeled as a tiny state machine.

Each (user, action) pair moves ``idle -> in_flight -> succeeded | failed``.
Re-entering while ``in_flight`` is refused so a repeated tap never issues a
duplicate remote call. The UI polls ``status()`` to drive busy indicators.

State is process-local and the event loop is single-threaded, so no locks.
"""
import asyncio
import enum
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import lru_cache

import structlog

from polyface.core.exceptions import ActionInFlightError, PaymentCancelled, PolyFaceError

logger = structlog.get_logger(__name__)

INTERRUPTED_MESSAGE = "The request was interrupted. Check your bookings before trying again."


class ActionState(str, enum.Enum):
    """Lifecycle of a one-shot action."""

    IDLE = "idle"
    IN_FLIGHT = "in_flight"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class Action(str, enum.Enum):
    """Actions guarded against duplicate submission."""

    BOOK_LESSON = "book_lesson"
    CANCEL_LESSON = "cancel_lesson"
    REGISTER_CLASS = "register_class"
    CANCEL_CLASS_REGISTRATION = "cancel_class_registration"
    PURCHASE = "purchase"
    SIGN_WAIVER = "sign_waiver"


@dataclass(frozen=True)
class ActionStatus:
    action: str
    state: ActionState
    error: str | None = None
    updated_at: datetime | None = None


class ActionTracker:
    """Tracks the state of every guarded action per user."""

    def __init__(self) -> None:
        self._states: dict[tuple[str, str], ActionStatus] = {}

    def status(self, uid: str, action: Action | str) -> ActionStatus:
        name = _name(action)
        return self._states.get((uid, name), ActionStatus(action=name, state=ActionState.IDLE))

    def is_in_flight(self, uid: str, action: Action | str) -> bool:
        return self.status(uid, action).state == ActionState.IN_FLIGHT

    def _set(self, uid: str, name: str, state: ActionState, error: str | None = None) -> None:
        self._states[(uid, name)] = ActionStatus(
            action=name,
            state=state,
            error=error,
            updated_at=datetime.now(timezone.utc),
        )

    @asynccontextmanager
    async def run(self, uid: str, action: Action | str) -> AsyncIterator[None]:
        """Guard one execution of ``action`` for ``uid``."""
        name = _name(action)
        if self.is_in_flight(uid, name):
            logger.info("action_rejected_in_flight", uid=uid, action=name)
            raise ActionInFlightError(name)

        self._set(uid, name, ActionState.IN_FLIGHT)
        try:
            yield
        except PaymentCancelled:
            # User backed out; nothing happened, nothing to report
            self._set(uid, name, ActionState.IDLE)
            raise
        except asyncio.CancelledError:
            # The request went away mid-call; the backend outcome is unknown
            self._set(uid, name, ActionState.FAILED, INTERRUPTED_MESSAGE)
            raise
        except PolyFaceError as e:
            self._set(uid, name, ActionState.FAILED, e.message)
            raise
        except Exception as e:
            self._set(uid, name, ActionState.FAILED, str(e) or type(e).__name__)
            raise
        else:
            self._set(uid, name, ActionState.SUCCEEDED)

    def clear(self, uid: str | None = None) -> None:
        """Forget tracked states, for one user or everyone."""
        if uid is None:
            self._states.clear()
            return
        for key in [k for k in self._states if k[0] == uid]:
            del self._states[key]


def _name(action: Action | str) -> str:
    return action.value if isinstance(action, Action) else action


@lru_cache
def get_action_tracker() -> ActionTracker:
    """Dependency to get the process-wide action tracker."""
    return ActionTracker()
