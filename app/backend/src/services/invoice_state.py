"""Invoice status state machine.

    creation  -> APPROVED | REJECTED (decided by the approval policy)
    REJECTED  -> CANCELLED (owner only)
    APPROVED  -> nothing
    CANCELLED -> nothing (terminal)

Transitions are evaluated, not applied: :func:`transition` returns a
verdict and the caller decides what to do with a forbidden one.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from app.backend.src.core.errors import InvoiceCannotBeCancelled
from app.backend.src.models import InvoiceStatus


class InvoiceAction(str, Enum):
    CANCEL = "cancel"


VALID_TRANSITIONS: dict[InvoiceStatus, dict[InvoiceAction, InvoiceStatus]] = {
    InvoiceStatus.APPROVED: {},
    InvoiceStatus.REJECTED: {InvoiceAction.CANCEL: InvoiceStatus.CANCELLED},
    InvoiceStatus.CANCELLED: {},
}

TERMINAL_STATES: frozenset[InvoiceStatus] = frozenset({InvoiceStatus.CANCELLED})


@dataclass(frozen=True)
class Transition:
    """Outcome of evaluating ``action`` against ``current``."""

    current: InvoiceStatus
    action: InvoiceAction
    target: InvoiceStatus | None

    @property
    def allowed(self) -> bool:
        return self.target is not None

    @property
    def reason(self) -> str | None:
        if self.allowed:
            return None
        if self.current in TERMINAL_STATES:
            return f"{self.current.value} is a terminal state"
        return f"cannot {self.action.value} an invoice in status {self.current.value}"


def transition(current: InvoiceStatus | str, action: InvoiceAction) -> Transition:
    """Evaluate ``action`` for an invoice currently in ``current``."""

    state = InvoiceStatus(current)
    return Transition(
        current=state,
        action=action,
        target=VALID_TRANSITIONS[state].get(action),
    )


def ensure_cancellable(current: InvoiceStatus | str) -> InvoiceStatus:
    """Return the post-cancel status or raise :class:`InvoiceCannotBeCancelled`."""

    verdict = transition(current, InvoiceAction.CANCEL)
    if not verdict.allowed:
        raise InvoiceCannotBeCancelled(verdict.current.value)
    return verdict.target  # type: ignore[return-value]


__all__ = [
    "InvoiceAction",
    "TERMINAL_STATES",
    "Transition",
    "VALID_TRANSITIONS",
    "ensure_cancellable",
    "transition",
]
