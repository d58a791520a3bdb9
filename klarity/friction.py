"""
Friction Gate

The pause between "I want to buy this" and the transaction form.

FLOW:
    INTERROGATE --choose_impulse--> TIMER --(delay elapsed)--> DECISION
    INTERROGATE --choose_need-----> PROCEEDED
    DECISION    --proceed---------> PROCEEDED
    any open step --cancel--------> CANCELLED

The timer is driven by `tick(seconds)`; nothing here sleeps or spawns
threads. The gate never touches stored state: cancelling simply means no
transaction form is opened.
"""

from enum import Enum
from typing import Optional

from klarity.config import get_settings


class FrictionStep(str, Enum):
    INTERROGATE = "INTERROGATE"
    TIMER = "TIMER"
    DECISION = "DECISION"
    CANCELLED = "CANCELLED"
    PROCEEDED = "PROCEEDED"


class FrictionError(Exception):
    """Raised when an action is not allowed in the current step."""
    pass


_CLOSED = (FrictionStep.CANCELLED, FrictionStep.PROCEEDED)


class FrictionGate:
    """State machine for one pre-spending interrogation."""

    def __init__(self, life_anchor: str = "", delay_seconds: Optional[int] = None):
        if delay_seconds is None:
            delay_seconds = get_settings().app.friction_delay_seconds
        if delay_seconds < 0:
            raise ValueError("delay_seconds must be >= 0")

        self.life_anchor = life_anchor or "Masa Depan"
        self.delay_seconds = delay_seconds
        self.step = FrictionStep.INTERROGATE
        self.time_left = delay_seconds

    @property
    def is_closed(self) -> bool:
        return self.step in _CLOSED

    @property
    def proceeded(self) -> bool:
        """True once the user may open the transaction form."""
        return self.step == FrictionStep.PROCEEDED

    def _require(self, *allowed: FrictionStep) -> None:
        if self.step not in allowed:
            raise FrictionError(
                f"Not allowed in step {self.step.value}"
            )

    def choose_impulse(self) -> FrictionStep:
        """Shopping / snacking: start the delay timer."""
        self._require(FrictionStep.INTERROGATE)
        self.step = FrictionStep.TIMER
        if self.time_left <= 0:
            self.step = FrictionStep.DECISION
        return self.step

    def choose_need(self) -> FrictionStep:
        """Mandatory spending or income: skip the timer."""
        self._require(FrictionStep.INTERROGATE)
        self.step = FrictionStep.PROCEEDED
        return self.step

    def tick(self, seconds: int = 1) -> FrictionStep:
        """Advance the timer. Ticks outside TIMER are ignored."""
        if seconds < 0:
            raise ValueError("seconds must be >= 0")
        if self.step != FrictionStep.TIMER:
            return self.step

        self.time_left = max(0, self.time_left - seconds)
        if self.time_left == 0:
            self.step = FrictionStep.DECISION
        return self.step

    def proceed(self) -> FrictionStep:
        """Buy it anyway."""
        self._require(FrictionStep.DECISION)
        self.step = FrictionStep.PROCEEDED
        return self.step

    def cancel(self) -> FrictionStep:
        self._require(FrictionStep.INTERROGATE, FrictionStep.TIMER, FrictionStep.DECISION)
        self.step = FrictionStep.CANCELLED
        return self.step
