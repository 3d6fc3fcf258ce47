"""Notifications emitted by the ledger.

Field order of each record is part of the public surface: indexers read
these positionally.
"""
import logging
from dataclasses import dataclass
from typing import Callable, List, Type

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class CollateralDeposited:
    owner: str
    amount: int

@dataclass(frozen=True)
class CollateralWithdrawn:
    owner: str
    amount: int

@dataclass(frozen=True)
class DebtMinted:
    owner: str
    amount: int

@dataclass(frozen=True)
class DebtBurned:
    owner: str
    amount: int

@dataclass(frozen=True)
class ZeroLiquidationEnabled:
    owner: str

@dataclass(frozen=True)
class ZeroLiquidationDisabled:
    owner: str

@dataclass(frozen=True)
class CollateralLiquidated:
    owner: str
    liquidator: str
    repay_amount: int
    collateral_reward: int

@dataclass(frozen=True)
class InterestRateChanged:
    old_rate: int
    new_rate: int

@dataclass(frozen=True)
class Paused:
    account: str

@dataclass(frozen=True)
class Unpaused:
    account: str

@dataclass(frozen=True)
class ParameterUpdated:
    name: str
    old_value: object
    new_value: object

@dataclass(frozen=True)
class OwnershipTransferred:
    previous_owner: str
    new_owner: str


class EventLog:
    """Append-only log of committed notifications with subscriber callbacks"""

    def __init__(self):
        self.events: List[object] = []
        self._subscribers: List[Callable[[object], None]] = []

    def subscribe(self, callback: Callable[[object], None]) -> None:
        self._subscribers.append(callback)

    def publish(self, events: List[object]) -> None:
        """Record committed notifications and fan them out.

        A failing subscriber is logged and skipped; the state change it
        observes has already been committed.
        """
        for event in events:
            self.events.append(event)
            for callback in list(self._subscribers):
                try:
                    callback(event)
                except Exception:
                    logger.exception("Subscriber %r failed on %s", callback, event)

    def of_type(self, event_type: Type) -> List[object]:
        return [e for e in self.events if isinstance(e, event_type)]

    def last(self):
        return self.events[-1] if self.events else None
