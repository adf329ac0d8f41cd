# storefront/workflow.py
"""Status transition tables shared by orders, donation requests,
fulfillments and order logistics."""
from typing import Dict, FrozenSet, Iterable

from storefront.errors import InvalidTransition


class Workflow:
    def __init__(self, name: str, initial: str, transitions: Dict[str, Iterable[str]]):
        self.name = name
        self.initial = initial
        self.transitions: Dict[str, FrozenSet[str]] = {
            src: frozenset(targets) for src, targets in transitions.items()
        }

    @property
    def statuses(self) -> FrozenSet[str]:
        known = set(self.transitions)
        for targets in self.transitions.values():
            known.update(targets)
        return frozenset(known)

    def next_statuses(self, current: str) -> FrozenSet[str]:
        return self.transitions.get(current, frozenset())

    def is_terminal(self, status: str) -> bool:
        return not self.next_statuses(status)

    def can(self, current: str, target: str) -> bool:
        return target in self.next_statuses(current)

    def check(self, current: str, target: str) -> None:
        if target not in self.statuses:
            raise InvalidTransition(f"Unknown {self.name} status: {target}")
        if not self.can(current, target):
            raise InvalidTransition(
                f"{self.name.capitalize()} cannot move from {current} to {target}"
            )


ORDER_WORKFLOW = Workflow("order", "pending", {
    "pending": {"processing", "ready_for_pickup", "cancelled"},
    "processing": {"ready_for_pickup", "cancelled"},
    "ready_for_pickup": {"dispatched"},
    "dispatched": {"delivered"},
    "delivered": set(),
    "cancelled": set(),
})

DONATION_WORKFLOW = Workflow("donation request", "pending", {
    "pending": {"approved", "rejected", "fulfilled"},
    "approved": {"fulfilled", "rejected"},
    # A cancelled fulfillment reopens its request for another seller
    "fulfilled": {"approved"},
    "rejected": set(),
})

FULFILLMENT_WORKFLOW = Workflow("fulfillment", "processing", {
    "processing": {"completed", "cancelled"},
    "completed": set(),
    "cancelled": set(),
})

LOGISTICS_WORKFLOW = Workflow("shipment", "waiting_pickup", {
    "waiting_pickup": {"in_transit"},
    "in_transit": {"delivered"},
    "delivered": set(),
})
