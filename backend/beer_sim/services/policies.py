"""Order policies for headless Beer Game runs.

Policies consume a dictionary of observations for one participant and return
the order quantity to place upstream for the current week.  Two policies are
provided:

* :class:`NaiveEchoPolicy` - echoes the order that arrived from the downstream
  partner in the previous week.  This matches the classic "naive" benchmark in
  which each role simply replaces what was requested from them.
* :class:`BaseStockPolicy` - an order-up-to rule that replaces the observed
  demand and closes the gap between the inventory position (on hand + arriving
  shipment - backlog) and a base-stock target.
"""

from __future__ import annotations

from typing import Any, Dict

from beer_sim.core.config import settings
from beer_sim.schemas.game import ChainState, Participant, PolicyName


class OrderPolicy:
    """Base interface for order policies."""

    def order(self, obs: Dict[str, Any]) -> int:
        """Return the order quantity for the current week."""
        raise NotImplementedError


class NaiveEchoPolicy(OrderPolicy):
    """Echo the most recent incoming order from the downstream partner."""

    def order(self, obs: Dict[str, Any]) -> int:
        last_incoming_order = int(obs.get("last_incoming_order", 0))
        return max(0, last_incoming_order)


class BaseStockPolicy(OrderPolicy):
    """Order-up-to policy on the inventory position."""

    def __init__(self, base_stock: int, smoothing: float = 1.0) -> None:
        self.base_stock = int(base_stock)
        self.smoothing = float(smoothing)

    def order(self, obs: Dict[str, Any]) -> int:
        on_hand = int(obs.get("inventory", 0))
        backlog = int(obs.get("backlog", 0))
        arriving = int(obs.get("incoming_shipment", 0))
        demand_anchor = int(obs.get("last_incoming_order", 0))

        inventory_position = on_hand + arriving - backlog
        gap = self.base_stock - inventory_position
        return max(0, int(round(demand_anchor + self.smoothing * gap)))


def observe(state: ChainState, participant: Participant) -> Dict[str, Any]:
    """Build the observation a policy sees before the week is processed."""

    if participant.weeks_played:
        last_incoming_order = participant.incoming_order
    else:
        # Nothing has been requested yet; anchor on the steady-state demand.
        last_incoming_order = settings.DEFAULT_WEEKLY_DEMAND

    return {
        "week": state.current_week,
        "role": participant.role.value,
        "inventory": participant.inventory,
        "backlog": participant.backlog,
        "incoming_shipment": participant.incoming_shipment,
        "last_incoming_order": last_incoming_order,
    }


def make_policy(name: PolicyName | str, *, base_stock: int = 20) -> OrderPolicy:
    """Instantiate a policy from its public name."""

    policy_name = PolicyName(name)
    if policy_name == PolicyName.NAIVE:
        return NaiveEchoPolicy()
    if policy_name == PolicyName.BASE_STOCK:
        return BaseStockPolicy(base_stock=base_stock)
    raise ValueError(f"Unknown order policy: {name}")
