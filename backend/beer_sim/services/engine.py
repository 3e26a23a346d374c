"""Weekly simulation step for the four-tier Beer Game supply chain."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from beer_sim.core.config import settings
from beer_sim.schemas.game import (
    ROLE_SEQUENCE,
    ChainState,
    GamePhase,
    GameSettings,
    Participant,
    PlayerRole,
)

logger = logging.getLogger(__name__)

# Fields that must never be negative when a state enters ``advance``.
# ``outgoing_order`` is not checked here; callers clamp player orders to >= 0.
NON_NEGATIVE_FIELDS = (
    "inventory",
    "backlog",
    "incoming_shipment",
    "incoming_order",
    "outgoing_shipment",
    "total_cost",
)


class InvalidPhaseError(ValueError):
    """Raised when an operation is attempted in the wrong game phase."""

    def __init__(self, expected: GamePhase, actual: GamePhase) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"Game must be {expected.value} (currently {actual.value})")


class MalformedStateError(ValueError):
    """Raised when a chain state violates the ledger invariants."""


# ----------------------------------------------------------------------
# Construction helpers
# ----------------------------------------------------------------------
def new_chain_state(
    game_settings: Optional[GameSettings] = None,
    player_names: Optional[Dict[PlayerRole, str]] = None,
) -> ChainState:
    """Build a chain in the ``setup`` phase from creation-time settings."""

    game_settings = game_settings or GameSettings()
    names = dict(game_settings.player_names)
    names.update(player_names or {})

    participants = [
        Participant(
            role=role,
            name=names.get(role, role.value.title()),
            inventory=game_settings.initial_inventory,
            backlog=game_settings.initial_backlog,
        )
        for role in ROLE_SEQUENCE
    ]
    return ChainState(
        participants=participants,
        current_week=0,
        total_weeks=game_settings.total_weeks,
        customer_demand=game_settings.resolve_customer_demand(),
        game_phase=GamePhase.SETUP,
        holding_cost_rate=game_settings.holding_cost_rate,
        backlog_cost_rate=game_settings.backlog_cost_rate,
    )


def start_chain(state: ChainState) -> ChainState:
    """Move a ``setup`` chain to week 1 of play."""

    if state.game_phase != GamePhase.SETUP:
        raise InvalidPhaseError(GamePhase.SETUP, state.game_phase)
    validate_state(state)
    return state.model_copy(
        update={"current_week": 1, "game_phase": GamePhase.PLAYING},
        deep=True,
    )


# ----------------------------------------------------------------------
# Validation
# ----------------------------------------------------------------------
def validate_state(state: ChainState) -> None:
    """Check role order, non-negative ledgers and aligned histories."""

    roles = [participant.role for participant in state.participants]
    if roles != ROLE_SEQUENCE:
        raise MalformedStateError(
            "Chain must hold exactly 4 participants ordered "
            f"{[role.value for role in ROLE_SEQUENCE]}, got {[getattr(r, 'value', r) for r in roles]}"
        )

    for participant in state.participants:
        for field in NON_NEGATIVE_FIELDS:
            value = getattr(participant, field)
            if value < 0:
                raise MalformedStateError(
                    f"{participant.role.value}.{field} is negative ({value})"
                )
        lengths = {
            len(participant.weekly_orders),
            len(participant.weekly_shipments),
            len(participant.weekly_costs),
        }
        if len(lengths) != 1:
            raise MalformedStateError(
                f"{participant.role.value} history sequences have different lengths"
            )


# ----------------------------------------------------------------------
# Simulation step
# ----------------------------------------------------------------------
def weekly_demand(state: ChainState, week: Optional[int] = None) -> int:
    """Customer demand for ``week`` (defaults to the current week).

    Weeks beyond the demand table fall back to ``DEFAULT_WEEKLY_DEMAND``.
    """

    week = state.current_week if week is None else week
    index = week - 1
    if 0 <= index < len(state.customer_demand):
        return int(state.customer_demand[index])
    return settings.DEFAULT_WEEKLY_DEMAND


def advance(state: ChainState) -> ChainState:
    """Advance the chain by one week and return the new state.

    ``state`` is left untouched. Every participant's ``outgoing_order`` for the
    week must already be set; the orders are recorded, never recomputed.
    """

    if state.game_phase != GamePhase.PLAYING:
        raise InvalidPhaseError(GamePhase.PLAYING, state.game_phase)
    validate_state(state)

    current = state.participants
    updated: List[Participant] = []

    # Pass 1 - demand, shipment, inventory/backlog and cost per participant
    for idx, participant in enumerate(current):
        if idx == 0:
            demand = weekly_demand(state)
        else:
            demand = current[idx - 1].outgoing_order

        available = participant.inventory + participant.incoming_shipment
        need = demand + participant.backlog
        shipment = min(available, need)

        inventory = max(0, available - shipment)
        backlog = max(0, need - shipment)
        weekly_cost = inventory * state.holding_cost_rate + backlog * state.backlog_cost_rate

        # The factory produces what it ordered with no lead time.
        incoming = participant.outgoing_order if idx == len(current) - 1 else 0

        updated.append(
            participant.model_copy(
                update={
                    "inventory": inventory,
                    "backlog": backlog,
                    "incoming_order": demand,
                    "outgoing_shipment": shipment,
                    "incoming_shipment": incoming,
                    "total_cost": participant.total_cost + weekly_cost,
                    "weekly_orders": [*participant.weekly_orders, participant.outgoing_order],
                    "weekly_shipments": [*participant.weekly_shipments, shipment],
                    "weekly_costs": [*participant.weekly_costs, weekly_cost],
                }
            )
        )

    # Pass 2 - what each upstream partner shipped arrives downstream next week
    for idx in range(len(updated) - 1):
        updated[idx].incoming_shipment = updated[idx + 1].outgoing_shipment

    next_week = state.current_week + 1
    phase = GamePhase.FINISHED if next_week > state.total_weeks else GamePhase.PLAYING

    logger.debug(
        "Processed week %s/%s: shipments=%s chain_cost=%.2f phase=%s",
        state.current_week,
        state.total_weeks,
        [p.outgoing_shipment for p in updated],
        sum(p.total_cost for p in updated),
        phase.value,
    )

    return state.model_copy(
        update={
            "participants": updated,
            "customer_demand": list(state.customer_demand),
            "current_week": next_week,
            "game_phase": phase,
        }
    )
