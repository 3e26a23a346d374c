"""Run complete games where every role is played by an order policy."""

from __future__ import annotations

import logging
from typing import Dict, Optional

from beer_sim.schemas.game import ROLE_SEQUENCE, ChainState, GamePhase, GameSettings, PlayerRole

from .engine import advance, new_chain_state, start_chain
from .policies import NaiveEchoPolicy, OrderPolicy, observe

logger = logging.getLogger(__name__)


def apply_policies(state: ChainState, policies: Dict[PlayerRole, OrderPolicy]) -> ChainState:
    """Return a copy of ``state`` with this week's orders decided by ``policies``."""

    updated = state.model_copy(deep=True)
    for participant in updated.participants:
        policy = policies.get(participant.role)
        if policy is None:
            continue
        participant.outgoing_order = max(0, int(policy.order(observe(updated, participant))))
    return updated


def run_simulation(
    game_settings: Optional[GameSettings] = None,
    policies: Optional[Dict[PlayerRole, OrderPolicy]] = None,
) -> ChainState:
    """Play a whole game and return the finished chain."""

    game_settings = game_settings or GameSettings()
    if policies is None:
        policies = {role: NaiveEchoPolicy() for role in ROLE_SEQUENCE}

    state = start_chain(new_chain_state(game_settings))
    logger.info(
        "Starting headless run: %s weeks, policies=%s",
        state.total_weeks,
        {role.value: type(policy).__name__ for role, policy in policies.items()},
    )

    while state.game_phase == GamePhase.PLAYING:
        state = advance(apply_policies(state, policies))

    logger.info(
        "Headless run finished after week %s, chain cost %.2f",
        state.current_week - 1,
        sum(p.total_cost for p in state.participants),
    )
    return state
