"""Bullwhip and cost reductions over the weekly histories of a chain."""

from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

import numpy as np

from beer_sim.schemas.game import ChainState, GamePhase, Participant, PlayerRole, Team
from beer_sim.schemas.metrics import (
    ChainMetrics,
    Leaderboard,
    ParticipantMetrics,
    RangeSummary,
    TeamStanding,
)


def population_variance(values: Sequence[float]) -> float:
    """Mean squared deviation from the mean (no Bessel correction)."""
    if len(values) == 0:
        return 0.0
    return float(np.var(np.asarray(values, dtype=float)))


def _find(participants: Iterable[Participant], role: PlayerRole) -> Participant | None:
    return next((p for p in participants if p.role == role), None)


def bullwhip_ratio(participants: Sequence[Participant]) -> float:
    """Variance of factory orders over variance of retailer orders.

    Returns 0 when the retailer's order stream is flat, even if factory orders
    vary, and when either history is missing.
    """
    retailer = _find(participants, PlayerRole.RETAILER)
    factory = _find(participants, PlayerRole.FACTORY)
    if retailer is None or factory is None:
        return 0.0
    if not retailer.weekly_orders or not factory.weekly_orders:
        return 0.0

    retailer_variance = population_variance(retailer.weekly_orders)
    factory_variance = population_variance(factory.weekly_orders)

    if retailer_variance == 0:
        return 0.0
    return factory_variance / retailer_variance


def total_chain_cost(participants: Iterable[Participant]) -> float:
    return float(sum(p.total_cost for p in participants))


def average_weekly_cost(participant: Participant) -> float:
    if not participant.weekly_costs:
        return 0.0
    return participant.total_cost / len(participant.weekly_costs)


def _value_range(values: Sequence[float]) -> Tuple[float, float]:
    if not values:
        return 0, 0
    return min(values), max(values)


def order_range(participant: Participant) -> Tuple[int, int]:
    """(min, max) weekly order placed upstream."""
    low, high = _value_range(participant.weekly_orders)
    return int(low), int(high)


def cost_range(participant: Participant) -> Tuple[float, float]:
    """(min, max) weekly cost."""
    low, high = _value_range(participant.weekly_costs)
    return float(low), float(high)


def total_orders(participant: Participant) -> int:
    return int(sum(participant.weekly_orders))


def average_order(participant: Participant) -> float:
    if not participant.weekly_orders:
        return 0.0
    return total_orders(participant) / len(participant.weekly_orders)


def rank_participants(participants: Iterable[Participant]) -> List[Participant]:
    return sorted(participants, key=lambda p: p.total_cost)


def participant_metrics(participant: Participant) -> ParticipantMetrics:
    min_order, max_order = order_range(participant)
    min_cost, max_cost = cost_range(participant)
    return ParticipantMetrics(
        role=participant.role,
        name=participant.name,
        total_cost=participant.total_cost,
        average_weekly_cost=average_weekly_cost(participant),
        min_weekly_cost=min_cost,
        max_weekly_cost=max_cost,
        min_order=min_order,
        max_order=max_order,
        total_orders=total_orders(participant),
        average_order=average_order(participant),
        weeks_played=participant.weeks_played,
    )


def summarize_chain(state: ChainState) -> ChainMetrics:
    total = total_chain_cost(state.participants)
    return ChainMetrics(
        current_week=state.current_week,
        total_weeks=state.total_weeks,
        game_phase=state.game_phase,
        total_cost=total,
        average_cost_per_player=total / len(state.participants) if state.participants else 0.0,
        bullwhip_ratio=bullwhip_ratio(state.participants),
        participants=[participant_metrics(p) for p in state.participants],
    )


def _summary(values: Sequence[float]) -> RangeSummary:
    if not values:
        return RangeSummary()
    return RangeSummary(min=min(values), avg=sum(values) / len(values), max=max(values))


def leaderboard(teams: Iterable[Team]) -> Leaderboard:
    """Rank finished teams by total chain cost, cheapest first.

    ``all_finished`` is set once there is at least one team and every team has
    played out its game.
    """
    teams = list(teams)
    finished = [team for team in teams if team.game_phase == GamePhase.FINISHED]

    rows = []
    for team in finished:
        summary = summarize_chain(team.state)
        rows.append((team, summary))
    rows.sort(key=lambda row: row[1].total_cost)

    standings = [
        TeamStanding(
            rank=position,
            team_id=team.id,
            team_name=team.name,
            total_cost=summary.total_cost,
            average_cost_per_player=summary.average_cost_per_player,
            bullwhip_ratio=summary.bullwhip_ratio,
        )
        for position, (team, summary) in enumerate(rows, start=1)
    ]

    return Leaderboard(
        standings=standings,
        all_finished=bool(teams) and len(finished) == len(teams),
        cost=_summary([s.total_cost for s in standings]),
        bullwhip=_summary([s.bullwhip_ratio for s in standings]),
    )
