import pytest

from beer_sim.schemas.game import GamePhase, Participant, PlayerRole, Team
from beer_sim.services.metrics import (
    average_order,
    average_weekly_cost,
    bullwhip_ratio,
    cost_range,
    leaderboard,
    order_range,
    population_variance,
    rank_participants,
    summarize_chain,
    total_chain_cost,
    total_orders,
)


def _participant(role, orders=(), costs=(), total_cost=None):
    costs = list(costs)
    return Participant(
        role=role,
        weekly_orders=list(orders),
        weekly_shipments=[0] * len(orders),
        weekly_costs=costs,
        total_cost=sum(costs) if total_cost is None else total_cost,
    )


def test_population_variance_has_no_bessel_correction():
    assert population_variance([1, 2, 3, 4]) == pytest.approx(1.25)
    assert population_variance([5]) == 0.0
    assert population_variance([]) == 0.0


def test_bullwhip_ratio_is_factory_over_retailer_variance():
    participants = [
        _participant(PlayerRole.RETAILER, orders=[4, 8]),
        _participant(PlayerRole.WHOLESALER, orders=[4, 8]),
        _participant(PlayerRole.DISTRIBUTOR, orders=[4, 8]),
        _participant(PlayerRole.FACTORY, orders=[0, 12]),
    ]

    assert bullwhip_ratio(participants) == pytest.approx(9.0)


def test_bullwhip_ratio_is_zero_for_flat_retailer_orders():
    participants = [
        _participant(PlayerRole.RETAILER, orders=[4, 4, 4, 4]),
        _participant(PlayerRole.FACTORY, orders=[0, 20, 3, 11]),
    ]

    assert bullwhip_ratio(participants) == 0


def test_bullwhip_ratio_without_history():
    participants = [
        _participant(PlayerRole.RETAILER),
        _participant(PlayerRole.FACTORY),
    ]

    assert bullwhip_ratio(participants) == 0
    assert bullwhip_ratio([]) == 0


def test_cost_reductions():
    retailer = _participant(PlayerRole.RETAILER, orders=[4, 9, 2], costs=[4.0, 1.5, 6.5])
    factory = _participant(PlayerRole.FACTORY, orders=[5, 5, 5], costs=[2.0, 2.0, 2.0])

    assert total_chain_cost([retailer, factory]) == pytest.approx(18.0)
    assert average_weekly_cost(retailer) == pytest.approx(4.0)
    assert order_range(retailer) == (2, 9)
    assert cost_range(retailer) == (1.5, 6.5)
    assert total_orders(retailer) == 15
    assert average_order(retailer) == pytest.approx(5.0)
    assert [p.role for p in rank_participants([retailer, factory])] == [
        PlayerRole.FACTORY,
        PlayerRole.RETAILER,
    ]


def test_empty_history_reductions_return_zero():
    idle = _participant(PlayerRole.WHOLESALER)

    assert average_weekly_cost(idle) == 0.0
    assert order_range(idle) == (0, 0)
    assert cost_range(idle) == (0.0, 0.0)
    assert total_orders(idle) == 0
    assert average_order(idle) == 0.0


def test_summarize_chain(make_state):
    state = make_state()
    for participant, cost in zip(state.participants, [10.0, 20.0, 30.0, 40.0]):
        participant.weekly_orders = [4, 6]
        participant.weekly_shipments = [4, 4]
        participant.weekly_costs = [cost / 2, cost / 2]
        participant.total_cost = cost

    summary = summarize_chain(state)

    assert summary.total_cost == pytest.approx(100.0)
    assert summary.average_cost_per_player == pytest.approx(25.0)
    assert summary.bullwhip_ratio == pytest.approx(1.0)
    assert summary.participants[3].average_weekly_cost == pytest.approx(20.0)
    assert summary.participants[0].max_order == 6
    assert summary.participants[0].total_orders == 10
    assert summary.participants[0].average_order == pytest.approx(5.0)


def test_leaderboard_ranks_finished_teams_by_cost(make_state):
    def team(team_id, cost, phase=GamePhase.FINISHED):
        state = make_state(phase=phase)
        state.participants[0].total_cost = cost
        return Team(id=team_id, name=f"Team {team_id}", state=state)

    board = leaderboard([team(1, 90.0), team(2, 30.0), team(3, 10.0, GamePhase.PLAYING), Team(id=4, name="Empty")])

    assert [row.team_id for row in board.standings] == [2, 1]
    assert [row.rank for row in board.standings] == [1, 2]
    assert board.cost.min == pytest.approx(30.0)
    assert board.cost.avg == pytest.approx(60.0)
    assert board.cost.max == pytest.approx(90.0)
    assert board.bullwhip.max == 0.0
    assert board.all_finished is False


def test_leaderboard_flags_when_every_team_has_finished(make_state):
    teams = [
        Team(id=team_id, name=f"Team {team_id}", state=make_state(phase=GamePhase.FINISHED))
        for team_id in (1, 2)
    ]

    assert leaderboard(teams).all_finished is True


def test_leaderboard_without_finished_teams():
    board = leaderboard([])

    assert board.standings == []
    assert board.cost.avg == 0.0
    assert board.all_finished is False
