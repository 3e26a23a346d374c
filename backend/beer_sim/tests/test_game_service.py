import pytest

from beer_sim.crud.game_store import SqlAlchemyStore
from beer_sim.db.session import build_engine, build_session_factory, init_db
from beer_sim.schemas.game import ROLE_SEQUENCE, GamePhase, GameSettings, PlayerRole
from beer_sim.services.engine import InvalidPhaseError
from beer_sim.services.game_service import (
    GameService,
    RoleTakenError,
    RosterIncompleteError,
    TeamLimitError,
    TeamNotFoundError,
)


def test_team_ids_are_sequential(service):
    first = service.create_team("Red")
    second = service.create_team("Blue")

    assert (first.id, second.id) == (1, 2)
    assert [team.name for team in service.list_teams()] == ["Red", "Blue"]


def test_team_limit(service):
    for name in ("A", "B", "C"):
        service.create_team(name)

    with pytest.raises(TeamLimitError):
        service.create_team("D")


def test_unknown_team(service):
    with pytest.raises(TeamNotFoundError):
        service.get_team(42)


def test_role_can_only_be_taken_once(service):
    team = service.create_team("Red")
    service.join_team(team.id, "Ali", PlayerRole.RETAILER)

    with pytest.raises(RoleTakenError):
        service.join_team(team.id, "Sara", PlayerRole.RETAILER)


def test_chain_is_built_when_roster_completes(service):
    team = service.create_team("Red")
    for role in ROLE_SEQUENCE[:3]:
        team = service.join_team(team.id, role.value, role)
    assert team.state is None

    team = service.join_team(team.id, "Reza", PlayerRole.FACTORY)

    assert team.is_complete
    assert team.state.game_phase == GamePhase.SETUP
    assert team.state.participant(PlayerRole.FACTORY).name == "Reza"


def test_full_team_rejects_more_players(service, full_team):
    with pytest.raises(RoleTakenError):
        service.join_team(full_team.id, "Extra", PlayerRole.RETAILER)

    service.start_game(full_team.id)

    with pytest.raises(InvalidPhaseError):
        service.join_team(full_team.id, "Late", PlayerRole.RETAILER)


def test_start_requires_complete_roster(service):
    team = service.create_team("Red")
    service.join_team(team.id, "Ali", PlayerRole.RETAILER)

    with pytest.raises(RosterIncompleteError):
        service.start_game(team.id)


def test_orders_require_playing_phase(service, full_team):
    with pytest.raises(InvalidPhaseError):
        service.submit_order(full_team.id, PlayerRole.RETAILER, 4)


def test_negative_orders_are_clamped(service, full_team):
    service.start_game(full_team.id)

    team = service.submit_order(full_team.id, PlayerRole.WHOLESALER, -5)

    assert team.state.participant(PlayerRole.WHOLESALER).outgoing_order == 0


def test_week_cycle_is_persisted(service, store, full_team):
    service.start_game(full_team.id)
    for role, quantity in zip(ROLE_SEQUENCE, [4, 5, 6, 7]):
        service.submit_order(full_team.id, role, quantity)

    service.advance_week(full_team.id)

    reloaded = service.get_team(full_team.id)
    assert reloaded.state.current_week == 2
    assert [p.weekly_orders for p in reloaded.state.participants] == [[4], [5], [6], [7]]
    assert store.load(f"team:{full_team.id}")["state"]["current_week"] == 2


def test_game_finishes_and_appears_on_leaderboard(service):
    team = service.create_team("Short", GameSettings(total_weeks=3))
    for role in ROLE_SEQUENCE:
        service.join_team(team.id, role.value, role)
    service.start_game(team.id)

    for _ in range(3):
        team = service.advance_week(team.id)

    assert team.state.game_phase == GamePhase.FINISHED
    with pytest.raises(InvalidPhaseError):
        service.advance_week(team.id)

    board = service.leaderboard()
    assert [row.team_id for row in board.standings] == [team.id]
    assert service.team_results(team.id).participants[0].weeks_played == 3


def test_service_works_on_sqlalchemy_store():
    engine = build_engine("sqlite:///:memory:")
    init_db(engine)
    service = GameService(SqlAlchemyStore(build_session_factory(engine)))

    team = service.create_team("Persisted")
    for role in ROLE_SEQUENCE:
        service.join_team(team.id, role.value, role)
    service.start_game(team.id)
    service.submit_order(team.id, PlayerRole.FACTORY, 10)
    service.advance_week(team.id)

    fresh = GameService(SqlAlchemyStore(build_session_factory(engine)))
    state = fresh.get_team(team.id).state
    assert state.current_week == 2
    assert state.participant(PlayerRole.FACTORY).incoming_shipment == 10
