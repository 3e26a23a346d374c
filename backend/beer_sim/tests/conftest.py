import os

# Keep tests off the filesystem; must run before beer_sim.core.config is imported.
os.environ.setdefault("SQLALCHEMY_DATABASE_URI", "sqlite:///:memory:")
os.environ.setdefault("LOG_TO_FILE", "false")

from typing import Dict, Optional

import pytest

from beer_sim.crud.game_store import InMemoryStore
from beer_sim.schemas.game import ROLE_SEQUENCE, ChainState, GamePhase, Participant, PlayerRole
from beer_sim.services.game_service import GameService


def build_state(
    *,
    inventory: int = 12,
    backlog: int = 0,
    orders: Optional[Dict[PlayerRole, int]] = None,
    customer_demand=None,
    total_weeks: int = 35,
    current_week: int = 1,
    phase: GamePhase = GamePhase.PLAYING,
) -> ChainState:
    orders = orders or {}
    return ChainState(
        participants=[
            Participant(
                role=role,
                name=role.value.title(),
                inventory=inventory,
                backlog=backlog,
                outgoing_order=orders.get(role, 4),
            )
            for role in ROLE_SEQUENCE
        ],
        current_week=current_week,
        total_weeks=total_weeks,
        customer_demand=[4] * total_weeks if customer_demand is None else customer_demand,
        game_phase=phase,
    )


@pytest.fixture
def make_state():
    return build_state


@pytest.fixture
def playing_state() -> ChainState:
    return build_state()


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def service(store) -> GameService:
    return GameService(store, max_teams=3)


@pytest.fixture
def full_team(service):
    team = service.create_team("Red")
    for role in ROLE_SEQUENCE:
        team = service.join_team(team.id, f"{role.value} player", role)
    return team
