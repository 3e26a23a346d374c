import logging
from contextlib import contextmanager
from typing import Iterator, List

from fastapi import APIRouter, Depends, HTTPException, status

from beer_sim.api.deps import get_game_service
from beer_sim.schemas.game import OrderSubmit, PlayerJoin, Team, TeamCreate
from beer_sim.schemas.metrics import ChainMetrics, Leaderboard
from beer_sim.services.engine import InvalidPhaseError, MalformedStateError
from beer_sim.services.game_service import (
    GameService,
    RoleTakenError,
    RosterIncompleteError,
    TeamLimitError,
    TeamNotFoundError,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@contextmanager
def translate_errors() -> Iterator[None]:
    """Map service exceptions onto HTTP status codes."""
    try:
        yield
    except TeamNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except (InvalidPhaseError, RoleTakenError, RosterIncompleteError, TeamLimitError) as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except MalformedStateError as e:
        logger.error("Rejected malformed chain state: %s", e)
        raise HTTPException(status_code=422, detail=str(e))


@router.post("/teams", response_model=Team, status_code=status.HTTP_201_CREATED)
def create_team(payload: TeamCreate, service: GameService = Depends(get_game_service)) -> Team:
    with translate_errors():
        return service.create_team(payload.name, payload.settings)


@router.get("/teams", response_model=List[Team])
def list_teams(service: GameService = Depends(get_game_service)) -> List[Team]:
    return service.list_teams()


@router.get("/teams/{team_id}", response_model=Team)
def get_team(team_id: int, service: GameService = Depends(get_game_service)) -> Team:
    with translate_errors():
        return service.get_team(team_id)


@router.post("/teams/{team_id}/players", response_model=Team)
def join_team(team_id: int, payload: PlayerJoin, service: GameService = Depends(get_game_service)) -> Team:
    with translate_errors():
        return service.join_team(team_id, payload.name, payload.role)


@router.post("/teams/{team_id}/start", response_model=Team)
def start_game(team_id: int, service: GameService = Depends(get_game_service)) -> Team:
    with translate_errors():
        return service.start_game(team_id)


@router.post("/teams/{team_id}/orders", response_model=Team)
def submit_order(team_id: int, payload: OrderSubmit, service: GameService = Depends(get_game_service)) -> Team:
    with translate_errors():
        return service.submit_order(team_id, payload.role, payload.quantity)


@router.post("/teams/{team_id}/advance", response_model=Team)
def advance_week(team_id: int, service: GameService = Depends(get_game_service)) -> Team:
    with translate_errors():
        return service.advance_week(team_id)


@router.get("/teams/{team_id}/results", response_model=ChainMetrics)
def team_results(team_id: int, service: GameService = Depends(get_game_service)) -> ChainMetrics:
    with translate_errors():
        return service.team_results(team_id)


@router.get("/leaderboard", response_model=Leaderboard)
def get_leaderboard(service: GameService = Depends(get_game_service)) -> Leaderboard:
    return service.leaderboard()
