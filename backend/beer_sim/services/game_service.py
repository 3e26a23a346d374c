"""Team sessions around the weekly simulation step.

Teams assemble a four-role roster, start play, submit orders and advance the
chain one week at a time.  Every change is written through a key-value store
so the service itself keeps no game state between calls.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, List, Optional

from beer_sim.core.config import settings
from beer_sim.crud.game_store import KeyValueStore
from beer_sim.schemas.game import (
    ROLE_SEQUENCE,
    ChainState,
    GamePhase,
    GameSettings,
    PlayerRole,
    Team,
    TeamPlayer,
)
from beer_sim.schemas.metrics import ChainMetrics, Leaderboard

from .engine import InvalidPhaseError, advance, new_chain_state, start_chain
from .metrics import leaderboard, summarize_chain

logger = logging.getLogger(__name__)

TEAM_INDEX_KEY = "teams:index"


class TeamNotFoundError(LookupError):
    """Raised when a team id is unknown to the store."""


class RoleTakenError(ValueError):
    """Raised when a role is already filled or the roster is full."""


class RosterIncompleteError(ValueError):
    """Raised when play is started before all four roles are filled."""


class TeamLimitError(ValueError):
    """Raised when the maximum number of teams has been reached."""


def team_key(team_id: int) -> str:
    return f"team:{team_id}"


class GameService:
    """Manage Beer Game teams whose roles are played by people."""

    def __init__(self, store: KeyValueStore, *, max_teams: Optional[int] = None) -> None:
        self.store = store
        self.max_teams = settings.MAX_TEAMS if max_teams is None else max_teams
        self._locks: Dict[int, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    # ------------------------------------------------------------------
    # Storage helpers
    # ------------------------------------------------------------------
    def _lock_for(self, team_id: int) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(team_id, threading.Lock())

    def _load_index(self) -> Dict[str, object]:
        return self.store.load(TEAM_INDEX_KEY) or {"next_id": 1, "ids": []}

    def _save(self, team: Team) -> Team:
        self.store.save(team_key(team.id), team.model_dump(mode="json"))
        return team

    def get_team(self, team_id: int) -> Team:
        raw = self.store.load(team_key(team_id))
        if raw is None:
            raise TeamNotFoundError(f"Team {team_id} not found")
        return Team.model_validate(raw)

    def list_teams(self) -> List[Team]:
        index = self._load_index()
        return [self.get_team(team_id) for team_id in index["ids"]]

    # ------------------------------------------------------------------
    # Lobby
    # ------------------------------------------------------------------
    def create_team(self, name: str, game_settings: Optional[GameSettings] = None) -> Team:
        with self._locks_guard:
            index = self._load_index()
            if len(index["ids"]) >= self.max_teams:
                raise TeamLimitError(f"No more than {self.max_teams} teams can be created")

            team_id = int(index["next_id"])
            team = Team(id=team_id, name=name, settings=game_settings or GameSettings())
            self._save(team)
            self.store.save(
                TEAM_INDEX_KEY,
                {"next_id": team_id + 1, "ids": [*index["ids"], team_id]},
            )

        logger.info("Created team %s (%s)", team_id, name)
        return team

    def join_team(self, team_id: int, player_name: str, role: PlayerRole) -> Team:
        with self._lock_for(team_id):
            team = self.get_team(team_id)
            if team.game_phase != GamePhase.SETUP:
                raise InvalidPhaseError(GamePhase.SETUP, team.game_phase)
            if team.is_complete:
                raise RoleTakenError(f"Team {team_id} already has four players")
            if any(player.role == role for player in team.players):
                raise RoleTakenError(f"Role {role.value} is already taken in team {team_id}")

            team.players.append(TeamPlayer(name=player_name, role=role))
            if team.is_complete:
                names = {player.role: player.name for player in team.players}
                team.state = new_chain_state(team.settings, names)
                logger.info("Team %s roster complete", team_id)

            return self._save(team)

    def start_game(self, team_id: int) -> Team:
        with self._lock_for(team_id):
            team = self.get_team(team_id)
            if not team.is_complete or team.state is None:
                missing = [r.value for r in ROLE_SEQUENCE if r not in {p.role for p in team.players}]
                raise RosterIncompleteError(f"Team {team_id} is missing roles: {', '.join(missing)}")

            team.state = start_chain(team.state)
            logger.info("Team %s started a %s-week game", team_id, team.state.total_weeks)
            return self._save(team)

    # ------------------------------------------------------------------
    # Play
    # ------------------------------------------------------------------
    def _playing_state(self, team: Team) -> ChainState:
        if team.state is None or team.state.game_phase != GamePhase.PLAYING:
            raise InvalidPhaseError(GamePhase.PLAYING, team.game_phase)
        return team.state

    def submit_order(self, team_id: int, role: PlayerRole, quantity: int) -> Team:
        """Record a player's order for the current week, clamped to be non-negative."""
        with self._lock_for(team_id):
            team = self.get_team(team_id)
            state = self._playing_state(team)
            order = max(0, int(quantity))
            state.participant(role).outgoing_order = order
            logger.debug("Team %s week %s: %s orders %s", team_id, state.current_week, role.value, order)
            return self._save(team)

    def advance_week(self, team_id: int) -> Team:
        with self._lock_for(team_id):
            team = self.get_team(team_id)
            state = self._playing_state(team)
            processed_week = state.current_week
            team.state = advance(state)
            self._save(team)

        logger.info(
            "Team %s processed week %s/%s",
            team_id,
            processed_week,
            team.state.total_weeks,
        )
        if team.state.game_phase == GamePhase.FINISHED:
            logger.info("Team %s finished its game", team_id)
        return team

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------
    def team_results(self, team_id: int) -> ChainMetrics:
        team = self.get_team(team_id)
        if team.state is None:
            raise InvalidPhaseError(GamePhase.PLAYING, GamePhase.SETUP)
        return summarize_chain(team.state)

    def leaderboard(self) -> Leaderboard:
        return leaderboard(self.list_teams())
