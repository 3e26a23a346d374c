from typing import List

from pydantic import BaseModel

from .game import GamePhase, PlayerRole


class ParticipantMetrics(BaseModel):
    role: PlayerRole
    name: str
    total_cost: float
    average_weekly_cost: float
    min_weekly_cost: float
    max_weekly_cost: float
    min_order: int
    max_order: int
    total_orders: int
    average_order: float
    weeks_played: int


class ChainMetrics(BaseModel):
    current_week: int
    total_weeks: int
    game_phase: GamePhase
    total_cost: float
    average_cost_per_player: float
    bullwhip_ratio: float
    participants: List[ParticipantMetrics]


class TeamStanding(BaseModel):
    rank: int
    team_id: int
    team_name: str
    total_cost: float
    average_cost_per_player: float
    bullwhip_ratio: float


class RangeSummary(BaseModel):
    min: float = 0.0
    avg: float = 0.0
    max: float = 0.0


class Leaderboard(BaseModel):
    standings: List[TeamStanding]
    all_finished: bool = False
    cost: RangeSummary
    bullwhip: RangeSummary
