from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from beer_sim.core.config import settings
from beer_sim.core.demand_patterns import (
    DemandPatternType,
    get_demand_pattern,
    normalize_demand_pattern,
)


class PlayerRole(str, Enum):
    RETAILER = "retailer"
    WHOLESALER = "wholesaler"
    DISTRIBUTOR = "distributor"
    FACTORY = "factory"


# Customer demand enters at index 0; orders travel towards the factory.
ROLE_SEQUENCE: List[PlayerRole] = [
    PlayerRole.RETAILER,
    PlayerRole.WHOLESALER,
    PlayerRole.DISTRIBUTOR,
    PlayerRole.FACTORY,
]


class GamePhase(str, Enum):
    SETUP = "setup"
    PLAYING = "playing"
    FINISHED = "finished"


class DemandPattern(BaseModel):
    type: DemandPatternType = Field(DemandPatternType.CLASSIC, description="Type of demand pattern")
    params: Dict[str, Any] = Field(
        default_factory=dict,
        description="Parameters for the demand pattern; empty means the pattern defaults",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "type": "classic",
                "params": {
                    "initial_demand": 4,
                    "change_week": 5,
                    "final_demand": 8,
                    "revert_week": 25,
                },
            }
        }
    )

    def generate(self, num_weeks: int) -> List[int]:
        normalized = normalize_demand_pattern(self.model_dump(mode="json"))
        return get_demand_pattern(normalized, num_weeks)


class Participant(BaseModel):
    """One role's ledger in the chain."""

    role: PlayerRole
    name: str = ""
    inventory: int = 0
    backlog: int = 0
    incoming_shipment: int = 0
    outgoing_order: int = 0
    incoming_order: int = 0
    outgoing_shipment: int = 0
    total_cost: float = 0.0
    weekly_orders: List[int] = Field(default_factory=list)
    weekly_shipments: List[int] = Field(default_factory=list)
    weekly_costs: List[float] = Field(default_factory=list)

    @property
    def weeks_played(self) -> int:
        return len(self.weekly_orders)


class ChainState(BaseModel):
    """Four-role supply chain ledger plus the game clock."""

    participants: List[Participant]
    current_week: int = 0
    total_weeks: int = 35
    customer_demand: List[int] = Field(default_factory=list)
    game_phase: GamePhase = GamePhase.SETUP
    holding_cost_rate: float = 0.5
    backlog_cost_rate: float = 1.0

    def participant(self, role: PlayerRole) -> Participant:
        for participant in self.participants:
            if participant.role == role:
                return participant
        raise KeyError(role)

    @property
    def is_finished(self) -> bool:
        return self.game_phase == GamePhase.FINISHED


class GameSettings(BaseModel):
    """Configuration supplied once, when a game is created."""

    total_weeks: int = Field(default_factory=lambda: settings.TOTAL_WEEKS, ge=1, le=1000)
    initial_inventory: int = Field(default_factory=lambda: settings.INITIAL_INVENTORY, ge=0)
    initial_backlog: int = Field(default_factory=lambda: settings.INITIAL_BACKLOG, ge=0)
    holding_cost_rate: float = Field(default_factory=lambda: settings.HOLDING_COST_PER_UNIT, ge=0)
    backlog_cost_rate: float = Field(default_factory=lambda: settings.BACKORDER_COST_PER_UNIT, ge=0)
    customer_demand: Optional[List[int]] = Field(
        default=None,
        description="Explicit demand table; generated from demand_pattern when omitted",
    )
    demand_pattern: DemandPattern = Field(default_factory=DemandPattern)
    player_names: Dict[PlayerRole, str] = Field(default_factory=dict)

    @field_validator("customer_demand")
    @classmethod
    def validate_customer_demand(cls, v: Optional[List[int]]) -> Optional[List[int]]:
        if v is not None and any(value < 0 for value in v):
            raise ValueError("customer demand values must be non-negative")
        return v

    def resolve_customer_demand(self) -> List[int]:
        if self.customer_demand is not None:
            return list(self.customer_demand)
        return self.demand_pattern.generate(self.total_weeks)


# ----------------------------------------------------------------------
# Session layer
# ----------------------------------------------------------------------
class TeamPlayer(BaseModel):
    name: str
    role: PlayerRole


class Team(BaseModel):
    id: int
    name: str
    players: List[TeamPlayer] = Field(default_factory=list)
    settings: GameSettings = Field(default_factory=GameSettings)
    state: Optional[ChainState] = None

    @property
    def is_complete(self) -> bool:
        return len(self.players) == len(ROLE_SEQUENCE)

    @property
    def game_phase(self) -> GamePhase:
        return self.state.game_phase if self.state else GamePhase.SETUP


class TeamCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    settings: Optional[GameSettings] = None


class PlayerJoin(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    role: PlayerRole


class OrderSubmit(BaseModel):
    role: PlayerRole
    quantity: int


class PolicyName(str, Enum):
    NAIVE = "naive"
    BASE_STOCK = "base_stock"


class SimulationRequest(BaseModel):
    settings: GameSettings = Field(default_factory=GameSettings)
    policy: PolicyName = PolicyName.NAIVE
    base_stock: int = Field(default=20, ge=0)
