from fastapi import APIRouter
from pydantic import BaseModel

from beer_sim.schemas.game import ROLE_SEQUENCE, ChainState, SimulationRequest
from beer_sim.schemas.metrics import ChainMetrics
from beer_sim.services.metrics import summarize_chain
from beer_sim.services.policies import make_policy
from beer_sim.services.simulation import run_simulation

router = APIRouter()


class SimulationResponse(BaseModel):
    state: ChainState
    metrics: ChainMetrics


@router.post("/simulations", response_model=SimulationResponse)
def simulate(payload: SimulationRequest) -> SimulationResponse:
    """Play a full game with every role controlled by the requested policy."""
    policies = {
        role: make_policy(payload.policy, base_stock=payload.base_stock)
        for role in ROLE_SEQUENCE
    }
    state = run_simulation(payload.settings, policies)
    return SimulationResponse(state=state, metrics=summarize_chain(state))
