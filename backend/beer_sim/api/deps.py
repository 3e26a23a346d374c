"""FastAPI dependency helpers."""

from __future__ import annotations

from functools import lru_cache

from beer_sim.crud.game_store import SqlAlchemyStore
from beer_sim.db.session import SessionLocal, engine, init_db
from beer_sim.services.game_service import GameService


@lru_cache()
def get_game_service() -> GameService:
    """Process-wide service backed by the configured database."""
    init_db(engine)
    return GameService(SqlAlchemyStore(SessionLocal))
