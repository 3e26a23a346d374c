"""Key-value persistence for game documents.

The session layer only ever calls ``load(key)`` and ``save(key, value)``; what
sits behind those two calls is interchangeable.
"""

from __future__ import annotations

import json
import logging
import threading
from typing import Any, Dict, Optional, Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from beer_sim.models.snapshot import GameSnapshot, utcnow

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def load(self, key: str) -> Optional[Dict[str, Any]]:
        ...

    def save(self, key: str, value: Dict[str, Any]) -> None:
        ...


class InMemoryStore:
    """Process-local store; values are kept as JSON text so callers never share objects."""

    def __init__(self) -> None:
        self._items: Dict[str, str] = {}
        self._lock = threading.Lock()

    def load(self, key: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            raw = self._items.get(key)
        return json.loads(raw) if raw is not None else None

    def save(self, key: str, value: Dict[str, Any]) -> None:
        raw = json.dumps(value)
        with self._lock:
            self._items[key] = raw


class SqlAlchemyStore:
    """Store backed by the ``game_snapshots`` table."""

    def __init__(self, session_factory: sessionmaker) -> None:
        self.session_factory = session_factory

    def _get(self, db: Session, key: str) -> Optional[GameSnapshot]:
        return db.execute(select(GameSnapshot).where(GameSnapshot.key == key)).scalar_one_or_none()

    def load(self, key: str) -> Optional[Dict[str, Any]]:
        with self.session_factory() as db:
            snapshot = self._get(db, key)
            return dict(snapshot.value) if snapshot is not None else None

    def save(self, key: str, value: Dict[str, Any]) -> None:
        with self.session_factory() as db:
            try:
                snapshot = self._get(db, key)
                if snapshot is None:
                    db.add(GameSnapshot(key=key, value=value))
                else:
                    snapshot.value = value
                    snapshot.updated_at = utcnow()
                db.commit()
            except Exception:
                db.rollback()
                logger.exception("Failed to save snapshot %s", key)
                raise
