"""SQLAlchemy models."""
from .base import Base
from .snapshot import GameSnapshot

__all__ = ["Base", "GameSnapshot"]
