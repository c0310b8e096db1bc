"""Persistence backends."""

from .base import Repository
from .memory import InMemoryRepository
from .redis import RedisRepository

__all__ = ["Repository", "InMemoryRepository", "RedisRepository"]
