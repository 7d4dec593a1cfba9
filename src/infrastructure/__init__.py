"""Infrastructure layer implementations."""

from src.infrastructure import channel, storage

__all__ = ["storage", "channel"]
