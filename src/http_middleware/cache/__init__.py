"""Cache backends for SwrMiddleware."""

from .base import SwrCache
from .memory import InMemorySwrCache

__all__ = [
    "SwrCache",
    "InMemorySwrCache",
]
