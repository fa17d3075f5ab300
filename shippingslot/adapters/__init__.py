"""
Adapters layer - Storage and lookup collaborators for the slot services.
"""

from .json_state import JsonCheckoutState
from .memory import DefaultSlotFactory, InMemoryMethodLookup, InMemorySlotStore, StaticCartContext

__all__ = [
    "DefaultSlotFactory",
    "InMemoryMethodLookup",
    "InMemorySlotStore",
    "JsonCheckoutState",
    "StaticCartContext",
]
