"""
SoulReg Core Package
====================
Registry invariant engine for non-transferable "soul" identity records.

Provides:
- SoulRegistry: mint / burn / lookup of soul records
- Collision-resistant identifier generation with bounded retry
- Whitelisted, append-only-tracked metadata storage
- Pluggable key-value storage (memory default, SQLite)
- Event notification transports (local, HTTP, Kafka)
"""

from .errors import RegistryError
from .registry import SoulRegistry

__all__ = ["RegistryError", "SoulRegistry"]
