"""
Records package for the Disasters service.

Disaster reports with their audit trail, and the resources table used
by the nearby-resource query. Backends: in-memory and PostgreSQL.
"""

from typing import TYPE_CHECKING, Tuple, Any

from .memory import InMemoryDisasterStore, InMemoryResourceStore
from .service import DisasterRecords

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.config import BaseConfig


def build_record_stores(config: "BaseConfig") -> Tuple[Any, Any]:
    """Create the (disaster store, resource store) pair selected by ``config.record_backend``."""
    backend = config.record_backend.lower()
    if backend == "memory":
        return InMemoryDisasterStore(), InMemoryResourceStore()
    if backend == "postgres":
        from .postgres import PostgresDisasterStore, PostgresPool, PostgresResourceStore
        pool = PostgresPool(config.postgres_dsn)
        return PostgresDisasterStore(pool), PostgresResourceStore(pool)
    raise ValueError(f"Unknown record backend: {config.record_backend}")


__all__ = [
    "DisasterRecords",
    "InMemoryDisasterStore",
    "InMemoryResourceStore",
    "build_record_stores",
]
