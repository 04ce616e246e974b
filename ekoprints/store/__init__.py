"""Mini README: Data layer contract and the in-memory store.

The views depend only on the callbacks and snapshots described in ``base``.
``memory`` provides a self-contained implementation with demo records that
is easy to replace with persistent storage later.
"""

from .base import BackOfficeRepository, BackOfficeSnapshot, SnapshotListener
from .memory import InMemoryBackOffice

__all__ = ["BackOfficeRepository", "BackOfficeSnapshot", "InMemoryBackOffice", "SnapshotListener"]
