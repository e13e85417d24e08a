"""Service layer package.

Exports high-level services consumed by the engine host and the CLI.
"""

from .history_service import HistoryService, HistoryServiceConfig

__all__ = ["HistoryService", "HistoryServiceConfig"]
