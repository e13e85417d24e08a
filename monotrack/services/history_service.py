"""Saved route and marker history.

Wraps a ``RouteStore``: sanitizes whatever the store returns, writes the
cleaned payload back when sanitizing changed it, and keeps parsed models for
the analytics/export layers. Save failures are logged rather than raised so a
broken disk never takes down an in-progress recording.

The stored payloads are kept next to the parsed models and are what gets
written, so fields the models do not know about survive a rewrite.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Callable, Dict, List, Optional

from ..errors import StoreError
from ..models import Marker, Route
from ..modes import MarkerType, normalize_marker_type
from ..sanitizer import sanitize_markers, sanitize_routes
from ..store import JsonFileStore, RouteStore
from ..utils import is_finite_number, new_id, now_ms as _wall_clock_ms

__all__ = ["HistoryService", "HistoryServiceConfig"]


@dataclass(slots=True)
class HistoryServiceConfig:
    now_ms: Callable[[], int] = _wall_clock_ms
    id_factory: Callable[[], str] = new_id
    logger: logging.Logger | None = None


class HistoryService:
    def __init__(
        self,
        store: RouteStore | None = None,
        config: HistoryServiceConfig | None = None,
    ) -> None:
        self.store: RouteStore = store if store is not None else JsonFileStore()
        self.config = config or HistoryServiceConfig()
        self._log = self.config.logger or logging.getLogger(self.__class__.__name__)
        self._routes: List[Route] = []
        self._markers: List[Marker] = []
        self._route_payloads: List[Dict[str, Any]] = []
        self._marker_payloads: List[Dict[str, Any]] = []

    @property
    def routes(self) -> List[Route]:
        return list(self._routes)

    @property
    def markers(self) -> List[Marker]:
        return list(self._markers)

    def load(self) -> None:
        """Load, sanitize and (when needed) rewrite the stored history."""

        raw_routes = self.store.load_routes()
        raw_markers = self.store.load_markers()
        self._route_payloads = sanitize_routes(raw_routes)
        self._marker_payloads = sanitize_markers(raw_markers)

        self._routes = [Route.from_dict(r) for r in self._route_payloads]
        self._markers = [Marker.from_dict(m) for m in self._marker_payloads]
        self._log.info(
            "Loaded %d routes and %d markers", len(self._routes), len(self._markers)
        )

        if self._route_payloads != raw_routes:
            self._log.info("Writing back sanitized routes")
            self._persist_routes()
        if self._marker_payloads != raw_markers:
            self._log.info("Writing back sanitized markers")
            self._persist_markers()

    def _persist_routes(self) -> bool:
        try:
            self.store.save_routes(self._route_payloads)
        except StoreError as exc:
            self._log.warning("Failed to persist routes: %s", exc)
            return False
        return True

    def _persist_markers(self) -> bool:
        try:
            self.store.save_markers(self._marker_payloads)
        except StoreError as exc:
            self._log.warning("Failed to persist markers: %s", exc)
            return False
        return True

    def save_route(self, route: Route) -> bool:
        """Append a finished route and persist the full history.

        The route is copied so later changes by the caller cannot leak into the
        stored history. Returns whether the store write succeeded.
        """

        stored = route.copy()
        self._routes.append(stored)
        self._route_payloads.append(stored.to_dict())
        return self._persist_routes()

    def clear_routes(self) -> None:
        self._routes = []
        self._route_payloads = []
        try:
            self.store.clear_routes()
        except StoreError as exc:
            self._log.warning("Failed to clear routes: %s", exc)

    def add_marker(
        self,
        lat: float,
        lng: float,
        label: str,
        marker_type: MarkerType | str | None = MarkerType.GENERAL,
    ) -> Marker:
        if not (is_finite_number(lat) and is_finite_number(lng)):
            raise ValueError(f"Marker coordinates must be finite (lat={lat}, lng={lng})")
        marker = Marker(
            id=self.config.id_factory(),
            lat=float(lat),
            lng=float(lng),
            label=label.strip(),
            type=normalize_marker_type(marker_type),
            created_at_ms=self.config.now_ms(),
        )
        self._markers.append(marker)
        self._marker_payloads.append(marker.to_dict())
        self._persist_markers()
        return marker

    def delete_marker(self, marker_id: str) -> bool:
        kept = [
            (marker, payload)
            for marker, payload in zip(self._markers, self._marker_payloads)
            if marker.id != marker_id
        ]
        if len(kept) == len(self._markers):
            return False
        self._markers = [marker for marker, _ in kept]
        self._marker_payloads = [payload for _, payload in kept]
        self._persist_markers()
        return True

    def find_marker(self, marker_id: str) -> Optional[Marker]:
        return next((m for m in self._markers if m.id == marker_id), None)
