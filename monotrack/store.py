"""Durable storage for finished routes and saved markers.

Stores exchange plain JSON-compatible payloads (lists of dicts); parsing into
models and sanitizing happens in ``services.history_service``.
"""

from __future__ import annotations

import copy
import json
import logging
import threading
from pathlib import Path
from typing import Any, Dict, List, Protocol

from .config import MARKERS_FILE, MONOTRACK_STORE_DIR, ROUTES_FILE
from .errors import ExportError, StoreError

__all__ = ["RouteStore", "JsonFileStore", "MemoryStore", "export_json"]

_LOGGER = logging.getLogger(__name__)

Payload = List[Dict[str, Any]]


class RouteStore(Protocol):
    def load_routes(self) -> List[Any]: ...

    def save_routes(self, routes: Payload) -> None: ...

    def load_markers(self) -> List[Any]: ...

    def save_markers(self, markers: Payload) -> None: ...

    def clear_routes(self) -> None: ...


class JsonFileStore:
    """Routes and markers kept in two JSON files under one directory."""

    def __init__(self, base_dir: str | Path | None = None) -> None:
        base = Path(base_dir if base_dir is not None else MONOTRACK_STORE_DIR)
        self._base_dir = base if base.is_absolute() else Path.cwd() / base
        self._lock = threading.Lock()

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    @property
    def routes_path(self) -> Path:
        return self._base_dir / ROUTES_FILE

    @property
    def markers_path(self) -> Path:
        return self._base_dir / MARKERS_FILE

    def _read_list(self, path: Path) -> List[Any]:
        try:
            with path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except FileNotFoundError:
            return []
        except (OSError, ValueError) as exc:
            _LOGGER.error("Failed reading store file %s: %s", path, exc)
            return []
        if not isinstance(payload, list):
            _LOGGER.warning(
                "Ignoring store file %s: expected a list, got %s",
                path,
                type(payload).__name__,
            )
            return []
        return payload

    def _write_list(self, path: Path, payload: Payload) -> None:
        temp_path = path.with_suffix(".tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with temp_path.open("w", encoding="utf-8") as handle:
                json.dump(payload, handle, ensure_ascii=False, indent=2)
            temp_path.replace(path)
        except (OSError, TypeError, ValueError) as exc:
            raise StoreError(f"Failed writing store file {path}: {exc}") from exc

    def load_routes(self) -> List[Any]:
        with self._lock:
            return self._read_list(self.routes_path)

    def save_routes(self, routes: Payload) -> None:
        with self._lock:
            self._write_list(self.routes_path, routes)

    def load_markers(self) -> List[Any]:
        with self._lock:
            return self._read_list(self.markers_path)

    def save_markers(self, markers: Payload) -> None:
        with self._lock:
            self._write_list(self.markers_path, markers)

    def clear_routes(self) -> None:
        with self._lock:
            try:
                self.routes_path.unlink()
            except FileNotFoundError:
                return
            except OSError as exc:
                raise StoreError(
                    f"Failed removing store file {self.routes_path}: {exc}"
                ) from exc


class MemoryStore:
    """In-process store; payloads are deep-copied in both directions."""

    def __init__(
        self, routes: List[Any] | None = None, markers: List[Any] | None = None
    ) -> None:
        self._routes: List[Any] = copy.deepcopy(routes) if routes else []
        self._markers: List[Any] = copy.deepcopy(markers) if markers else []
        self.save_count = 0

    def load_routes(self) -> List[Any]:
        return copy.deepcopy(self._routes)

    def save_routes(self, routes: Payload) -> None:
        self._routes = copy.deepcopy(routes)
        self.save_count += 1

    def load_markers(self) -> List[Any]:
        return copy.deepcopy(self._markers)

    def save_markers(self, markers: Payload) -> None:
        self._markers = copy.deepcopy(markers)
        self.save_count += 1

    def clear_routes(self) -> None:
        self._routes = []


def export_json(path: str | Path, routes: Payload, markers: Payload) -> Path:
    """Write routes and markers into one ``{"routes": [...], "markers": [...]}`` file."""

    target = Path(path)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        with target.open("w", encoding="utf-8") as handle:
            json.dump(
                {"routes": routes, "markers": markers},
                handle,
                ensure_ascii=False,
                indent=2,
            )
    except OSError as exc:
        raise ExportError(f"Failed writing export {target}: {exc}") from exc
    return target
