"""Shared session state and service lookup handed to commands."""

from __future__ import annotations

import threading
from typing import Any


class SessionStore:
    """In-memory key/value store shared across commands of one shell session."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._data: dict[str, Any] = {}

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = value

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def keys(self) -> list[str]:
        with self._lock:
            return sorted(self._data)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._data


class ServiceRegistry:
    """Named shared dependencies (clients, repositories) available to commands."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._services: dict[str, Any] = {}

    def register(self, name: str, service: Any) -> None:
        with self._lock:
            self._services[name] = service

    def get(self, name: str, default: Any = None) -> Any:
        with self._lock:
            return self._services.get(name, default)

    def require(self, name: str) -> Any:
        """Return a registered service or raise ``KeyError``."""
        with self._lock:
            if name not in self._services:
                raise KeyError(f"Service not registered: {name}")
            return self._services[name]

    def names(self) -> list[str]:
        with self._lock:
            return sorted(self._services)
