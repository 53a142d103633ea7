from __future__ import annotations

import threading

from .nodes import NodeId


class IdGenerator:
    """Monotonic node identifier source.

    Parsing threads one of these through every node construction. A shared
    default instance exists for convenience; tests and parallel callers pass
    their own to get deterministic identifiers.
    """

    def __init__(self, prefix: str = "parsed_", start: int = 0) -> None:
        self.prefix = prefix
        self._start = start
        self._counter = start
        self._lock = threading.Lock()

    def next_id(self) -> NodeId:
        with self._lock:
            self._counter += 1
            return f"{self.prefix}{self._counter}"

    def reset(self) -> None:
        with self._lock:
            self._counter = self._start


default_id_generator = IdGenerator()


def reset_id_counter() -> None:
    """Reset the process-wide default generator (test fixtures)."""
    default_id_generator.reset()


__all__ = ["IdGenerator", "default_id_generator", "reset_id_counter"]
