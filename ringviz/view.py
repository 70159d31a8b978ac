from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from ringviz import logging as slog

Listener = Callable[["ChartEvent"], None]


@dataclass
class ChartEvent:
    """Pointer event as dispatched by the engine; `data` is the hovered record (origin row)."""
    type: str
    data: Optional[Dict[str, Any]] = None
    x: float = 0.0
    y: float = 0.0
    extra: Dict[str, Any] = field(default_factory=dict)


class View:
    """
    Engine-facing surface of one plot: the descriptors handed to the renderer
    (geometry, coordinate, annotations, tooltip, ...) and its event bus.
    """

    def __init__(self) -> None:
        self.config: Dict[str, Any] = {}
        self._listeners: Dict[str, List[Listener]] = {}

    def set_config(self, key: str, value: Any) -> None:
        self.config[key] = value

    def get_config(self, key: str, default: Any = None) -> Any:
        return self.config.get(key, default)

    def on(self, event_name: str, listener: Listener) -> None:
        self._listeners.setdefault(event_name, []).append(listener)

    def off(self, event_name: str | None = None, listener: Listener | None = None) -> None:
        if event_name is None:
            self._listeners.clear()
            return
        if listener is None:
            self._listeners.pop(event_name, None)
            return
        kept = [cb for cb in self._listeners.get(event_name, []) if cb is not listener]
        if kept:
            self._listeners[event_name] = kept
        else:
            self._listeners.pop(event_name, None)

    def listeners(self, event_name: str) -> List[Listener]:
        return list(self._listeners.get(event_name, []))

    def emit(self, event_name: str, event: ChartEvent | None = None) -> int:
        """Dispatch to listeners in registration order; returns how many were called."""
        ev = event or ChartEvent(type=event_name)
        callbacks = self.listeners(event_name)
        for cb in callbacks:
            cb(ev)
        if not callbacks:
            slog.log_debug(f"no listener for '{event_name}'", scope="view")
        return len(callbacks)
