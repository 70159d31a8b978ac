# ringviz/plots/registry.py
from __future__ import annotations
from typing import Any, Callable, Dict

PlotFactory = Callable[..., Any]

_REGISTRY: Dict[str, PlotFactory] = {}

def register(name: str, factory: PlotFactory) -> None:
    key = (name or "").strip().lower()
    if not key:
        raise ValueError("Plot type name must be non-empty")
    _REGISTRY[key] = factory

def get(name: str) -> PlotFactory | None:
    return _REGISTRY.get((name or "").strip().lower())

def available() -> Dict[str, PlotFactory]:
    return dict(_REGISTRY)

def create_plot(plot_type: str, options: Dict[str, Any], **kwargs: Any) -> Any:
    factory = get(plot_type)
    if factory is None:
        raise ValueError(f"Unknown plot type '{plot_type}'. Registered: {sorted(_REGISTRY)}")
    return factory(options, **kwargs)
