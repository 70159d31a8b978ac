from __future__ import annotations
from ringviz.plots import registry
from .layer import RING_HOOKS, build_ring_plot, geometry_for, resolve_defaults
from .statistic import StatisticOverlayController, compute_total, derive_display_payload

registry.register("ring", build_ring_plot)

__all__ = [
    "RING_HOOKS",
    "build_ring_plot",
    "geometry_for",
    "resolve_defaults",
    "StatisticOverlayController",
    "compute_total",
    "derive_display_payload",
]
