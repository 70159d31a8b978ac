from __future__ import annotations
from typing import Any

from ringviz.responsive import ResponsiveEngine

# Below this container width the legend moves under the ring.
NARROW_WIDTH_PX = 400
# Below this outer radius (px) slice labels are dropped.
MIN_LABEL_RADIUS_PX = 80


def legend_below_when_narrow(layer: Any) -> None:
    legend = layer.options.get("legend")
    if not isinstance(legend, dict) or not legend.get("visible"):
        return
    if layer.width and layer.width < NARROW_WIDTH_PX:
        legend["position"] = "bottom-center"


def hide_labels_when_small(layer: Any) -> None:
    label = layer.options.get("label")
    if not isinstance(label, dict) or not label.get("visible"):
        return
    side = min(layer.width or 0, layer.height or 0)
    outer_px = side / 2.0 * float(layer.options.get("radius") or 0.0)
    if outer_px < MIN_LABEL_RADIUS_PX:
        label["visible"] = False


RING_RESPONSIVE = ResponsiveEngine()
RING_RESPONSIVE.register("preRender", "legend_below_when_narrow", legend_below_when_narrow)
RING_RESPONSIVE.register("preRender", "hide_labels_when_small", hide_labels_when_small)
