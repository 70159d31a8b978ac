from __future__ import annotations
from typing import Any, Dict, Optional

from ringviz.plots import registry
from ringviz.plots.pipeline import PlotHooks, PlotLayer

# Pie plot: one stacked interval per record in a theta coordinate.

ENGINE_GEOM_MAP = {"pie": "interval"}
PLOT_GEOM_MAP = {"interval": "pie"}

PIE_EVENTS = {
    "on_pie_click": "interval:click",
    "on_pie_dblclick": "interval:dblclick",
    "on_pie_mousemove": "interval:mousemove",
    "on_pie_mouseenter": "interval:mouseenter",
    "on_pie_mouseleave": "interval:mouseleave",
    "on_pie_contextmenu": "interval:contextmenu",
}

_LEGEND_POSITIONS = {
    "top-left", "top-center", "top-right",
    "right-top", "right-center", "right-bottom",
    "bottom-left", "bottom-center", "bottom-right",
    "left-top", "left-center", "left-bottom",
}


def pie_default_options() -> Dict[str, Any]:
    return {
        "title": None,
        "width": 400,
        "height": 400,
        "padding": None,
        "responsive": False,
        "data": [],
        "angle_field": None,
        "color_field": None,
        "radius": 0.8,
        "label": {"visible": True, "type": "outer"},
        "legend": {"visible": True, "position": "right-center"},
        "tooltip": {"visible": True, "shared": False},
        "events": {},
    }


def pie_geometry_parser(dim: str, key: str) -> Optional[str]:
    if dim == "engine":
        return ENGINE_GEOM_MAP.get(key)
    return PLOT_GEOM_MAP.get(key)


def pie_geometry(layer: PlotLayer) -> None:
    props = layer.options
    geom: Dict[str, Any] = {
        "type": layer.geometry_type("engine", layer.type),
        "position": {"fields": ["1", props.get("angle_field")]},
        "adjust": [{"type": "stack"}],
    }
    if props.get("color_field"):
        geom["color"] = {"fields": [props["color_field"]]}

    label = props.get("label") or {}
    if label.get("visible"):
        geom["label"] = {
            "fields": [props.get("color_field") or props.get("angle_field")],
            "type": label.get("type", "outer"),
        }
    layer.set_config("geometry", geom)
    layer.set_config("data", list(props.get("data") or []))


def pie_coord(layer: PlotLayer) -> None:
    layer.set_config("coord", {"type": "theta", "radius": layer.options.get("radius")})


def pie_legend(layer: PlotLayer) -> None:
    legend = layer.options.get("legend") or {}
    if not legend.get("visible") or not layer.options.get("color_field"):
        layer.set_config("legend", False)
        return
    pos = str(legend.get("position") or "right-center").strip().lower()
    if pos not in _LEGEND_POSITIONS:
        pos = "right-center"
    layer.set_config("legend", {"position": pos, "field": layer.options["color_field"]})


def pie_tooltip(layer: PlotLayer) -> None:
    tooltip = layer.options.get("tooltip") or {}
    if not tooltip.get("visible", True):
        layer.set_config("tooltip", False)
        return
    layer.set_config("tooltip", {"shared": bool(tooltip.get("shared", False)), "showTitle": False})


PIE_HOOKS = PlotHooks(
    plot_type="pie",
    default_options=pie_default_options,
    geometry_parser=pie_geometry_parser,
    geometry=pie_geometry,
    coord=pie_coord,
    legend=pie_legend,
    tooltip=pie_tooltip,
    event_map=dict(PIE_EVENTS),
)


def build_pie_plot(options: Dict[str, Any], **kwargs: Any) -> PlotLayer:
    return PlotLayer(PIE_HOOKS, options, **kwargs)


registry.register("pie", build_pie_plot)
