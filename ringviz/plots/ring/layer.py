from __future__ import annotations
from dataclasses import replace
from typing import Any, Dict, List, Optional

from ringviz import logging as slog
from ringviz.configloader import deep_merge
from ringviz.plots.pie import PIE_HOOKS, pie_default_options
from ringviz.plots.pipeline import PlotHooks, PlotLayer
from ringviz.responsive import ResponsiveEngine
from .events import HOVER_ENTER, HOVER_LEAVE, RING_EVENTS
from .responsive import RING_RESPONSIVE
from .statistic import OverlaySource, StatisticConfig, StatisticOverlayController

ENGINE_GEOM_MAP = {"ring": "interval"}
PLOT_GEOM_MAP = {"interval": "ring"}

# inner_radius = radius * ratio when only radius is given
INNER_RADIUS_RATIO = 0.8

STATISTIC_CLASS_PREFIX = "statisticClassId"


def ring_default_options() -> Dict[str, Any]:
    return deep_merge(pie_default_options(), {
        "radius": 0.8,
        "inner_radius": 0.64,
        "statistic": {
            "visible": True,
            "on_active": True,
        },
    })


def resolve_defaults(defaults: Dict[str, Any], props: Dict[str, Any]) -> Dict[str, Any]:
    options = deep_merge(defaults, props)
    if props.get("inner_radius") is None and (props.get("radius") is not None or options.get("inner_radius") is None):
        options["inner_radius"] = round(float(options.get("radius") or 0.0) * INNER_RADIUS_RATIO, 2)
    radius, inner = options.get("radius"), options.get("inner_radius")
    if not (0.0 <= float(inner or 0.0) < float(radius or 0.0)):
        raise ValueError(f"ring inner_radius must be in [0, radius={radius}), got {inner}")
    return options


def geometry_for(domain: str, key: str) -> Optional[str]:
    if domain == "engine":
        return ENGINE_GEOM_MAP.get(key)
    return PLOT_GEOM_MAP.get(key)


def build_coordinate(layer: PlotLayer) -> None:
    props = layer.options
    layer.set_config("coord", {
        "type": "theta",
        "radius": props.get("radius"),
        "innerRadius": props.get("inner_radius"),
    })


def statistic_size(layer: PlotLayer) -> float:
    return layer.width * float(layer.options.get("radius") or 0.0)


def build_annotations(layer: PlotLayer) -> None:
    annotations: List[Dict[str, Any]] = []
    config = StatisticConfig.from_options(layer.options.get("statistic"))
    if config.visible:
        props = layer.options
        source = OverlaySource(
            data=tuple(props.get("data") or ()),
            angle_field=props.get("angle_field"),
            color_field=props.get("color_field"),
            size=statistic_size(layer),
        )
        controller = StatisticOverlayController(
            config,
            source,
            statistic_class=layer.parts["statistic_class"],
            document=layer.document,
            after=layer.after,
            after_cancel=layer.after_cancel,
        )
        annotations.append(controller.build_overlay_config(layer.set_config))
        layer.parts["statistic"] = controller
    layer.set_config("annotations", annotations)


def apply_responsive(layer: PlotLayer, stage: str, engine: ResponsiveEngine = RING_RESPONSIVE) -> List[str]:
    return engine.apply(stage, layer)


def ring_before_init(layer: PlotLayer) -> None:
    layer.parts["statistic_class"] = f"{STATISTIC_CLASS_PREFIX}{layer.id_factory()}"
    props = layer.options
    if props.get("responsive") and props.get("padding") != "auto":
        applied = apply_responsive(layer, "preRender")
        slog.log_debug(f"preRender rules applied: {applied}", scope="ring")


def ring_after_init(layer: PlotLayer) -> None:
    controller: Optional[StatisticOverlayController] = layer.parts.get("statistic")
    if controller is None or not controller.reactive:
        return
    if layer.document.first_by_class(controller.statistic_class) is None:
        # html_content output (or an empty overlay) without the scoped class cannot be repainted
        slog.log_warn(
            f"overlay node has no class '{controller.statistic_class}'; hover updates disabled",
            scope="ring",
        )
        return
    layer.view.on(HOVER_ENTER, controller.on_hover_enter)
    layer.view.on(HOVER_LEAVE, controller.on_hover_leave)
    slog.log_debug(f"hover listeners attached for '.{controller.statistic_class}'", scope="ring")


def ring_teardown(layer: PlotLayer) -> None:
    controller: Optional[StatisticOverlayController] = layer.parts.get("statistic")
    if controller is not None:
        controller.cancel_pending()


RING_HOOKS: PlotHooks = replace(
    PIE_HOOKS,
    plot_type="ring",
    default_options=ring_default_options,
    resolve_options=resolve_defaults,
    geometry_parser=geometry_for,
    before_init=ring_before_init,
    coord=build_coordinate,
    annotation=build_annotations,
    after_init=ring_after_init,
    teardown=ring_teardown,
    event_map=dict(RING_EVENTS),
)


def build_ring_plot(options: Dict[str, Any], **kwargs: Any) -> PlotLayer:
    return PlotLayer(RING_HOOKS, options, **kwargs)
