from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from itertools import count
from typing import Any, Callable, Dict, List, Optional
from uuid import uuid4

from ringviz import logging as slog
from ringviz.configloader import deep_merge
from ringviz.dom import Document, Element
from ringviz.timing import AfterCancelFn, AfterFn
from ringviz.view import View

StageHook = Callable[["PlotLayer"], None]
IdFactory = Callable[[], str]


class LayerState(Enum):
    UNINITIALIZED = "uninitialized"
    CONFIGURING = "configuring"
    INTERACTIVE = "interactive"
    DESTROYED = "destroyed"


class SequentialIds:
    """Local, monotonically increasing id source. Share one instance between plots on a page."""

    def __init__(self, start: int = 1):
        self._counter = count(start)

    def __call__(self) -> str:
        return str(next(self._counter))


def random_id() -> str:
    return uuid4().hex[:12]


def _noop(_layer: "PlotLayer") -> None:
    return None


def merge_options(defaults: Dict[str, Any], props: Dict[str, Any]) -> Dict[str, Any]:
    return deep_merge(defaults, props)


@dataclass(frozen=True)
class PlotHooks:
    """
    Plot variant described as data: defaults plus one callable per lifecycle stage.
    Variants are composed with dataclasses.replace() instead of subclassing.
    """
    plot_type: str
    default_options: Callable[[], Dict[str, Any]]
    resolve_options: Callable[[Dict[str, Any], Dict[str, Any]], Dict[str, Any]] = merge_options
    geometry_parser: Callable[[str, str], Optional[str]] = lambda _dim, t: t
    before_init: StageHook = _noop
    geometry: StageHook = _noop
    coord: StageHook = _noop
    legend: StageHook = _noop
    tooltip: StageHook = _noop
    annotation: StageHook = _noop
    after_init: StageHook = _noop
    teardown: StageHook = _noop
    event_map: Dict[str, str] = field(default_factory=dict)


class PlotLayer:
    """
    Generic render pipeline for one plot instance:
      before_init -> geometry/coord/legend/tooltip/annotation -> paint -> after_init

    `parts` holds per-variant runtime objects (e.g. the statistic controller) so the
    hooks stay plain functions.
    """

    def __init__(
        self,
        hooks: PlotHooks,
        props: Dict[str, Any],
        *,
        document: Optional[Document] = None,
        id_factory: Optional[IdFactory] = None,
        after: Optional[AfterFn] = None,
        after_cancel: Optional[AfterCancelFn] = None,
    ):
        self.hooks = hooks
        self.type = hooks.plot_type
        self.props = dict(props or {})
        self.options: Dict[str, Any] = hooks.resolve_options(hooks.default_options(), self.props)
        self.document = document if document is not None else Document()
        self.id_factory: IdFactory = id_factory or random_id
        self.after = after
        self.after_cancel = after_cancel
        self.view = View()
        self.parts: Dict[str, Any] = {}
        self.state = LayerState.UNINITIALIZED
        self._mounted: List[Element] = []

    @property
    def width(self) -> int:
        return int(self.options.get("width") or 0)

    @property
    def height(self) -> int:
        return int(self.options.get("height") or 0)

    def set_config(self, key: str, value: Any) -> None:
        self.view.set_config(key, value)

    def get_config(self, key: str, default: Any = None) -> Any:
        return self.view.get_config(key, default)

    def geometry_type(self, dim: str, key: str) -> Optional[str]:
        return self.hooks.geometry_parser(dim, key)

    def render(self) -> Dict[str, Any]:
        """Run the lifecycle once and return the descriptors handed to the engine."""
        if self.state is not LayerState.UNINITIALIZED:
            raise RuntimeError(f"{self.type} plot cannot render from state '{self.state.value}'")

        self.state = LayerState.CONFIGURING
        slog.log_debug(f"configuring ({len(self.options.get('data') or [])} record(s))", scope=self.type)
        self.hooks.before_init(self)
        for stage in (self.hooks.geometry, self.hooks.coord, self.hooks.legend,
                      self.hooks.tooltip, self.hooks.annotation):
            stage(self)

        self._paint()
        self.hooks.after_init(self)
        self._attach_events()
        self.state = LayerState.INTERACTIVE
        return self.descriptors()

    def descriptors(self) -> Dict[str, Any]:
        return {"type": self.type, **dict(self.view.config)}

    def _paint(self) -> None:
        # Stand-in for the engine's html annotation pass.
        for ann in self.view.get_config("annotations") or []:
            if isinstance(ann, dict) and ann.get("type") == "html":
                self._mounted.append(self.document.mount_html(ann.get("html")))

    def _attach_events(self) -> None:
        handlers = self.options.get("events") or {}
        for name, handler in handlers.items():
            engine_event = self.hooks.event_map.get(name)
            if engine_event is None:
                slog.log_warn(f"unknown event '{name}'. Known: {sorted(self.hooks.event_map)}", scope=self.type)
                continue
            if not callable(handler):
                slog.log_warn(f"handler for '{name}' is not callable; skipped", scope=self.type)
                continue
            self.view.on(engine_event, handler)

    def destroy(self) -> None:
        if self.state is LayerState.DESTROYED:
            return
        self.hooks.teardown(self)
        self.view.off()
        for el in self._mounted:
            self.document.remove(el)
        self._mounted.clear()
        self.parts.clear()
        self.state = LayerState.DESTROYED
