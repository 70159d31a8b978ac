"""
Center statistic overlay of the ring plot.

The overlay shows either the caller's `content` or the total of `angle_field`, and,
when `on_active` is set, follows the pointer: entering a slice shows that slice,
leaving it restores the total. Both repaints are debounced independently.

State handling is split in two:
  - pure transitions `hover_enter` / `hover_leave`: (state, input) -> (state, Repaint)
  - `apply_repaint`: the only place touching the document
"""
from __future__ import annotations
import math
import numbers
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Tuple, Union

from ringviz import logging as slog
from ringviz.dom import Document
from ringviz.timing import HOVER_DEBOUNCE_MS, AfterCancelFn, AfterFn, Debouncer
from ringviz.view import ChartEvent
from . import template

TOTAL_LABEL = "总计"

OVERLAY_POSITION = ["50%", "50%"]


# --------------------------- display payload ---------------------------

@dataclass(frozen=True)
class Scalar:
    value: Any


@dataclass(frozen=True)
class Pair:
    name: Any
    value: Any


@dataclass(frozen=True)
class Unsupported:
    raw: Any


DisplayPayload = Union[Scalar, Pair, Unsupported]


def classify_payload(raw: Any) -> DisplayPayload:
    """
    Scalars (str/number) -> Scalar; mappings with exactly two keys -> Pair read from
    'name'/'value'; anything else -> Unsupported (needs a caller html_content).
    """
    if isinstance(raw, (Scalar, Pair, Unsupported)):
        return raw
    if isinstance(raw, Mapping):
        if len(raw) == 2:
            return Pair(raw.get("name"), raw.get("value"))
        return Unsupported(dict(raw))
    if isinstance(raw, (str, numbers.Number)):
        return Scalar(raw)
    return Unsupported(raw)


def payload_to_raw(payload: DisplayPayload) -> Any:
    """Plain value handed to caller callbacks (html_content, custom on_active)."""
    if isinstance(payload, Scalar):
        return payload.value
    if isinstance(payload, Pair):
        return {"name": payload.name, "value": payload.value}
    return payload.raw


def compute_total(data: Sequence[Mapping[str, Any]], angle_field: str, color_field: Optional[str] = None) -> Dict[str, Any]:
    """
    Synthetic "total" record. Missing or non-numeric values make the total NaN
    instead of raising.
    """
    total: Any = 0
    for rec in data or []:
        v = rec.get(angle_field) if isinstance(rec, Mapping) else None
        if isinstance(v, bool) or not isinstance(v, numbers.Number):
            total = math.nan
            continue
        total = total + v
    out: Dict[str, Any] = {angle_field: total}
    if color_field:
        out[color_field] = TOTAL_LABEL
    return out


def derive_display_payload(record: Mapping[str, Any] | None, angle_field: str, color_field: Optional[str] = None) -> DisplayPayload:
    rec = record if isinstance(record, Mapping) else {}
    if color_field:
        return Pair(rec.get(color_field), rec.get(angle_field))
    return classify_payload(rec.get(angle_field))


def render_template(payload: DisplayPayload, class_id: str, size: float) -> Optional[str]:
    if isinstance(payload, Scalar):
        return template.single_data_template(payload.value, class_id, size)
    if isinstance(payload, Pair):
        return template.two_data_template(payload.name, payload.value, class_id, size)
    return None


# --------------------------- on_active ---------------------------

@dataclass(frozen=True)
class Disabled:
    pass


@dataclass(frozen=True)
class DefaultTemplate:
    pass


@dataclass(frozen=True)
class CustomRenderer:
    render: Callable[[Any], Any]


OnActive = Union[Disabled, DefaultTemplate, CustomRenderer]


def resolve_on_active(value: Any) -> OnActive:
    if isinstance(value, (Disabled, DefaultTemplate, CustomRenderer)):
        return value
    if callable(value):
        return CustomRenderer(value)
    if value:
        return DefaultTemplate()
    return Disabled()


# --------------------------- config & state ---------------------------

@dataclass(frozen=True)
class StatisticConfig:
    visible: bool = True
    on_active: Any = True
    content: Any = None
    html_content: Optional[Callable[[Any], Any]] = None

    @classmethod
    def from_options(cls, raw: Any) -> "StatisticConfig":
        if raw is None or raw is False:
            return cls(visible=False, on_active=False)
        if raw is True:
            return cls()
        raw = dict(raw)
        html_content = raw.get("html_content")
        return cls(
            visible=bool(raw.get("visible", True)),
            on_active=raw.get("on_active", True),
            content=raw.get("content"),
            html_content=html_content if callable(html_content) else None,
        )


@dataclass(frozen=True)
class OverlaySource:
    data: Tuple[Mapping[str, Any], ...]
    angle_field: str
    color_field: Optional[str]
    size: float


@dataclass(frozen=True)
class OverlayState:
    statistic_class: str
    on_active: OnActive
    payload: DisplayPayload
    html: Optional[str]


@dataclass(frozen=True)
class Repaint:
    statistic_class: str
    html: Optional[str]


def center_html(state: OverlayState, payload: DisplayPayload, size: float) -> Optional[str]:
    on_active = state.on_active
    if isinstance(on_active, CustomRenderer):
        return template.custom_container(on_active.render(payload_to_raw(payload)), state.statistic_class)
    return render_template(payload, state.statistic_class, size)


def hover_enter(state: OverlayState, record: Mapping[str, Any] | None, source: OverlaySource) -> Tuple[OverlayState, Repaint]:
    payload = derive_display_payload(record, source.angle_field, source.color_field)
    html = center_html(state, payload, source.size)
    return replace(state, payload=payload, html=html), Repaint(state.statistic_class, html)


def hover_leave(state: OverlayState, source: OverlaySource) -> Tuple[OverlayState, Repaint]:
    total = compute_total(source.data, source.angle_field, source.color_field)
    payload = derive_display_payload(total, source.angle_field, source.color_field)
    html = center_html(state, payload, source.size)
    return replace(state, payload=payload, html=html), Repaint(state.statistic_class, html)


def apply_repaint(repaint: Repaint, document: Document) -> bool:
    """Replace the overlay node content; a missing node is a silent no-op."""
    el = document.first_by_class(repaint.statistic_class)
    if el is None:
        slog.log_debug(f"no overlay node '.{repaint.statistic_class}'; repaint skipped", scope="statistic")
        return False
    if repaint.html is None:
        slog.log_debug(f"no template for payload on '.{repaint.statistic_class}'; overlay cleared", scope="statistic")
    el.inner_html = repaint.html or ""
    return True


# --------------------------- controller ---------------------------

class StatisticOverlayController:
    """Owns the overlay state of one ring plot and its debounced hover handlers."""

    def __init__(
        self,
        config: StatisticConfig,
        source: OverlaySource,
        *,
        statistic_class: str,
        document: Document,
        delay_ms: int = HOVER_DEBOUNCE_MS,
        after: Optional[AfterFn] = None,
        after_cancel: Optional[AfterCancelFn] = None,
    ):
        self.config = config
        self.source = source
        self.statistic_class = statistic_class
        self.document = document
        self.on_active = resolve_on_active(config.on_active)
        self.state: Optional[OverlayState] = None
        self.repaints = 0
        self._enter = Debouncer(self._apply_enter, delay_ms=delay_ms, after=after, after_cancel=after_cancel)
        self._leave = Debouncer(self._apply_leave, delay_ms=delay_ms, after=after, after_cancel=after_cancel)

    @property
    def reactive(self) -> bool:
        return self.config.visible and not isinstance(self.on_active, Disabled)

    def initial_payload(self) -> DisplayPayload:
        if self.config.content is not None:
            return classify_payload(self.config.content)
        total = compute_total(self.source.data, self.source.angle_field, self.source.color_field)
        return derive_display_payload(total, self.source.angle_field, self.source.color_field)

    def build_overlay_config(self, set_config: Optional[Callable[[str, Any], None]] = None) -> Dict[str, Any]:
        payload = self.initial_payload()
        if self.config.html_content is not None:
            html = self.config.html_content(payload_to_raw(payload))
            html = None if html is None else str(html)
        else:
            html = render_template(payload, self.statistic_class, self.source.size)
            if html is None:
                slog.log_warn(
                    f"content {payload_to_raw(payload)!r} has no built-in template; "
                    "provide statistic.html_content",
                    scope="statistic",
                )

        self.state = OverlayState(self.statistic_class, self.on_active, payload, html)
        descriptor: Dict[str, Any] = {
            "type": "html",
            "top": True,
            "position": list(OVERLAY_POSITION),
            "onActive": False,
            "html": html,
        }
        if self.reactive:
            descriptor["onActive"] = True
            # the reactive center label replaces the hover tooltip
            if set_config is not None:
                set_config("tooltip", False)
        return descriptor

    def on_hover_enter(self, event: ChartEvent) -> None:
        record = event.data if event is not None else None
        self._enter.trigger(record)

    def on_hover_leave(self, event: ChartEvent | None = None) -> None:
        self._leave.trigger()

    def _apply_enter(self, record: Mapping[str, Any] | None) -> None:
        if self.state is None:
            return
        self.state, effect = hover_enter(self.state, record, self.source)
        self.repaints += 1
        apply_repaint(effect, self.document)

    def _apply_leave(self) -> None:
        if self.state is None:
            return
        self.state, effect = hover_leave(self.state, self.source)
        self.repaints += 1
        apply_repaint(effect, self.document)

    def repaint(self, html: Optional[str]) -> bool:
        return apply_repaint(Repaint(self.statistic_class, html), self.document)

    @property
    def pending(self) -> bool:
        return self._enter.pending or self._leave.pending

    def cancel_pending(self) -> None:
        self._enter.cancel()
        self._leave.cancel()
