from typing import Any, Tuple
from dominate import tags
import math

# Center statistic templates (HTML strings). The outer div carries the scoped class
# so the overlay node stays addressable after every repaint.

_GUIDE_CLASS = "ring-guide-html"


def format_value(value: Any) -> str:
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if value.is_integer():
            return str(int(value))
    return str(value)


def font_sizes(size: float) -> Tuple[int, int]:
    """(value_px, name_px) for a statistic area of `size` px (width * radius)."""
    try:
        s = float(size)
    except (TypeError, ValueError):
        s = 0.0
    if math.isnan(s) or s < 0:
        s = 0.0
    value_px = max(12, int(s / 10))
    name_px = max(10, int(value_px * 0.5))
    return value_px, name_px


def single_data_template(value: Any, class_id: str, size: float) -> str:
    value_px, _ = font_sizes(size)
    box = tags.div(_class=f"{_GUIDE_CLASS} {class_id}")
    box.add(tags.span(format_value(value), _class="ring-guide-value",
                      style=f"font-size:{value_px}px; font-weight:600; line-height:1"))
    return box.render(pretty=False)


def two_data_template(name: Any, value: Any, class_id: str, size: float) -> str:
    value_px, name_px = font_sizes(size)
    box = tags.div(_class=f"{_GUIDE_CLASS} {class_id}")
    box.add(tags.span(format_value(name), _class="ring-guide-name",
                      style=f"font-size:{name_px}px; color:#8c8c8c"))
    box.add(tags.br())
    box.add(tags.span(format_value(value), _class="ring-guide-value",
                      style=f"font-size:{value_px}px; font-weight:600; line-height:1"))
    return box.render(pretty=False)


def custom_container(inner_html: Any, class_id: str) -> str:
    """Wrap caller-rendered html so the overlay keeps its scoped class."""
    text = "" if inner_html is None else str(inner_html)
    return f'<div class="{_GUIDE_CLASS} {class_id}">{text}</div>'
