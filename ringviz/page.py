from __future__ import annotations
import json
import re
from typing import Any, Dict, Optional

from dominate import document, tags
from dominate.util import raw

from ringviz.plots.pipeline import LayerState, PlotLayer

_STYLE = """
.ring-card { display:inline-block; font-family: sans-serif; margin: 12px; }
.ring-title { font-weight:600; margin-bottom: 8px; }
.ring-stage { position: relative; }
.ring-overlay { position:absolute; left:50%; top:50%; transform:translate(-50%,-50%); text-align:center; pointer-events:none; }
"""

_id_pat = re.compile(r"[^A-Za-z0-9_-]+")
def safe_id(s: str) -> str:
    return _id_pat.sub("_", s)

def chart_json(descriptors: Dict[str, Any]) -> str:
    """Descriptors as JSON safe to inline in a <script> element."""
    text = json.dumps(descriptors, ensure_ascii=False, default=str)
    return text.replace("</", "<\\/")

def render_page(layer: PlotLayer, *, title: Optional[str] = None) -> document:
    """
    Standalone page for one rendered plot:
      - the mounted html annotations (statistic overlay) centered on the stage
      - the engine descriptors as JSON in <script type="application/json">
    """
    if layer.state is LayerState.UNINITIALIZED:
        layer.render()

    title = title or layer.options.get("title") or f"{layer.type.title()} plot"
    # rendered before entering any dominate context so nothing is auto-attached
    overlays = [el.render() for el in layer.document.elements()]
    payload = chart_json(layer.descriptors())
    stage_id = safe_id(f"{layer.type}-{layer.parts.get('statistic_class') or 'plot'}")

    doc = document(title=title)
    with doc.head:
        tags.meta(charset="utf-8")
        tags.style(raw(_STYLE))

    with doc:
        with tags.div(cls="ring-card"):
            tags.div(title, cls="ring-title")
            with tags.div(cls="ring-stage", id=stage_id,
                          style=f"width:{layer.width}px; height:{layer.height}px"):
                tags.div(cls="ring-canvas")
                with tags.div(cls="ring-overlay"):
                    for fragment in overlays:
                        raw(fragment)
        tags.script(raw(payload), type="application/json", id=f"{stage_id}-config")
    return doc
