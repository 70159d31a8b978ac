import math

from ringviz.dom import Document
from ringviz.plots.ring.statistic import (
    TOTAL_LABEL,
    CustomRenderer,
    DefaultTemplate,
    Disabled,
    OverlaySource,
    OverlayState,
    Pair,
    Repaint,
    Scalar,
    Unsupported,
    apply_repaint,
    classify_payload,
    compute_total,
    derive_display_payload,
    hover_enter,
    hover_leave,
    render_template,
    resolve_on_active,
)
from ringviz.plots.ring.template import custom_container, font_sizes, format_value

DATA = [{"cat": "A", "v": 10}, {"cat": "B", "v": 30}]


# compute_total: sums angle_field across all records and labels the synthetic record as the total.
def test_compute_total_sums_angle_field():
    total = compute_total(DATA, "v", "cat")
    assert total == {"v": 40, "cat": TOTAL_LABEL}

    floats = [{"v": 0.5}, {"v": 1.25}, {"v": 2}]
    assert compute_total(floats, "v")["v"] == 3.75


# compute_total: empty data sums to 0; without color_field only the angle key is present.
def test_compute_total_empty_and_without_color_field():
    assert compute_total([], "v", "cat") == {"v": 0, "cat": TOTAL_LABEL}
    assert compute_total([], "v") == {"v": 0}


# compute_total: non-numeric or missing values degrade to NaN instead of raising.
def test_compute_total_non_numeric_propagates_nan():
    assert math.isnan(compute_total([{"v": 1}, {"v": "x"}, {"v": 2}], "v")["v"])
    assert math.isnan(compute_total([{"v": 1}, {"other": 2}], "v")["v"])
    assert math.isnan(compute_total([{"v": None}], "v", "cat")["v"])


# derive_display_payload: with color_field it yields a name/value pair taken from the record.
def test_derive_display_payload_pair():
    rec = {"cat": "B", "v": 30}
    p = derive_display_payload(rec, "v", "cat")
    assert p == Pair("B", 30)
    assert p.value == rec["v"] and p.name == rec["cat"]


# derive_display_payload: without color_field the bare value is returned as a scalar.
def test_derive_display_payload_scalar():
    assert derive_display_payload({"cat": "B", "v": 30}, "v") == Scalar(30)
    assert derive_display_payload({"cat": "B"}, "v") == Unsupported(None)


# classify_payload: strings/numbers are scalars, exactly-two-key mappings are pairs, anything else unsupported.
def test_classify_payload_shapes():
    assert classify_payload("总计") == Scalar("总计")
    assert classify_payload(12.5) == Scalar(12.5)
    assert classify_payload({"name": "A", "value": 10}) == Pair("A", 10)
    assert classify_payload({"a": 1, "b": 2, "c": 3}) == Unsupported({"a": 1, "b": 2, "c": 3})
    assert classify_payload({"only": 1}) == Unsupported({"only": 1})
    assert classify_payload([1, 2]) == Unsupported([1, 2])


# render_template: scalar -> single-value template, pair -> two-value template, other -> nothing.
def test_render_template_dispatch():
    single = render_template(Scalar("总计"), "statisticClassId1", 320)
    assert single is not None
    assert "总计" in single
    assert "ring-guide-value" in single and "ring-guide-name" not in single

    two = render_template(Pair("A", 10), "statisticClassId1", 320)
    assert two is not None
    assert ">A<" in two and ">10<" in two
    assert "ring-guide-name" in two

    assert render_template(classify_payload({"a": 1, "b": 2, "c": 3}), "statisticClassId1", 320) is None


# Templates carry the scoped class on their root element and escape user text.
def test_templates_are_scoped_and_escaped():
    html = render_template(Pair("<b>x</b>", 1), "statisticClassId7", 320)
    assert html.startswith('<div class="ring-guide-html statisticClassId7">')
    assert "<b>x</b>" not in html
    assert "&lt;b&gt;" in html


# format_value/font_sizes: integral floats print without decimals, NaN prints as NaN, sizes have floors.
def test_template_helpers():
    assert format_value(40.0) == "40"
    assert format_value(2.5) == "2.5"
    assert format_value(math.nan) == "NaN"
    assert font_sizes(320) == (32, 16)
    assert font_sizes(0) == (12, 10)
    assert font_sizes(None) == (12, 10)


# resolve_on_active: False/None disable, True selects the default template, callables become custom renderers.
def test_resolve_on_active_variants():
    assert resolve_on_active(False) == Disabled()
    assert resolve_on_active(None) == Disabled()
    assert resolve_on_active(True) == DefaultTemplate()

    def fn(payload):
        return "x"

    assert resolve_on_active(fn) == CustomRenderer(fn)


def _state(on_active=DefaultTemplate()):
    return OverlayState("statisticClassId1", on_active, Pair(TOTAL_LABEL, 40), None)


def _source():
    return OverlaySource(tuple(DATA), "v", "cat", 320.0)


# hover_enter/hover_leave: pure transitions produce the hovered slice, then the total again.
def test_hover_transitions_are_pure():
    start = _state()
    entered, effect = hover_enter(start, {"cat": "B", "v": 30}, _source())
    assert entered.payload == Pair("B", 30)
    assert effect.statistic_class == "statisticClassId1"
    assert ">B<" in effect.html and ">30<" in effect.html
    assert start.payload == Pair(TOTAL_LABEL, 40)  # input state untouched

    left, effect2 = hover_leave(entered, _source())
    assert left.payload == Pair(TOTAL_LABEL, 40)
    assert TOTAL_LABEL in effect2.html and ">40<" in effect2.html


# A custom on_active renderer gets the plain payload and its output is wrapped in the scoped container.
def test_custom_renderer_output_is_wrapped():
    seen = []

    def renderer(payload):
        seen.append(payload)
        return f"<em>{payload['name']}={payload['value']}</em>"

    _, effect = hover_enter(_state(CustomRenderer(renderer)), {"cat": "A", "v": 10}, _source())
    assert seen == [{"name": "A", "value": 10}]
    assert effect.html == custom_container("<em>A=10</em>", "statisticClassId1")
    assert effect.html.startswith('<div class="ring-guide-html statisticClassId1">')


# apply_repaint: content is replaced, not appended, so repeating a repaint is idempotent.
def test_apply_repaint_is_idempotent():
    doc = Document()
    el = doc.mount_html('<div class="ring-guide-html statisticClassId1">start</div>')
    rp = Repaint("statisticClassId1", "<span>B 30</span>")

    assert apply_repaint(rp, doc) is True
    first = el.inner_html
    assert apply_repaint(rp, doc) is True
    assert el.inner_html == first == "<span>B 30</span>"


# apply_repaint: a missing overlay node is a silent no-op.
def test_apply_repaint_missing_node_is_noop():
    doc = Document()
    other = doc.mount_html('<div class="ring-guide-html statisticClassId2">keep</div>')
    assert apply_repaint(Repaint("statisticClassId1", "<span>x</span>"), doc) is False
    assert other.inner_html.endswith("keep</div>")


# apply_repaint: an unsupported payload (no template) clears the overlay instead of failing.
def test_apply_repaint_without_template_clears_overlay():
    doc = Document()
    el = doc.mount_html('<div class="ring-guide-html statisticClassId1">start</div>')
    assert apply_repaint(Repaint("statisticClassId1", None), doc) is True
    assert el.inner_html == ""
