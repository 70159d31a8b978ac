from __future__ import annotations
import json
import re
from pathlib import Path

from ringviz.page import chart_json, render_page
from ringviz.plots.ring.statistic import TOTAL_LABEL
from utility import examples_dir, make_ring, run_render_ring

_CONFIG_PAT = re.compile(r'<script[^>]*type="application/json"[^>]*>(.*?)</script>', re.S)


# Extracts the inlined chart JSON from a rendered page.
def _inline_config(html: str):
    m = _CONFIG_PAT.search(html)
    assert m, "chart config <script> not found"
    return json.loads(m.group(1))


# render_page renders an unrendered plot, embeds the overlay node and the engine descriptors.
def test_render_page_embeds_overlay_and_config():
    layer = make_ring({"title": "Sales"})
    html = str(render_page(layer))

    cls = layer.parts["statistic_class"]
    assert "<title>Sales</title>" in html
    assert f'class="annotation-html ring-guide-html {cls}"' in html
    assert TOTAL_LABEL in html

    cfg = _inline_config(html)
    assert cfg["type"] == "ring"
    assert cfg["coord"]["innerRadius"] == 0.64
    assert cfg["annotations"][0]["onActive"] is True


# chart_json escapes '</' so user data cannot close the script element.
def test_chart_json_escapes_script_end():
    text = chart_json({"data": [{"cat": "</script><b>", "v": 1}]})
    assert "</script>" not in text
    assert json.loads(text)["data"][0]["cat"] == "</script><b>"


# CLI: renders the bundled example into results/ (relative to cwd) and optionally dumps descriptors.
def test_cli_renders_example(tmp_path: Path):
    cfg = examples_dir() / "ring_data_file.yml"
    proc = run_render_ring(["-c", str(cfg), "-o", "browsers.html", "--dump-config"], cwd=tmp_path)
    assert proc.returncode == 0, proc.stdout + proc.stderr

    out = tmp_path / "results" / "browsers.html"
    assert out.is_file()
    html = out.read_text(encoding="utf-8")
    assert "Browser share" in html
    assert ">100<" in html  # 64 + 19 + 4 + 13

    dumped = json.loads((tmp_path / "results" / "browsers.json").read_text(encoding="utf-8"))
    assert dumped["legend"]["position"] == "bottom-center"  # responsive rule, width 320
    assert dumped["tooltip"] is False


# CLI: --data overrides the records of the config.
def test_cli_data_override(tmp_path: Path):
    data = tmp_path / "d.json"
    data.write_text(json.dumps({"data": [{"cat": "Z", "v": 7}]}), encoding="utf-8")
    proc = run_render_ring(["-c", str(examples_dir() / "ring_basic.yml"), "-d", str(data)], cwd=tmp_path)
    assert proc.returncode == 0, proc.stdout + proc.stderr
    html = (tmp_path / "results" / "ring.html").read_text(encoding="utf-8")
    assert ">7<" in html


# CLI: an invalid config exits with status 1.
def test_cli_invalid_config_fails(tmp_path: Path):
    bad = tmp_path / "bad.yml"
    bad.write_text('config_version: "0.1"\nplot:\n  radius: 3\n  angle_field: v\n', encoding="utf-8")
    proc = run_render_ring(["-c", str(bad)], cwd=tmp_path)
    assert proc.returncode == 1
    assert not (tmp_path / "results").exists()
