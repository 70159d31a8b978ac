from __future__ import annotations
import json
import os
from copy import deepcopy
from typing import Any, Dict, List, Optional
import yaml
from ringviz import logging as slog

_SUPPORTED_CONFIG_VERSIONS = {"0.1"}
_PLOT_KEYS = {
    "type", "title", "width", "height", "padding", "responsive",
    "data", "data_file", "angle_field", "color_field",
    "radius", "inner_radius", "statistic", "label", "legend", "tooltip",
}
_STATISTIC_KEYS = {"visible", "on_active", "content"}
_MAX_DATA_FILE_BYTES = 8 * 1024 * 1024
# Radius a plot type falls back to when the config leaves it out.
_DEFAULT_RADIUS = {"ring": 0.8, "pie": 0.8}


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Deep-merge dicts with 'explicit null clears default' semantics."""
    out = deepcopy(base) if base else {}
    for k, v in (override or {}).items():
        if v is None:
            out[k] = None
        elif isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = deep_merge(out[k], v)
        else:
            out[k] = v
    return out

class PlotConfigLoader:
    """
    Loads a YAML plot config:
      config_version: "0.1"
      defaults: { ...any plot key... }
      plot:
        type: ring
        width: 400            (px)
        height: 400           (px)
        padding: auto | number | [top, right, bottom, left]
        responsive: false
        data: [ {...}, ... ]  or  data_file: "relative/path.json"
        angle_field: value    (mandatory)
        color_field: type     (optional)
        radius: 0.8           (0, 1]
        inner_radius: 0.64    [0, radius)
        statistic: { visible, on_active, content } | null
        label/legend/tooltip: { visible, ... }

    Notes:
      - defaults are deep-merged under plot; explicit null clears a default.
      - data_file is resolved relative to the YAML file and may not leave its directory.
      - callables (statistic.html_content, custom on_active, events) cannot come
        from YAML; pass them through the Python API instead.
    """

    def __init__(self, yaml_path: str, *, strict: bool = True):
        self.yaml_path = yaml_path
        self.strict = strict

    def _warn_or_raise(self, msg: str, *, fatal: bool = False) -> None:
        if fatal or self.strict:
            slog.log_err(msg, scope="config")
            raise ValueError(msg)
        slog.log_warn(msg, scope="config")

    def _check_unknown_keys(self, cfg: Dict[str, Any], allowed: set, where: str) -> None:
        unknown = sorted(set(cfg) - allowed)
        if unknown:
            self._warn_or_raise(f"{where}: unknown key(s) {unknown}. Allowed: {sorted(allowed)}")

    def _number(self, value: Any, name: str) -> Optional[float]:
        if value is None:
            return None
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            try:
                return float(str(value).strip())
            except ValueError:
                self._warn_or_raise(f"plot.{name} must be a number, got {value!r}.", fatal=True)
        return float(value)

    def _normalize_radii(self, plot: Dict[str, Any]) -> None:
        radius = self._number(plot.get("radius"), "radius")
        inner = self._number(plot.get("inner_radius"), "inner_radius")

        if radius is not None and not (0.0 < radius <= 1.0):
            self._warn_or_raise(f"plot.radius must be in (0, 1], got {radius}.", fatal=True)
        if inner is not None:
            upper = radius if radius is not None else _DEFAULT_RADIUS.get(plot.get("type"), 1.0)
            if not (0.0 <= inner < upper):
                self._warn_or_raise(
                    f"plot.inner_radius must be in [0, radius={upper}), got {inner}.",
                    fatal=True,
                )

        if radius is not None:
            plot["radius"] = radius
        if inner is not None:
            plot["inner_radius"] = inner

    def _normalize_padding(self, padding: Any) -> Any:
        if padding is None:
            return None
        if isinstance(padding, str):
            p = padding.strip().lower()
            if p != "auto":
                self._warn_or_raise(f"plot.padding must be 'auto', a number or a list, got '{padding}'.", fatal=True)
            return p
        if isinstance(padding, (int, float)) and not isinstance(padding, bool):
            return [padding] * 4
        if isinstance(padding, list) and len(padding) in (2, 4) and all(isinstance(x, (int, float)) for x in padding):
            return list(padding) * (2 if len(padding) == 2 else 1)
        self._warn_or_raise("plot.padding list must hold 2 or 4 numbers.", fatal=True)
        return None

    def _normalize_statistic(self, stat: Any) -> Dict[str, Any] | None:
        if stat is None:
            return None
        if isinstance(stat, bool):
            return {"visible": stat}
        if not isinstance(stat, dict):
            self._warn_or_raise("plot.statistic must be a mapping, a bool or null.", fatal=True)
        self._check_unknown_keys(stat, _STATISTIC_KEYS, "plot.statistic")
        out = {k: v for k, v in stat.items() if k in _STATISTIC_KEYS}

        if "visible" in out:
            out["visible"] = bool(out["visible"])
        if "on_active" in out and not isinstance(out["on_active"], bool):
            self._warn_or_raise(
                "plot.statistic.on_active must be true/false in YAML (custom renderers are Python-only).",
                fatal=True,
            )

        content = out.get("content")
        if isinstance(content, dict) and len(content) != 2:
            self._warn_or_raise(
                "plot.statistic.content with keys other than {name, value} has no built-in template; "
                "the overlay will stay empty.",
                fatal=False,
            )
        return out

    def _read_data_file(self, rel_path: Any) -> List[Dict[str, Any]]:
        p = str(rel_path).strip()
        base_dir = os.path.dirname(os.path.abspath(self.yaml_path))
        abs_path = os.path.abspath(os.path.join(base_dir, p))

        # Prevent path traversal outside config directory
        if os.path.commonpath([base_dir, abs_path]) != base_dir:
            self._warn_or_raise("plot.data_file path must stay within the config directory.", fatal=True)

        if os.path.splitext(abs_path)[1].lower() != ".json":
            self._warn_or_raise("plot.data_file must point to a .json file.", fatal=True)

        if not os.path.isfile(abs_path):
            self._warn_or_raise(f"plot.data_file not found: {p}", fatal=True)

        if os.path.getsize(abs_path) > _MAX_DATA_FILE_BYTES:
            self._warn_or_raise(f"plot.data_file is too large (>8MB): {p}", fatal=True)

        with open(abs_path, "r", encoding="utf-8") as f:
            return load_records(json.load(f), source=p)

    def _normalize_data(self, plot: Dict[str, Any]) -> List[Dict[str, Any]]:
        data = plot.get("data")
        data_file = plot.get("data_file")
        if data is not None and data_file:
            self._warn_or_raise("plot.data and plot.data_file are mutually exclusive; using plot.data.")
        if data is None and data_file:
            return self._read_data_file(data_file)
        if data is None:
            return []
        if not isinstance(data, list) or not all(isinstance(r, dict) for r in data):
            self._warn_or_raise("plot.data must be a list of mappings.", fatal=True)
        return list(data)

    def normalize(self, plot: Dict[str, Any]) -> Dict[str, Any]:
        """Validate and normalize an already-merged plot mapping."""
        self._check_unknown_keys(plot, _PLOT_KEYS, "plot")
        out: Dict[str, Any] = {k: deepcopy(v) for k, v in plot.items() if k in _PLOT_KEYS}

        out["type"] = str(out.get("type") or "ring").strip().lower()

        angle_field = out.get("angle_field")
        if not angle_field or not isinstance(angle_field, str):
            self._warn_or_raise("plot.angle_field is mandatory.", fatal=True)

        color_field = out.get("color_field")
        if color_field is not None and not isinstance(color_field, str):
            self._warn_or_raise("plot.color_field must be a string if provided.", fatal=True)

        out["data"] = self._normalize_data(out)
        out.pop("data_file", None)

        missing = [i for i, r in enumerate(out["data"]) if angle_field not in r]
        if missing:
            self._warn_or_raise(
                f"plot.data: {len(missing)} record(s) lack angle_field '{angle_field}' (first at #{missing[0]}); "
                "the total will be NaN.",
                fatal=False,
            )

        for dim in ("width", "height"):
            if out.get(dim) is not None:
                v = self._number(out[dim], dim)
                if v is None or v <= 0:
                    self._warn_or_raise(f"plot.{dim} must be positive.", fatal=True)
                out[dim] = int(v)

        self._normalize_radii(out)
        if "padding" in out:
            out["padding"] = self._normalize_padding(out["padding"])
        if "responsive" in out:
            out["responsive"] = bool(out["responsive"])
        if "statistic" in out:
            out["statistic"] = self._normalize_statistic(out["statistic"])

        for comp in ("label", "legend", "tooltip"):
            v = out.get(comp)
            if isinstance(v, bool):
                out[comp] = {"visible": v}
            elif v is not None and not isinstance(v, dict):
                self._warn_or_raise(f"plot.{comp} must be a mapping or a bool.", fatal=True)

        return out

    def load(self) -> Dict[str, Any]:
        with open(self.yaml_path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}

        if not isinstance(raw, dict):
            self._warn_or_raise("Plot config root must be a mapping.", fatal=True)

        version = str(raw.get("config_version", "")).strip()
        if version not in _SUPPORTED_CONFIG_VERSIONS:
            self._warn_or_raise(
                f"Unsupported or missing config_version '{version}'. Supported: {sorted(_SUPPORTED_CONFIG_VERSIONS)}",
                fatal=True,
            )

        defaults = raw.get("defaults") or {}
        plot = raw.get("plot")
        if not isinstance(defaults, dict):
            self._warn_or_raise("defaults must be a mapping.", fatal=True)
        if not isinstance(plot, dict) or not plot:
            self._warn_or_raise("No plot defined.", fatal=True)

        return self.normalize(deep_merge(defaults, plot))


def load_records(raw: Any, *, source: str = "<data>") -> List[Dict[str, Any]]:
    """
    Accepts either a bare list of records or {"data": [...]} and returns the records.
    """
    if isinstance(raw, dict):
        raw = raw.get("data")
    if not isinstance(raw, list):
        raise TypeError(f"{source}: expected a list of records, got {type(raw).__name__}")
    for idx, entry in enumerate(raw):
        if not isinstance(entry, dict):
            raise TypeError(f"{source}: entry #{idx} is not an object")
    return raw
