#!/usr/bin/env python3
import sys
import argparse
import json
import os

from ringviz import logging as slog
from ringviz.configloader import PlotConfigLoader, load_records
from ringviz.page import render_page
from ringviz.plots.registry import create_plot
import ringviz.plots.pie
import ringviz.plots.ring

OUT_DIR = "results"


def _load_config(path: str, strict: bool):
    slog.log_step("Loading plot config:", path)
    options = PlotConfigLoader(path, strict=strict).load()
    slog.log_ok(f"Config loaded: type={options['type']}, {len(options.get('data') or [])} record(s).")
    return options


def _load_data(path: str):
    slog.log_step("Reading data JSON:", path)
    with open(path, "r", encoding="utf-8") as f:
        records = load_records(json.load(f), source=path)
    slog.log_ok(f"{len(records)} record(s) loaded.")
    return records


def main():
    p = argparse.ArgumentParser(
        description="Render a ring (donut) plot config into a standalone HTML page."
    )
    p.add_argument("-c", "--config", required=True, help="Path to the plot YAML")
    p.add_argument("-d", "--data", help="JSON records overriding plot.data / plot.data_file")
    p.add_argument("-o", "--output-file", default="ring.html", help="Name of output HTML (written under results/)")
    p.add_argument("-t", "--title", help="Page title (default: plot.title)")
    p.add_argument("--lenient", action="store_true",
                   help="Downgrade non-fatal config problems to warnings")
    p.add_argument("--dump-config", action="store_true",
                   help="Also write the engine descriptors as JSON next to the HTML")
    p.add_argument("-v", "--verbose", action="count", default=0,
                   help="Increase log verbosity (-v, -vv)")
    p.add_argument("--log-file", help="Also write logs to this file")

    args = p.parse_args()
    slog.setup_logging(args.verbose, args.log_file)

    options = _load_config(args.config, strict=not args.lenient)
    if args.data:
        options["data"] = _load_data(args.data)

    plot_type = options.pop("type")
    layer = create_plot(plot_type, options)
    descriptors = layer.render()
    slog.log_ok(f"Rendered {plot_type} plot ({len(descriptors.get('annotations') or [])} annotation(s)).")

    doc = render_page(layer, title=args.title)

    os.makedirs(OUT_DIR, exist_ok=True)
    out_path = os.path.join(OUT_DIR, os.path.basename(args.output_file))
    slog.log_step("Writing HTML:", out_path)
    with open(out_path, "w", encoding="utf-8") as f:
        f.write(str(doc))

    if args.dump_config:
        json_path = os.path.splitext(out_path)[0] + ".json"
        slog.log_step("Writing descriptors JSON:", json_path)
        with open(json_path, "w", encoding="utf-8") as f:
            json.dump(descriptors, f, indent=2, ensure_ascii=False, default=str)

    layer.destroy()
    slog.log_ok("Done.")


if __name__ == "__main__":
    try:
        main()
    except Exception as e:
        slog.log_err(f"Error: {e}")
        sys.exit(1)
