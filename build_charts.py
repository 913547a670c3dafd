# build_charts.py
# Produces ONE donut chart per group from a long-form sheet (group, label, value[, color]).
# Paths, columns, geometry and palette come from Configs/config.toml.
# Requires: pip install svgwrite pandas openpyxl

import logging
import os
import random
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

import tomllib  # stdlib (3.11+)
import pandas as pd

from colors import Color, ColorRangeError
from donut import ChartConfig, DataPoint, InvalidDataError, PieChartGenerator, save_svg, to_png

log = logging.getLogger(__name__)

# --- anchor everything to this file's folder ---
HERE = Path(__file__).parent

DEFAULT_PALETTE = [
    "#41b8d5",  # blue
    "#a9d6b9",  # green
    "#2d8bba",  # dark blue
    "#505870",  # navy
    "#7d87a4",  # dark grey
    "#c4dce8",  # grey
    "#2e8bc0",  # deep sky blue
]


def load_config(path=None) -> dict:
    cfg_path = Path(path) if path else HERE / "Configs" / "config.toml"
    if cfg_path.exists():
        with open(cfg_path, "rb") as f:
            return tomllib.load(f)
    return {}


# =======================
# Colors
# =======================
def stable_color_cycle(n: int, base: Iterable[str] = DEFAULT_PALETTE) -> List[Color]:
    """First n palette colors; past the end, slightly shifted copies of the palette."""
    base = [Color.parse(c) for c in base]
    if not base:
        return []
    if n <= len(base):
        return base[:n]
    out = list(base)

    def tweak(c: Color, k: int) -> Color:
        r, g, b = c.components[:3]
        r = max(0, min(255, int(r * (0.9 + 0.02 * k))))
        g = max(0, min(255, int(g * (0.9 + 0.02 * k))))
        b = max(0, min(255, int(b * (0.9 + 0.02 * k))))
        return Color(f"#{r:02x}{g:02x}{b:02x}")

    k = 1
    while len(out) < n:
        for c in base:
            out.append(tweak(c, k))
            if len(out) >= n:
                break
        k += 1
    return out


def label_color_map(labels: Iterable[str], base: Iterable[str] = DEFAULT_PALETTE) -> Dict[str, Color]:
    labels = list(dict.fromkeys(labels))
    colors = stable_color_cycle(len(labels), base)
    return {lab: col for lab, col in zip(labels, colors)}


def safe_slug(text: str) -> str:
    s = "".join(ch if ch.isalnum() else "_" for ch in str(text).strip())
    while "__" in s:
        s = s.replace("__", "_")
    return s.strip("_") or "chart"


# =======================
# Sheet -> data points
# =======================
def read_table(path, sheet=0) -> pd.DataFrame:
    path = Path(path)
    if path.suffix.lower() == ".csv":
        return pd.read_csv(path)
    return pd.read_excel(path, sheet_name=sheet)


def group_data_points(
    df: pd.DataFrame,
    group_col: str = "Group",
    label_col: str = "Label",
    value_col: str = "Value",
    color_col: str = "Color",
    palette: Optional[Iterable[str]] = DEFAULT_PALETTE,
) -> Dict[str, List[DataPoint]]:
    """
    Sum values per (group, label) and turn each group into DataPoints,
    largest first. Rows with a missing or non-positive value are dropped.
    A color cell wins over the palette; labels keep one palette color
    across all groups. An empty palette leaves colors unset (random fill).
    A group with an unreadable color cell is logged and left out.
    """
    cols = [group_col, label_col, value_col]
    has_color = color_col in df.columns
    df = df[cols + ([color_col] if has_color else [])].copy().dropna(subset=cols)
    df[value_col] = pd.to_numeric(df[value_col], errors="coerce").fillna(0)
    df[label_col] = df[label_col].astype(str)

    agg = {value_col: "sum"}
    if has_color:
        agg[color_col] = "first"
    grouped = df.groupby([group_col, label_col], sort=False).agg(agg).reset_index()
    grouped = grouped[grouped[value_col] > 0]

    global_colors = label_color_map(grouped[label_col].unique().tolist(), palette or [])

    out: Dict[str, List[DataPoint]] = {}
    for group, sub in grouped.groupby(group_col, sort=False):
        sub = sub.sort_values(value_col, ascending=False)
        points = []
        try:
            for _, row in sub.iterrows():
                color = global_colors.get(row[label_col])
                if has_color and pd.notna(row[color_col]):
                    color = Color.parse(str(row[color_col]))
                points.append(DataPoint(float(row[value_col]), color))
        except ColorRangeError as err:
            log.error("Skipping %s: %s", group, err)
            continue
        out[str(group)] = points
    return out


# =======================
# Sheet -> multiple charts
# =======================
def build_charts(
    data_path,
    out_dir,
    cfg: Optional[dict] = None,
    *,
    png: bool = False,
    rng: Optional[random.Random] = None,
) -> List[Tuple[str, Path]]:
    cfg = cfg if cfg is not None else load_config()
    columns = cfg.get("columns", {})
    chart_cfg = ChartConfig.from_dict(cfg.get("chart", {}))
    palette = cfg.get("palette", {}).get("colors", DEFAULT_PALETTE)
    rng = rng or random.Random()

    Path(out_dir).mkdir(parents=True, exist_ok=True)
    df = read_table(data_path, cfg.get("paths", {}).get("sheet", 0))
    groups = group_data_points(
        df,
        group_col=columns.get("group", "Group"),
        label_col=columns.get("label", "Label"),
        value_col=columns.get("value", "Value"),
        color_col=columns.get("color", "Color"),
        palette=palette,
    )

    emitted: List[Tuple[str, Path]] = []
    for group, points in groups.items():
        try:
            chart = PieChartGenerator(points, chart_cfg, rng).generate_graph()
        except InvalidDataError as err:
            log.error("Skipping %s: %s", group, err)
            continue
        svg_path = save_svg(chart, Path(out_dir) / f"{safe_slug(group)}.svg")
        if png:
            to_png(svg_path, svg_path.with_suffix(".png"))
        emitted.append((group, svg_path))
    return emitted


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    cfg = load_config()
    paths = cfg.get("paths", {})
    data_path = HERE / paths.get("data", "data.xlsx")
    out_dir = HERE / paths.get("out_dir", "charts")
    results = build_charts(data_path, out_dir, cfg, png=cfg.get("export", {}).get("png", False))
    print(f"Emitted {len(results)} charts to '{out_dir}'")
    for group, svg in results:
        print(f"- {group}: {os.path.basename(svg)}")


if __name__ == "__main__":
    main()
