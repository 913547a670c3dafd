# donut.py
# Pie / donut chart (SVG) from a list of weighted values.
# Values are normalised to percentages of a full turn (100 units == 360°),
# each sector is drawn as an annular wedge:
#   M(P1) L(P2) A(outer -> P4) L(P3) A(inner -> P1)
# and the wedges are written, in input order, into one svgwrite.Drawing.
# Requires: pip install svgwrite  (optional: cairosvg if rsvg-convert not available)

import logging
import math
import numbers
import random
import shutil
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

import svgwrite

from colors import Color, ColorRangeError
from pathd import PathD

log = logging.getLogger(__name__)

NAMESPACE_URL = "http://www.w3.org/2000/svg"
DEFAULT_SVG_PATH = "bin/graph.svg"

# hover: dim every sector except the one under the pointer
STYLE = (
    "path{transition:250ms;cursor:pointer;}"
    "svg:has(path:hover) path:not(path:hover){filter:brightness(0.5);}"
)

PI_R = math.pi / 50  # radians per percent unit


# =======================
# Errors
# =======================
class InvalidDataError(ValueError):
    """Chart data is missing, empty, or holds a non-positive / non-finite value."""


class InvalidConfigError(ValueError):
    """Chart geometry is unusable (negative radius, zero canvas, ...)."""


def _is_real(v) -> bool:
    return isinstance(v, numbers.Real) and not isinstance(v, bool)


# =======================
# Input model
# =======================
@dataclass(frozen=True)
class DataPoint:
    value: float
    color: Optional[Color] = None


@dataclass(frozen=True)
class ChartConfig:
    width: float
    height: float
    center_position: Tuple[float, float]
    inner_radius: float
    radial_width: float
    initial_rotation: Optional[float] = None  # fraction of a full turn

    def __post_init__(self):
        checks = [
            ("width", self.width, lambda v: v > 0),
            ("height", self.height, lambda v: v > 0),
            ("inner_radius", self.inner_radius, lambda v: v >= 0),
            ("radial_width", self.radial_width, lambda v: v > 0),
        ]
        center = self.center_position
        if not isinstance(center, Sequence) or isinstance(center, str) or len(center) != 2:
            raise InvalidConfigError(f"center_position must be (x, y), got {self.center_position!r}")
        checks += [("center_position", c, lambda v: True) for c in self.center_position]
        if self.initial_rotation is not None:
            checks.append(("initial_rotation", self.initial_rotation, lambda v: True))
        for name, value, ok in checks:
            if not _is_real(value) or not math.isfinite(value) or not ok(value):
                raise InvalidConfigError(f"Invalid {name}: {value!r}")

    @property
    def outer_radius(self) -> float:
        return self.inner_radius + self.radial_width

    @property
    def start_offset(self) -> float:
        """Initial rotation on the percent axis, in [0, 100)."""
        if self.initial_rotation is None:
            return 0.0
        return (self.initial_rotation * 100) % 100

    @classmethod
    def from_dict(cls, d: Mapping) -> "ChartConfig":
        """Build from a [chart] table; missing keys fall back to a 500x500 donut."""
        width = d.get("width", 500)
        height = d.get("height", 500)
        center = d.get("center", (width / 2, height / 2))
        return cls(
            width=width,
            height=height,
            center_position=tuple(center),
            inner_radius=d.get("inner_radius", 100),
            radial_width=d.get("radial_width", 100),
            initial_rotation=d.get("initial_rotation"),
        )


# =======================
# Output model
# =======================
@dataclass(frozen=True)
class NormalizedSector:
    percent: float
    color: Optional[Color]
    start_percent: float


@dataclass(frozen=True)
class Sector:
    path_data: str
    fill: str
    percent: float
    start_percent: float
    large_arc: bool


@dataclass
class PieChart:
    width: float
    height: float
    sectors: List[Sector] = field(default_factory=list)

    @property
    def pairs(self) -> List[Tuple[str, str]]:
        return [(s.path_data, s.fill) for s in self.sectors]


# =======================
# Validate + normalise
# =======================
def _coerce_point(i: int, item) -> DataPoint:
    if isinstance(item, DataPoint):
        return item
    if isinstance(item, Mapping):
        value, color = item.get("value"), item.get("color")
    elif isinstance(item, tuple):
        if len(item) != 2:
            raise InvalidDataError(f"Data point {i}: expected (value, color), got {item!r}")
        value, color = item
    else:
        value, color = item, None
    if isinstance(color, str):
        try:
            color = Color.parse(color)
        except ColorRangeError as err:
            raise InvalidDataError(f"Data point {i}: {err}") from err
    if color is not None and not isinstance(color, Color):
        raise InvalidDataError(f"Data point {i}: color must be a Color, got {color!r}")
    return DataPoint(value, color)


def validate_data(data) -> List[DataPoint]:
    """Coerce and check the input; raises InvalidDataError, never returns partial data."""
    if data is None:
        raise InvalidDataError("Nullish data provided")
    if not isinstance(data, Iterable) or isinstance(data, (str, bytes)):
        raise InvalidDataError(f"Data must be a sequence of data points, got {data!r}")
    points = [_coerce_point(i, item) for i, item in enumerate(data)]
    if not points:
        raise InvalidDataError("No data points provided")
    for i, p in enumerate(points):
        if not _is_real(p.value) or not math.isfinite(p.value) or p.value <= 0:
            raise InvalidDataError(f"Invalid value at index {i}: {p.value!r} (must be finite and > 0)")
    return points


def normalize(points: Iterable[DataPoint]) -> List[NormalizedSector]:
    """Turn values into percentages of their sum, with running start offsets."""
    points = list(points)
    total = sum(p.value for p in points)
    if total == 0 or not math.isfinite(total):
        raise InvalidDataError(f"Invalid values provided: the sum of values is {total}")

    out: List[NormalizedSector] = []
    sv = 0.0
    for p in points:
        pct = p.value / total * 100
        out.append(NormalizedSector(percent=pct, color=p.color, start_percent=sv))
        sv += pct
    return out


# =======================
# Geometry
# =======================
def _point(radius: float, percent: float, h: float, k: float) -> Tuple[float, float]:
    # -sin: SVG y grows downwards
    a = PI_R * percent
    return radius * math.cos(a) + h, -radius * math.sin(a) + k


def sector_path(
    sv: float,
    p: float,
    inner_radius: float,
    outer_radius: float,
    center: Tuple[float, float],
    precision: int = 3,
) -> str:
    """
    Path data for one annular wedge starting at sv and spanning p percent units.
    A full turn (p == 100) is split into two half arcs per ring: an arc whose
    end point equals its start point is not rendered.
    """
    r, rs = inner_radius, outer_radius
    h, k = center
    large = p > 50

    p1 = _point(r, sv, h, k)
    p2 = _point(rs, sv, h, k)
    p3 = _point(r, sv + p, h, k)
    p4 = _point(rs, sv + p, h, k)

    d = PathD(precision)
    d.move_to(*p1)
    d.line_to(*p2)
    if math.isclose(p, 100.0):
        mid_outer = _point(rs, sv + 50, h, k)
        mid_inner = _point(r, sv + 50, h, k)
        d.arc_to(*mid_outer, (rs, rs), 0, large, False)
        d.arc_to(*p4, (rs, rs), 0, large, False)
        d.line_to(*p3)
        d.arc_to(*mid_inner, (r, r), 0, large, True)
        d.arc_to(*p1, (r, r), 0, large, True)
    else:
        d.arc_to(*p4, (rs, rs), 0, large, False)
        d.line_to(*p3)
        d.arc_to(*p1, (r, r), 0, large, True)
    return d.d


# =======================
# Generators
# =======================
class GraphGenerator(ABC):
    """Base for chart generators: one call turns the inputs into a chart."""

    @abstractmethod
    def generate_graph(self):
        ...


class PieChartGenerator(GraphGenerator):
    """
    Draws pie charts (inner_radius == 0) and donut charts.

    Each instance owns its data, config and random source; build a new one
    per chart. Sectors without a color get a random fill from `rng`, pass a
    seeded random.Random for reproducible output.
    """

    def __init__(self, data, configuration: ChartConfig, rng: Optional[random.Random] = None):
        self.data = data
        self.configuration = configuration
        self.rng = rng or random.Random()

    def generate_graph(self) -> PieChart:
        points = validate_data(self.data)
        normalized = normalize(points)
        sectors = self.draw_sectors(normalized)
        conf = self.configuration
        log.info("Pie chart: %d sectors on %sx%s canvas", len(sectors), conf.width, conf.height)
        return PieChart(width=conf.width, height=conf.height, sectors=sectors)

    def draw_sectors(self, normalized: Iterable[NormalizedSector]) -> List[Sector]:
        conf = self.configuration
        offset = conf.start_offset
        sectors: List[Sector] = []
        for ns in normalized:
            sv = ns.start_percent + offset
            p = ns.percent
            d = sector_path(sv, p, conf.inner_radius, conf.outer_radius, conf.center_position)
            fill = (ns.color or Color.random(self.rng)).literal
            log.debug("sector start=%.4f percent=%.4f fill=%s", sv, p, fill)
            sectors.append(Sector(path_data=d, fill=fill, percent=p, start_percent=sv, large_arc=p > 50))
        return sectors


# =======================
# SVG document + IO
# =======================
def to_drawing(chart: PieChart, filename: str = "noname.svg") -> svgwrite.Drawing:
    # debug=False: svgwrite's validator rejects 8-digit (#rrggbbaa) fills
    dwg = svgwrite.Drawing(filename, size=(chart.width, chart.height), profile="full", debug=False)
    dwg.attribs["viewBox"] = f"0 0 {chart.width} {chart.height}"
    dwg.add(dwg.style(STYLE))
    for s in chart.sectors:
        dwg.add(dwg.path(d=s.path_data, fill=s.fill))
    return dwg


def save_svg(chart: PieChart, svg_path) -> Path:
    """Write the chart as UTF-8 SVG, creating the parent directory if needed."""
    svg_path = Path(svg_path)
    svg_path.parent.mkdir(parents=True, exist_ok=True)
    to_drawing(chart, str(svg_path)).save()
    log.info("Wrote %s", svg_path)
    return svg_path


def to_png(svg_path, png_path) -> bool:
    """Convert SVG -> PNG. Prefer rsvg-convert; fallback to cairosvg if installed."""
    rsvg = shutil.which("rsvg-convert")
    if rsvg:
        try:
            subprocess.check_call([rsvg, str(svg_path), "-a", "-f", "png", "-o", str(png_path)])
        except (subprocess.CalledProcessError, OSError) as exc:
            log.warning("PNG not created for %s: %s", svg_path, exc)
            return False
        return True
    try:
        import cairosvg  # type: ignore
        cairosvg.svg2png(url=str(svg_path), write_to=str(png_path))
        return True
    except Exception as exc:
        log.warning("PNG not created for %s: %s", svg_path, exc)
        return False


def generate_pie_chart(
    data,
    config: ChartConfig,
    svg_path=DEFAULT_SVG_PATH,
    rng: Optional[random.Random] = None,
) -> Optional[Path]:
    """
    Generate and save a chart in one call.
    Bad data or a failed write is logged and returns None; nothing is
    written when the data is rejected.
    """
    try:
        chart = PieChartGenerator(data, config, rng).generate_graph()
    except InvalidDataError as err:
        log.error("Pie chart not generated: %s", err)
        return None
    try:
        return save_svg(chart, svg_path)
    except OSError as err:
        log.error("Could not write %s: %s", svg_path, err)
        return None
