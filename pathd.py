# pathd.py
# Append-only builder for the "d" attribute of an SVG <path>.

from typing import List, Tuple


def _num(v: float, precision: int) -> str:
    s = f"{float(v):.{precision}f}"
    if "." in s:
        s = s.rstrip("0").rstrip(".")
    return "0" if s in ("-0", "") else s


class PathD:
    """
    Collects move/line/arc commands in call order.
    There is no way to remove or edit a command once added; read the
    result with .d (or str()).
    """

    def __init__(self, precision: int = 3):
        self.precision = precision
        self._cmds: List[str] = []

    def _xy(self, x: float, y: float) -> str:
        return f"{_num(x, self.precision)},{_num(y, self.precision)}"

    def move_to(self, x: float, y: float) -> "PathD":
        self._cmds.append(f"M {self._xy(x, y)}")
        return self

    def line_to(self, x: float, y: float) -> "PathD":
        self._cmds.append(f"L {self._xy(x, y)}")
        return self

    def arc_to(
        self,
        x: float,
        y: float,
        radii: Tuple[float, float],
        x_axis_rotation: float,
        large_arc: bool,
        sweep: bool,
    ) -> "PathD":
        rx, ry = radii
        self._cmds.append(
            f"A {self._xy(rx, ry)},{_num(x_axis_rotation, self.precision)},"
            f"{1 if large_arc else 0},{1 if sweep else 0},{self._xy(x, y)}"
        )
        return self

    @property
    def d(self) -> str:
        return " ".join(self._cmds)

    def __str__(self) -> str:
        return self.d

    def __len__(self) -> int:
        return len(self._cmds)
