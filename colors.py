# colors.py
# Color values used as sector fills.
# Every Color holds a canonical lowercase literal, "#rrggbb" or "#rrggbbaa".
# Build them with Color.hex / hexa / rgb / rgba / parse; the numeric domains
# deliberately exclude 0 (see DESIGN.md).

import math
import numbers
import random
import re
import warnings
from dataclasses import dataclass

MAX_HEX_VAL = 16_777_216          # 256 ** 3
MAX_HEXA_VAL = 4_294_967_296      # 256 ** 4

_LITERAL_RE = re.compile(r"^#(?:[0-9a-f]{6}|[0-9a-f]{8})$")

# =======================
# Errors
# =======================
class ColorRangeError(ValueError):
    """A numeric color encoding is outside its domain or not integral."""


class ColorTransparencyWarning(UserWarning):
    """A hex+alpha color was built with alpha 0 (fully transparent)."""


def _is_integral(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return False
    if isinstance(value, numbers.Integral):
        return True
    return math.isfinite(value) and int(value) == value


def _check_component(name: str, value) -> int:
    if not _is_integral(value) or not 0 < value <= 255:
        raise ColorRangeError(f"Color component {name}={value!r} must be an integer in 1..255")
    return int(value)


# =======================
# Color
# =======================
@dataclass(frozen=True)
class Color:
    literal: str

    def __post_init__(self):
        if not isinstance(self.literal, str) or not _LITERAL_RE.match(self.literal):
            raise ColorRangeError(f"Not a canonical color literal: {self.literal!r}")

    def __str__(self) -> str:
        return self.literal

    # ---- factories ----
    @classmethod
    def hex(cls, value) -> "Color":
        """0xffffff -> #ffffff. Valid for integers 0 < value < 16_777_216."""
        if not cls.is_valid_hex(value):
            raise ColorRangeError(f"Specified value {value!r} cannot be mapped to a hex color")
        value = int(value)
        comps = [(value & mask) >> shift for mask, shift in ((0xFF0000, 16), (0x00FF00, 8), (0x0000FF, 0))]
        return cls("#" + "".join(f"{c:02x}" for c in comps))

    @classmethod
    def hexa(cls, value) -> "Color":
        """0xrrggbbaa -> #rrggbbaa. Valid for integers 0 < value < 4_294_967_296.

        An alpha byte of 0 still yields a color, but issues a
        ColorTransparencyWarning.
        """
        if not cls.is_valid_hexa(value):
            raise ColorRangeError(f"Specified value {value!r} cannot be mapped to a hex+alpha color")
        value = int(value)
        rgb = value >> 8
        comps = [(rgb & mask) >> shift for mask, shift in ((0xFF0000, 16), (0x00FF00, 8), (0x0000FF, 0))]
        alpha = value & 0xFF
        literal = "#" + "".join(f"{c:02x}" for c in comps) + f"{alpha:02x}"
        if alpha == 0:
            warnings.warn(f"Color {literal} is fully transparent", ColorTransparencyWarning, stacklevel=2)
        return cls(literal)

    @classmethod
    def rgb(cls, r, g, b) -> "Color":
        r = _check_component("r", r)
        g = _check_component("g", g)
        b = _check_component("b", b)
        packed = r << 16 | g << 8 | b
        return cls(f"#{packed:06x}")

    @classmethod
    def rgba(cls, r, g, b, a) -> "Color":
        r = _check_component("r", r)
        g = _check_component("g", g)
        b = _check_component("b", b)
        a = _check_component("a", a)
        packed = r << 24 | g << 16 | b << 8 | a
        return cls(f"#{packed:08x}")

    @classmethod
    def parse(cls, text: str) -> "Color":
        """'#A9D6B9' / 'a9d6b9' / '#41b8d580' -> Color, through hex()/hexa()."""
        s = str(text).strip().lower()
        if s.startswith("#"):
            s = s[1:]
        if len(s) not in (6, 8) or any(ch not in "0123456789abcdef" for ch in s):
            raise ColorRangeError(f"Cannot parse color {text!r}")
        return cls.hex(int(s, 16)) if len(s) == 6 else cls.hexa(int(s, 16))

    @classmethod
    def random(cls, rng: random.Random | None = None) -> "Color":
        """Uniformly random opaque color; black is a possible result."""
        rng = rng or random
        return cls(f"#{rng.randrange(MAX_HEX_VAL - 1):06x}")

    # ---- checks ----
    @staticmethod
    def is_valid_hex(value) -> bool:
        return _is_integral(value) and 0 < value < MAX_HEX_VAL

    @staticmethod
    def is_valid_hexa(value) -> bool:
        return _is_integral(value) and 0 < value < MAX_HEXA_VAL

    # ---- accessors ----
    @property
    def has_alpha(self) -> bool:
        return len(self.literal) == 9

    @property
    def components(self) -> tuple[int, ...]:
        s = self.literal[1:]
        return tuple(int(s[i:i + 2], 16) for i in range(0, len(s), 2))
