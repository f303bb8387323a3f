# dualizer/session.py
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from .errors import ValidationError
from .gcode import parse_float_prefix


class Toolhead(Enum):
    LEFT = "left"
    RIGHT = "right"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ConversionConfig:
    # ---- Toolhead designators (T0 drives the right head, T1 the left) ----
    right_designator: str = "T0"
    left_designator: str = "T1"

    # ---- Argument markers ----
    temp_marker: str = "S"
    speed_marker: str = "R"
    extrusion_marker: str = "E"
    channel_a: str = "A"
    channel_b: str = "B"

    # Longest R/E/A/B argument token accepted, marker included
    max_arg_len: int = 15

    # ---- Filament diameters (mm) ----
    diameter_min: float = 1.5
    diameter_max: float = 2.2

    round_places: int = 5

    def designator(self, head: Toolhead) -> str:
        if head is Toolhead.RIGHT:
            return self.right_designator
        if head is Toolhead.LEFT:
            return self.left_designator
        raise ValueError(f"no designator for {head}")


def parse_diameter(text: str, cfg: ConversionConfig = ConversionConfig()) -> float:
    """Parse and range-check one diameter given as text (e.g. from argv)."""
    d = parse_float_prefix(text.strip())
    if d is None or not (cfg.diameter_min <= d <= cfg.diameter_max):
        raise ValidationError(text, cfg.diameter_min, cfg.diameter_max)
    return d


def diameter_ratio(diameters: Optional[Tuple[float, float]],
                   cfg: ConversionConfig = ConversionConfig()) -> float:
    """
    Cross-section area ratio of original to added filament:
        ratio = (D1/2)^2 / (D2/2)^2
    No diameters means both heads use the same stock: ratio 1.0.
    """
    if diameters is None:
        return 1.0
    d1, d2 = diameters
    for d in (d1, d2):
        if not (cfg.diameter_min <= d <= cfg.diameter_max):
            raise ValidationError(str(d), cfg.diameter_min, cfg.diameter_max)
    return ((d1 / 2) * (d1 / 2)) / ((d2 / 2) * (d2 / 2))


class ConversionSession:
    """
    State for one conversion run.

    `active` is set once by the detector, `baseline` once by the first
    extrusion-bearing G1, `ratio` at construction.
    """

    def __init__(self, ratio: float = 1.0, cfg: Optional[ConversionConfig] = None):
        if not ratio > 0:
            raise ValueError(f"ratio must be positive, got {ratio}")
        self.cfg = cfg or ConversionConfig()
        self.ratio = ratio
        self._active = Toolhead.UNKNOWN
        self._baseline: Optional[float] = None

    @property
    def active(self) -> Toolhead:
        return self._active

    @active.setter
    def active(self, head: Toolhead) -> None:
        if self._active is not Toolhead.UNKNOWN:
            raise RuntimeError("active toolhead already set for this session")
        if head is Toolhead.UNKNOWN:
            raise ValueError("active toolhead must be LEFT or RIGHT")
        self._active = head

    @property
    def inactive(self) -> Toolhead:
        if self._active is Toolhead.RIGHT:
            return Toolhead.LEFT
        if self._active is Toolhead.LEFT:
            return Toolhead.RIGHT
        raise RuntimeError("active toolhead not detected yet")

    @property
    def inactive_designator(self) -> str:
        return self.cfg.designator(self.inactive)

    @property
    def baseline(self) -> Optional[float]:
        return self._baseline

    @baseline.setter
    def baseline(self, value: float) -> None:
        if self._baseline is not None:
            raise RuntimeError("baseline extrusion already set for this session")
        self._baseline = value
