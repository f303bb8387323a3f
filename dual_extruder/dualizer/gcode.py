# dualizer/gcode.py
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional, Tuple
import re

from .errors import OpenError

_INT_RE = re.compile(r"[-+]?\d+")
_FLOAT_RE = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")


class Command(Enum):
    EXTRUDER_FORWARD = "M101"
    EXTRUDER_REVERSE = "M102"
    EXTRUDER_OFF = "M103"
    SET_TEMPERATURE = "M104"
    SET_EXTRUDER_SPEED = "M108"
    TOOL_CHANGE = "M6"
    COORDINATED_MOVE = "G1"
    UNCLASSIFIED = ""


_CODES = {c.value: c for c in Command if c is not Command.UNCLASSIFIED}


def classify(verb: Optional[str]) -> Command:
    """Exact, case-sensitive lookup of a verb in the seven known codes."""
    if not verb:
        return Command.UNCLASSIFIED
    return _CODES.get(verb, Command.UNCLASSIFIED)


def tokenize(line: str) -> List[str]:
    return line.split()


def parse_int_prefix(text: str) -> Optional[int]:
    """Leading integer of `text` (like scanf %d); None if there isn't one."""
    m = _INT_RE.match(text)
    if not m:
        return None
    return int(m.group(0))


def parse_float_prefix(text: str) -> Optional[float]:
    """Leading real number of `text` (like scanf %lf); None if there isn't one."""
    m = _FLOAT_RE.match(text)
    if not m:
        return None
    return float(m.group(0))


@dataclass
class GLine:
    raw: str                                   # as read, line ending included
    number: int                                # 1-based
    tokens: List[str] = field(default_factory=list)

    @property
    def verb(self) -> Optional[str]:
        return self.tokens[0] if self.tokens else None

    @property
    def command(self) -> Command:
        return classify(self.verb)

    @property
    def args(self) -> List[str]:
        return self.tokens[1:]


def parse_line(raw: str, number: int) -> GLine:
    return GLine(raw=raw, number=number, tokens=tokenize(raw))


class LineSource:
    """
    Finite, restartable sequence of input lines, split on LF only.

    Every iteration reopens the file from the start, so the detector pass and
    the transform pass see the identical line sequence without holding the
    whole file in memory. Line endings are kept as read so that untouched
    lines can be written back byte-for-byte.
    """

    def __init__(self, path: str):
        self.path = path

    def __iter__(self) -> Iterator[GLine]:
        try:
            f = open(self.path, "rb")
        except OSError as e:
            raise OpenError(str(self.path), reason=e.strerror or str(e)) from e
        with f:
            for number, raw in enumerate(f, start=1):
                yield parse_line(raw.decode("utf-8", errors="surrogateescape"), number)


def extract_channels(lines: List[str]) -> Tuple[List[int], List[float], List[float]]:
    """
    Pull the A/B split-extrusion values out of converted G-code.
    Returns (line_indices, a_values, b_values) for G1 lines carrying both channels.
    """
    idx: List[int] = []
    a_vals: List[float] = []
    b_vals: List[float] = []
    for i, ln in enumerate(lines):
        toks = tokenize(ln)
        if classify(toks[0] if toks else None) is not Command.COORDINATED_MOVE:
            continue
        a = b = None
        for t in toks[1:]:
            if t.startswith("A"):
                a = parse_float_prefix(t[1:])
            elif t.startswith("B"):
                b = parse_float_prefix(t[1:])
        if a is None or b is None:
            continue
        idx.append(i)
        a_vals.append(a)
        b_vals.append(b)
    return idx, a_vals, b_vals
