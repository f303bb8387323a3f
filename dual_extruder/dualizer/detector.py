# dualizer/detector.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, Optional

from .errors import ConflictError, UsageError
from .gcode import Command, GLine, parse_int_prefix
from .session import ConversionConfig, Toolhead


@dataclass
class Detection:
    active: Toolhead
    lines_checked: int


class ExtruderUsageDetector:
    """
    First pass: work out which toolhead the source file was written for.

    Evidence is M101/M102 addressed to a designator, or M104 with a
    positive temperature and a designator. Seeing both heads is fatal.
    """

    def __init__(self, cfg: Optional[ConversionConfig] = None):
        self.cfg = cfg or ConversionConfig()
        self._claimed = Toolhead.UNKNOWN

    def _claim(self, head: Toolhead, line_no: int) -> None:
        if self._claimed is not Toolhead.UNKNOWN and self._claimed is not head:
            raise ConflictError(line_no)
        self._claimed = head

    def _head_for(self, token: str) -> Optional[Toolhead]:
        if token == self.cfg.right_designator:
            return Toolhead.RIGHT
        if token == self.cfg.left_designator:
            return Toolhead.LEFT
        return None

    def observe(self, g: GLine) -> None:
        cmd = g.command
        if cmd in (Command.EXTRUDER_FORWARD, Command.EXTRUDER_REVERSE):
            if g.args:
                head = self._head_for(g.args[0])
                if head is not None:
                    self._claim(head, g.number)
        elif cmd is Command.SET_TEMPERATURE:
            saw_right = saw_left = False
            temp = 0
            for tok in g.args:
                if tok == self.cfg.right_designator:
                    saw_right = True
                elif tok == self.cfg.left_designator:
                    saw_left = True
                elif tok.startswith(self.cfg.temp_marker):
                    value = parse_int_prefix(tok[len(self.cfg.temp_marker):])
                    if value is not None:
                        temp = value  # last one wins
            if temp > 0:
                if saw_right:
                    self._claim(Toolhead.RIGHT, g.number)
                if saw_left:
                    self._claim(Toolhead.LEFT, g.number)

    def detect(self, lines: Iterable[GLine]) -> Detection:
        count = 0
        for g in lines:
            count = g.number
            self.observe(g)
        if self._claimed is Toolhead.UNKNOWN:
            raise UsageError()
        return Detection(active=self._claimed, lines_checked=count)


def detect_active_toolhead(lines: Iterable[GLine], cfg: Optional[ConversionConfig] = None) -> Toolhead:
    return ExtruderUsageDetector(cfg).detect(lines).active
