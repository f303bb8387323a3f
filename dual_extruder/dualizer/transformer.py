# dualizer/transformer.py
from __future__ import annotations
import math
from typing import Callable, Iterable, List, Optional

from .errors import FormatError
from .gcode import Command, GLine, parse_float_prefix, parse_int_prefix
from .logger import RunLogger
from .session import ConversionSession, Toolhead

# Commands that only switch a head on/off or select it; duplicated verbatim
_SWITCH_COMMANDS = (
    Command.EXTRUDER_FORWARD,
    Command.EXTRUDER_REVERSE,
    Command.EXTRUDER_OFF,
    Command.TOOL_CHANGE,
)


def round_half_up(x: float, places: int = 5) -> float:
    scale = 10.0 ** places
    return math.floor(x * scale + 0.5) / scale


class LineTransformer:
    """
    Second pass: rewrites a single-extruder program so both heads run at once.

    Each source line becomes 0, 1 or 2 output lines:
      - on/off/tool-change and temperature/speed commands are duplicated for
        T1 then T0, or dropped when addressed to the head the file never used
      - G1 extrusion values (E, A or B) become an A/B pair; the added head's
        value is scaled by the filament area ratio relative to the first
        extrusion value seen in the file
      - everything else passes through untouched
    """

    def __init__(self, session: ConversionSession, logger: Optional[RunLogger] = None):
        if session.active is Toolhead.UNKNOWN:
            raise ValueError("session has no active toolhead; run the detector first")
        self.session = session
        self.cfg = session.cfg
        self.logger = logger
        self.lines_processed = 0

    # ---- per-command rules ----

    def _both(self, *fields: str) -> List[str]:
        body = " ".join(fields)
        return [
            f"{body} {self.cfg.left_designator}\n",
            f"{body} {self.cfg.right_designator}\n",
        ]

    def _switch(self, g: GLine) -> List[str]:
        if g.args and g.args[0] == self.session.inactive_designator:
            return []
        return self._both(g.verb)

    def _temperature(self, g: GLine) -> List[str]:
        marker = self.cfg.temp_marker
        temp = None
        for tok in g.args:
            if tok == self.session.inactive_designator:
                return []
            if temp is None and tok.startswith(marker):
                temp = parse_int_prefix(tok[len(marker):])
        return self._both(g.verb, f"{marker}{temp or 0}")

    def _speed(self, g: GLine) -> List[str]:
        if self.session.inactive_designator in g.args:
            return []
        speed = None
        for tok in g.args:
            if tok.startswith(self.cfg.speed_marker):
                if len(tok) > self.cfg.max_arg_len:
                    raise FormatError("Speed command too long", g.number)
                speed = tok
        if speed is None:
            raise FormatError("No speed in command", g.number)
        return self._both(g.verb, speed)

    def _move(self, g: GLine) -> List[str]:
        cfg = self.cfg
        a, b = cfg.channel_a, cfg.channel_b
        extrusion_markers = (cfg.extrusion_marker, a, b)
        parts = [g.verb]
        for tok in g.args:
            if not tok.startswith(extrusion_markers):
                parts.append(tok)
                continue
            if len(tok) > cfg.max_arg_len:
                raise FormatError("E Parameter too long", g.number)

            text = tok[1:]
            value = parse_float_prefix(text)
            if value is None:
                value = 0.0

            base = self.session.baseline
            if base is None:
                # First extrusion in the file: both heads start from the same place
                parts += [f"{a}{text}", f"{b}{text}"]
                self.session.baseline = value
                continue

            # Retracts below the baseline are allowed; the delta just goes negative
            new_e = round_half_up(((value - base) * self.session.ratio) + base, cfg.round_places)
            scaled = f"{new_e:.{cfg.round_places}f}"
            if self.session.active is Toolhead.RIGHT:
                parts += [f"{b}{scaled}", f"{a}{text}"]
            else:
                parts += [f"{a}{scaled}", f"{b}{text}"]
        return [" ".join(parts) + "\n"]

    # ---- driver-facing API ----

    def transform_line(self, g: GLine) -> List[str]:
        cmd = g.command
        if cmd in _SWITCH_COMMANDS:
            out = self._switch(g)
        elif cmd is Command.SET_TEMPERATURE:
            out = self._temperature(g)
        elif cmd is Command.SET_EXTRUDER_SPEED:
            out = self._speed(g)
        elif cmd is Command.COORDINATED_MOVE:
            out = self._move(g)
        else:
            return [g.raw]

        if self.logger is not None:
            action = "drop" if not out else ("split" if cmd is Command.COORDINATED_MOVE else "duplicate")
            self.logger.log_line(g.number, action, g.raw.rstrip("\r\n"))
        return out

    def run(self, lines: Iterable[GLine], write: Callable[[str], object]) -> int:
        """
        Transform and write line by line. A FormatError stops the run with
        everything before the bad line already written.
        """
        for g in lines:
            for out in self.transform_line(g):
                write(out)
            self.lines_processed = g.number
        return self.lines_processed
