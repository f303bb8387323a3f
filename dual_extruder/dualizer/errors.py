# dualizer/errors.py
from __future__ import annotations
from typing import Optional


class DualExtrudeError(Exception):
    """Base exception for a conversion run.

    Every error is fatal to the run; `user_message` is what the CLI prints.
    """

    def __init__(self, message: str, user_message: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.user_message = user_message or message


class ValidationError(DualExtrudeError):
    """Raised when a filament diameter is unparsable or out of range."""

    def __init__(self, diameter: str, lo: float, hi: float):
        self.diameter = diameter
        super().__init__(
            f"diameter {diameter!r} outside [{lo}, {hi}]",
            f"Filament diameter: {diameter} too big/small!",
        )


class OpenError(DualExtrudeError):
    """Raised when the input can't be read or the output can't be created."""

    def __init__(self, path: str, for_output: bool = False, reason: str = ""):
        self.path = path
        self.for_output = for_output
        what = "create output file" if for_output else "open input file"
        msg = f"Can't {what}: {path}"
        super().__init__(f"{msg} ({reason})" if reason else msg, msg)


class ConflictError(DualExtrudeError):
    """Raised when both toolheads are observed active."""

    def __init__(self, line_no: int):
        self.line_no = line_no
        super().__init__(
            f"both extruders active (conflict at line {line_no})",
            "File already uses both extruders.",
        )


class UsageError(DualExtrudeError):
    """Raised when neither toolhead is observed active."""

    def __init__(self):
        super().__init__("no used extruder found", "Couldn't find a used extruder!")


class FormatError(DualExtrudeError):
    """Raised mid-transform for an overlong argument or a missing speed."""

    def __init__(self, what: str, line_no: int):
        self.what = what
        self.line_no = line_no
        super().__init__(f"{what} in line {line_no}")
