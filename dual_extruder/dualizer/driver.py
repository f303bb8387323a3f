# dualizer/driver.py
from __future__ import annotations
from contextlib import closing
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from .detector import ExtruderUsageDetector
from .errors import OpenError
from .gcode import LineSource
from .logger import RunLogger
from .session import ConversionConfig, ConversionSession, Toolhead, diameter_ratio
from .transformer import LineTransformer


@dataclass
class ConversionResult:
    active: Toolhead
    ratio: float
    lines_checked: int
    lines_processed: int


def convert_file(infile: str, outfile: str,
                 diameters: Optional[Tuple[float, float]] = None,
                 cfg: Optional[ConversionConfig] = None,
                 logger: Optional[RunLogger] = None,
                 progress: Optional[Callable[[str], None]] = None,
                 diameter_labels: Optional[Tuple[str, str]] = None) -> ConversionResult:
    """
    Detect the active toolhead, then write the dual-extruder version of `infile`.

    Diameters are checked before anything is opened, and detection finishes
    before the output file is created. Errors propagate as DualExtrudeError.
    `diameter_labels` is how the diameters were typed, for the progress note.
    """
    cfg = cfg or ConversionConfig()

    def note(msg: str) -> None:
        if progress is not None:
            progress(msg)
        if logger is not None:
            logger.log_note(msg)

    session = ConversionSession(ratio=diameter_ratio(diameters, cfg), cfg=cfg)
    source = LineSource(infile)

    note("Checking file...")
    with closing(iter(source)) as lines:
        detection = ExtruderUsageDetector(cfg).detect(lines)
    session.active = detection.active
    note(f"{detection.lines_checked} Lines checked...")

    if session.active is Toolhead.LEFT:
        note("File uses left extruder, adding right...")
    else:
        note("File uses right extruder, adding left...")
    if diameters is not None:
        labels = diameter_labels or (str(diameters[0]), str(diameters[1]))
        note(f"Input file diameter: {labels[0]}   Added extruder diameter: {labels[1]}")

    transformer = LineTransformer(session, logger=logger)
    try:
        out = open(outfile, "w", encoding="utf-8", errors="surrogateescape", newline="")
    except OSError as e:
        raise OpenError(str(outfile), for_output=True, reason=e.strerror or str(e)) from e
    with out, closing(iter(source)) as lines:
        processed = transformer.run(lines, out.write)

    note(f"{processed} Lines processed")
    return ConversionResult(
        active=session.active,
        ratio=session.ratio,
        lines_checked=detection.lines_checked,
        lines_processed=processed,
    )
