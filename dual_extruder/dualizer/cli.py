#!/usr/bin/env python3
"""
Generate a "both extruders on" G-code file from a single-extruder file.

Usage:
    dualextrude infile [DiaIn] outfile [DiaNew] [--csv run_log.csv]

The on/off, temperature and speed commands sent to one extruder are
duplicated to both, and the E distance on G1 moves is split into A/B so the
two heads print side by side. Given both filament diameters, the added
head's extrusion is scaled by the ratio of the filament cross-sections.
"""

from __future__ import annotations

import argparse
import os
import sys
from typing import List, Optional

from .driver import convert_file
from .errors import DualExtrudeError
from .logger import LogConfig, RunLogger
from .session import ConversionConfig, parse_diameter

VERSION = "2.2"

USAGE = """Usage:  DualExtrude infile [DiaIn] outfile [DiaNew]

          infile - Input single extruder gcode file
          DiaIn - Diameter of filament used to generate the input file.
          outfile - Output both extruder gcode file
          DiaNew - Diameter of filament used on the second extruder.

    NOTE: If you are using different diameter filaments,
          BOTH DiaIn and DiaNew must be given!
"""


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="dualextrude", add_help=True,
                                 description="Convert single-extruder G-code to drive both extruders.")
    ap.add_argument("paths", nargs="*", help="infile [DiaIn] outfile [DiaNew]")
    ap.add_argument("--csv", dest="csvfile", default=None, help="Write a CSV run log here")
    ap.add_argument("--quiet", action="store_true", help="Only print errors")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    out = (lambda msg: None) if args.quiet else print

    out(f"DualExtrude version {VERSION}\n")

    paths = args.paths
    if len(paths) == 2:
        infile, outfile = paths
        diameter_args = None
    elif len(paths) == 4:
        infile, outfile = paths[0], paths[2]
        diameter_args = (paths[1], paths[3])
    else:
        print(USAGE)
        return 0

    cfg = ConversionConfig()
    logger: Optional[RunLogger] = None
    try:
        diameters = None
        if diameter_args is not None:
            diameters = (parse_diameter(diameter_args[0], cfg), parse_diameter(diameter_args[1], cfg))

        if args.csvfile:
            try:
                logger = RunLogger(LogConfig(out_dir=os.path.dirname(args.csvfile) or ".",
                                             csv_name=os.path.basename(args.csvfile)))
            except OSError as e:
                print(f"ERROR: Can't create run log: {args.csvfile} ({e.strerror or e})\n", file=sys.stderr)
                return 1
        convert_file(infile, outfile, diameters=diameters, cfg=cfg, logger=logger,
                     progress=out, diameter_labels=diameter_args)
    except DualExtrudeError as e:
        print(f"ERROR: {e.user_message}\n", file=sys.stderr)
        if logger is not None:
            logger.log_note(f"ERROR: {e.message}")
        return 1
    finally:
        if logger is not None:
            logger.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
