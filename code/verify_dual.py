#!/usr/bin/env python3
"""
verify_dual.py

QA script for dualextrude output.

What it verifies:
1) Per-head commands come out in matched T1/T0 pairs
2) Every extruding G1 in the output carries both A and B, and no E
3) Lines with unknown verbs appear unchanged in the output, in order
4) With equal filament (no diameters), A and B agree on every G1
5) CSV run log sanity (columns, action counts)

This is a reproducibility and invariants check, not a print test.
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import List, Optional

import pandas as pd

from dualizer.detector import detect_active_toolhead
from dualizer.gcode import Command, LineSource, classify, extract_channels, tokenize
from dualizer.session import ConversionConfig


def read_lines(path: Path) -> List[str]:
    return path.read_text(encoding="utf-8", errors="replace").splitlines(keepends=True)


def print_result(name: str, ok: bool, detail: str = "") -> None:
    status = "PASS" if ok else "FAIL"
    if detail:
        print(f"[{status}] {name}: {detail}")
    else:
        print(f"[{status}] {name}")


def lines_for_head(lines: List[str], designator: str) -> int:
    return sum(1 for ln in lines if tokenize(ln)[-1:] == [designator])


def extruding_moves_missing_channels(lines: List[str]) -> List[int]:
    bad = []
    for i, ln in enumerate(lines, start=1):
        toks = tokenize(ln)
        if classify(toks[0] if toks else None) is not Command.COORDINATED_MOVE:
            continue
        heads = {t[0] for t in toks[1:] if t[0] in "EAB"}
        if heads and heads != {"A", "B"}:
            bad.append(i)
    return bad


def passthrough_lines(lines: List[str]) -> List[str]:
    return [ln for ln in lines if classify((tokenize(ln) or [None])[0]) is Command.UNCLASSIFIED]


def main(argv: Optional[List[str]] = None):
    ap = argparse.ArgumentParser(description="Verify dualextrude output.")
    ap.add_argument("--in", dest="infile", required=True, help="Input single-extruder G-code")
    ap.add_argument("--out", dest="outfile", required=True, help="Output dual-extruder G-code")
    ap.add_argument("--csv", dest="csvfile", required=False, help="CSV run log")
    ap.add_argument("--same-filament", action="store_true", help="Conversion ran without diameters")
    args = ap.parse_args(argv)

    in_path = Path(args.infile)
    out_path = Path(args.outfile)
    if not in_path.exists():
        raise SystemExit(f"Input not found: {in_path}")
    if not out_path.exists():
        raise SystemExit(f"Output not found: {out_path}")

    cfg = ConversionConfig()
    in_lines = read_lines(in_path)
    out_lines = read_lines(out_path)

    # 1) Both heads addressed equally
    active = detect_active_toolhead(LineSource(str(in_path)), cfg)
    print_result("Active head detected", True, active.value)
    n_left = lines_for_head(out_lines, cfg.left_designator)
    n_right = lines_for_head(out_lines, cfg.right_designator)
    print_result("Commands duplicated for both heads", n_left == n_right,
                 f"{cfg.left_designator}={n_left}, {cfg.right_designator}={n_right}")

    # 2) A/B on every extruding move
    missing = extruding_moves_missing_channels(out_lines)
    print_result("Extruding moves carry A and B", not missing,
                 f"bad lines: {missing[:5]}" if missing else "")

    # 3) Unknown verbs untouched
    ok = passthrough_lines(in_lines) == passthrough_lines(out_lines)
    print_result("Unclassified lines passed through", ok)

    # 4) Channels
    idx, a_vals, b_vals = extract_channels(out_lines)
    if args.same_filament and idx:
        worst = max(abs(a - b) for a, b in zip(a_vals, b_vals))
        print_result("A == B with equal filament", worst < 1e-5, f"max |A-B|={worst:.6f}")
    else:
        print_result("Channel pairs found", bool(idx), f"moves={len(idx)}")

    # 5) CSV run log (optional)
    if args.csvfile:
        csv_path = Path(args.csvfile)
        if not csv_path.exists():
            print_result("CSV log exists", False, f"missing: {csv_path}")
            return
        df = pd.read_csv(csv_path)
        required_cols = {"t_s", "type", "line", "action"}
        cols_ok = required_cols.issubset(set(df.columns))
        print_result("CSV has required columns", cols_ok, f"needed={sorted(required_cols)}")
        if cols_ok:
            rows = df[df["type"] == "LINE"]
            actions = rows["action"].astype(str).value_counts().to_dict()
            print_result("Rewritten lines (informational)", True,
                         ", ".join(f"{k}={v}" for k, v in sorted(actions.items())) or "none")


if __name__ == "__main__":
    main()
