#!/usr/bin/env python3
"""
Plot the A/B extrusion channels of a converted dual-extruder file.

With equal filament the two traces overlay; with a diameter ratio the added
head's trace fans out from the first extrusion value in the file.
"""

import argparse
from pathlib import Path

import numpy as np
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

from dualizer.gcode import extract_channels

FIG_DIR = Path("results") / "figures"


def main():
    ap = argparse.ArgumentParser(description="Plot A/B extrusion channels of dualextrude output.")
    ap.add_argument("--out", dest="outfile", required=True, help="Converted G-code file")
    ap.add_argument("--name", default="channels", help="Figure base name")
    args = ap.parse_args()

    path = Path(args.outfile)
    if not path.exists():
        raise FileNotFoundError(f"G-code not found: {path}")
    lines = path.read_text(encoding="utf-8", errors="replace").splitlines()

    idx, a_vals, b_vals = extract_channels(lines)
    if not idx:
        raise SystemExit(f"No A/B moves in {path}")
    x = np.asarray(idx)
    a = np.asarray(a_vals)
    b = np.asarray(b_vals)
    diff = a - b

    FIG_DIR.mkdir(parents=True, exist_ok=True)
    fig, (ax1, ax2) = plt.subplots(2, 1, sharex=True, figsize=(8, 6))
    ax1.plot(x, a, label="A")
    ax1.plot(x, b, label="B", linestyle="--")
    ax1.set_ylabel("Extrusion (mm)")
    ax1.set_title("Split extrusion channels")
    ax1.legend()
    ax2.plot(x, diff, color="tab:red")
    ax2.axhline(0.0, linestyle=":", color="gray")
    ax2.set_xlabel("Output line")
    ax2.set_ylabel("A - B (mm)")
    plt.tight_layout()
    plt.savefig(FIG_DIR / f"{args.name}.pdf", bbox_inches="tight")
    plt.savefig(FIG_DIR / f"{args.name}.png", dpi=300, bbox_inches="tight")
    plt.close()

    print(f"Saved {FIG_DIR}/{args.name}.pdf and {FIG_DIR}/{args.name}.png")
    print(f"  moves={len(x)}, max |A-B|={np.max(np.abs(diff)):.5f}")


if __name__ == "__main__":
    main()
