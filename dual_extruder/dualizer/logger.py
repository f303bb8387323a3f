# dualizer/logger.py
from __future__ import annotations
import csv
import os
import time
from dataclasses import dataclass

COLUMNS = ["t_s", "type", "line", "action", "message"]


@dataclass
class LogConfig:
    out_dir: str
    csv_name: str
    log_notes: bool = True


class RunLogger:
    """CSV run log: progress notes plus one row per rewritten source line."""

    def __init__(self, cfg: LogConfig):
        os.makedirs(cfg.out_dir, exist_ok=True)
        self.path = os.path.join(cfg.out_dir, cfg.csv_name)
        self.cfg = cfg
        self._t0 = time.time()
        self._f = open(self.path, "w", newline="", encoding="utf-8")
        self._w = csv.writer(self._f)
        self._w.writerow(COLUMNS)
        self._f.flush()

    def _ts(self) -> str:
        return f"{time.time() - self._t0:.3f}"

    def log_line(self, line_no: int, action: str, text: str):
        self._w.writerow([self._ts(), "LINE", line_no, action, text])
        self._f.flush()

    def log_note(self, note: str):
        if not self.cfg.log_notes:
            return
        self._w.writerow([self._ts(), "NOTE", "", "", note])
        self._f.flush()

    def close(self):
        self._f.close()

    def __enter__(self) -> "RunLogger":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
