# src/primefinder/progress.py
from __future__ import annotations

import sys
import time


class Spinner:
    """One-line '[|] label (elapsed)' indicator, redrawn in place."""

    def __init__(self, *, enabled: bool = True, stream=None):
        self.enabled = enabled
        self.stream = stream or sys.stdout
        self.start = time.perf_counter()
        self.last_draw = 0.0
        self.spin = "|/-\\"
        self.i = 0
        self.drawn = False

    def update(self, label: str = "") -> None:
        THROTTLE = 0.1
        if not self.enabled:
            return
        now = time.perf_counter()
        if now - self.last_draw < THROTTLE:  # throttle to avoid flicker
            return
        self.last_draw = now
        self.i = (self.i + 1) % len(self.spin)
        elapsed = now - self.start
        msg = f"\r[{self.spin[self.i]}] {label[:50]}  {elapsed:5.1f}s  (Ctrl-C to cancel)"
        self.stream.write(msg)
        self.stream.flush()
        self.drawn = True

    def done(self) -> None:
        if not self.enabled or not self.drawn:
            return
        self.stream.write("\r" + " " * 80 + "\r")
        self.stream.flush()
        self.drawn = False
