"""
Best-effort progress display.

The writer offers one tick per finished file to a bounded queue with
``put_nowait``; a tick that does not fit is dropped, so writing is never
slowed down by rendering.  A single thread drains the queue into a tqdm
bar (files done, elapsed and remaining time) and shows the number of
rows written as a postfix.
"""

from __future__ import annotations

import queue
import threading
from typing import Optional

from tqdm import tqdm

_STOP = None


class ProgressReporter:
    def __init__(self, total_files: int, *, enabled: bool = True, desc: str = "Extracting") -> None:
        self.total_files = total_files
        self.enabled = enabled
        self.desc = desc
        self.dropped = 0
        self._queue: "queue.Queue[Optional[int]]" = queue.Queue(maxsize=max(1, total_files))
        self._thread: Optional[threading.Thread] = None

    def start(self) -> "ProgressReporter":
        self._thread = threading.Thread(target=self._render, name="tabflow-progress", daemon=True)
        self._thread.start()
        return self

    def tick(self, rows: int) -> None:
        """Record one finished file that produced ``rows`` written rows."""
        try:
            self._queue.put_nowait(rows)
        except queue.Full:
            self.dropped += 1

    def close(self) -> None:
        if self._thread is None:
            return
        self._queue.put(_STOP)
        self._thread.join()
        self._thread = None

    def _render(self) -> None:
        rows = 0
        with tqdm(total=self.total_files, desc=self.desc, unit="file", disable=not self.enabled) as pbar:
            while True:
                item = self._queue.get()
                if item is _STOP:
                    break
                rows += item
                pbar.set_postfix(rows=rows, refresh=False)
                pbar.update(1)

    def __enter__(self) -> "ProgressReporter":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
