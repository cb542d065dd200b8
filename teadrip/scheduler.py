"""Timer driver for repeated disbursement runs.

The first run starts immediately; later runs start on ticks spaced
``interval_seconds`` apart, measured from the first start. What happens when
a run is still going at the next tick is decided by the overlap policy:

- ``skip``: wait for the run to finish, then drop every tick that passed.
- ``queue``: wait for the run to finish, then start one catch-up run at once
  if any tick passed (several missed ticks collapse into one run). Later
  runs go back to the original tick grid.
- ``allow``: start each run in its own thread on its tick regardless of
  runs still in flight. Two runs can then spend from the same wallet at
  the same time.
"""

from __future__ import annotations

import sys
import threading
import time
from enum import Enum
from typing import Callable, List, Optional


class OverlapPolicy(str, Enum):
    SKIP = "skip"
    QUEUE = "queue"
    ALLOW = "allow"


class RunScheduler:
    def __init__(
        self,
        job: Callable[[], object],
        interval_seconds: float,
        policy: OverlapPolicy = OverlapPolicy.SKIP,
        clock: Callable[[], float] = time.monotonic,
        wait: Optional[Callable[[float], bool]] = None,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.job = job
        self.interval = float(interval_seconds)
        self.policy = OverlapPolicy(policy)
        self._clock = clock
        self._stop = threading.Event()
        # wait(seconds) -> True when the scheduler was stopped meanwhile
        self._wait = wait or self._stop.wait
        self._lock = threading.Lock()
        self._active = 0
        self._threads: List[threading.Thread] = []

    @property
    def in_progress(self) -> int:
        with self._lock:
            return self._active

    def stop(self) -> None:
        self._stop.set()

    def _invoke(self) -> None:
        with self._lock:
            self._active += 1
        try:
            self.job()
        except Exception as exc:
            print(f"Run failed: {exc}", file=sys.stderr)
        finally:
            with self._lock:
                self._active -= 1

    def _launch(self) -> None:
        if self.in_progress:
            print("Previous run still in progress; starting an overlapping run")
        t = threading.Thread(target=self._invoke, daemon=True)
        self._threads = [th for th in self._threads if th.is_alive()]
        self._threads.append(t)
        t.start()

    def join(self, timeout: Optional[float] = None) -> None:
        """Wait for runs started under the ``allow`` policy."""
        for t in list(self._threads):
            t.join(timeout)

    def run_forever(self, max_runs: Optional[int] = None) -> int:
        started = 0
        next_tick = self._clock()
        # next_tick is always the next unconsumed point of the tick grid
        catch_up = False
        while not self._stop.is_set():
            if max_runs is not None and started >= max_runs:
                break
            if catch_up:
                catch_up = False
            else:
                delay = next_tick - self._clock()
                if delay > 0 and self._wait(delay):
                    break
                next_tick += self.interval
            if self._stop.is_set():
                break
            started += 1

            if self.policy is OverlapPolicy.ALLOW:
                self._launch()
                continue

            self._invoke()
            now = self._clock()
            if now < next_tick:
                continue
            missed = int((now - next_tick) // self.interval) + 1
            next_tick += missed * self.interval
            if self.policy is OverlapPolicy.SKIP:
                print(f"Run overran the interval; skipped {missed} tick(s)")
            else:
                catch_up = True
                print(f"Run overran the interval; starting queued run ({missed} tick(s) missed)")
        return started
