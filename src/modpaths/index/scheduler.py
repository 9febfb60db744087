"""Periodic background index refresh."""

from __future__ import annotations

import threading
from collections.abc import Callable

from modpaths.config import DEFAULT_REFRESH_INTERVAL_SECONDS


class RefreshScheduler:
    """Run ``refresh`` every ``interval_seconds`` on one daemon thread.

    ``trigger()`` wakes the thread early, which lets callers and tests force a
    run without waiting on the wall clock. A single worker thread never
    overlaps its own runs; the store's rebuild lock serializes it against
    rebuilds requested elsewhere. A failed run is kept in ``last_error`` and
    passed to ``on_error``; the loop keeps going until ``stop()`` even when
    ``on_error`` itself fails.
    """

    def __init__(
        self,
        refresh: Callable[[], object],
        interval_seconds: float = DEFAULT_REFRESH_INTERVAL_SECONDS,
        on_error: Callable[[Exception], None] | None = None,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive.")
        self._refresh = refresh
        self._interval_seconds = interval_seconds
        self._on_error = on_error
        self._stop = threading.Event()
        self._wake = threading.Event()
        self._thread: threading.Thread | None = None
        self._run_count = 0
        self._failure_count = 0
        self._last_error: Exception | None = None
        self._count_lock = threading.Lock()

    @property
    def interval_seconds(self) -> float:
        return self._interval_seconds

    @property
    def run_count(self) -> int:
        """Number of completed refresh attempts."""
        with self._count_lock:
            return self._run_count

    @property
    def failure_count(self) -> int:
        with self._count_lock:
            return self._failure_count

    @property
    def last_error(self) -> Exception | None:
        """Most recent failure from a refresh or from ``on_error``."""
        with self._count_lock:
            return self._last_error

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the worker thread; calling it twice is a no-op."""
        if self.is_running:
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run, name="modpaths-refresh", daemon=True
        )
        self._thread.start()

    def trigger(self) -> None:
        """Run a refresh as soon as the worker is free."""
        self._wake.set()

    def stop(self, timeout: float | None = 5.0) -> None:
        """Stop the worker, letting an in-flight refresh finish."""
        self._stop.set()
        self._wake.set()
        thread = self._thread
        if thread is not None:
            thread.join(timeout=timeout)
        self._thread = None

    def _run(self) -> None:
        while not self._stop.is_set():
            self._wake.wait(timeout=self._interval_seconds)
            self._wake.clear()
            if self._stop.is_set():
                break
            try:
                self._refresh()
            except Exception as error:
                self._record_failure(error)
            with self._count_lock:
                self._run_count += 1

    def _record_failure(self, error: Exception) -> None:
        with self._count_lock:
            self._failure_count += 1
            self._last_error = error
        if self._on_error is None:
            return
        try:
            self._on_error(error)
        except Exception as callback_error:
            with self._count_lock:
                self._last_error = callback_error
