# -----------------------------------------------------------------------------
#  controller.py
#  Background divisor enumeration with last-start-wins delivery
# -----------------------------------------------------------------------------

"""
CalculationController runs `all_factors` off the caller's thread.

Every `start(n)` mints a fresh generation token. Results and slow signals
are only delivered while their token is still the current one; the check
happens at delivery time, inside whatever context `dispatch` runs it in.
Work is never interrupted: a superseded computation runs to completion on
its worker and its result is discarded. Workers are daemon threads, so an
abandoned computation never keeps the process alive.

A `threading.Timer` raises `on_slow()` once the computation has taken longer
than `slow_threshold` seconds, so a spinner is only shown for slow inputs.
For one request the slow signal, if any, always arrives before the result.
"""

from __future__ import annotations

import sys
import threading
import traceback
import uuid
from collections.abc import Callable
from concurrent.futures import Executor, Future
from dataclasses import dataclass
from time import perf_counter
from typing import Any

from primefinder.fmt import format_duration
from primefinder.number_theory import all_factors
from primefinder.runtime import CFG
from primefinder.runtime import current as _rt_current

DEFAULT_SLOW_THRESHOLD_S = 1.0


@dataclass(frozen=True)
class CalculationRequest:
    token: uuid.UUID
    value: int


class DaemonThreadExecutor(Executor):
    """One daemon thread per task; shutdown never waits for running work."""

    def __init__(self, thread_name_prefix: str = "primefinder-calc"):
        self._prefix = thread_name_prefix
        self._count = 0
        self._lock = threading.Lock()
        self._shutdown = False

    def submit(self, fn, /, *args, **kwargs) -> Future:
        with self._lock:
            if self._shutdown:
                raise RuntimeError("cannot schedule new futures after shutdown")
            self._count += 1
            name = f"{self._prefix}_{self._count}"

        future: Future = Future()

        def _run() -> None:
            if not future.set_running_or_notify_cancel():
                return
            try:
                result = fn(*args, **kwargs)
            except BaseException as exc:
                future.set_exception(exc)
            else:
                future.set_result(result)

        threading.Thread(target=_run, name=name, daemon=True).start()
        return future

    def shutdown(self, wait: bool = True, *, cancel_futures: bool = False) -> None:
        with self._lock:
            self._shutdown = True


def _call_inline(fn: Callable[..., Any], *args: Any) -> None:
    fn(*args)


class CalculationController:
    """
    Usage:
        ctl = CalculationController(on_result=show, on_slow=spinner_on)
        ctl.start(600851475143)   # returns immediately
        ctl.cancel()              # drop whatever is in flight

    `dispatch(fn, *args)` decides where signals run (default: on the worker
    or timer thread). It may hand `fn` to another thread and wait for it;
    the controller holds no lock while dispatching.
    """

    def __init__(
        self,
        on_result: Callable[[list[int]], None],
        on_slow: Callable[[], None] | None = None,
        *,
        slow_threshold: float | None = None,
        executor: Executor | None = None,
        dispatch: Callable[..., None] | None = None,
        work: Callable[[int], list[int]] = all_factors,
        on_error: Callable[[BaseException], None] | None = None,
    ):
        if slow_threshold is None:
            slow_threshold = CFG("CONTROLLER.SLOW_THRESHOLD_S", DEFAULT_SLOW_THRESHOLD_S)
        self.slow_threshold = slow_threshold

        self._on_result = on_result
        self._on_slow = on_slow
        self._on_error = on_error
        self._dispatch = dispatch or _call_inline
        self._work = work

        self._owns_executor = executor is None
        self._executor = executor or DaemonThreadExecutor()

        # _lock guards state and is never held while calling out.
        # _signal_lock serializes deliveries so slow precedes result.
        self._lock = threading.Lock()
        self._signal_lock = threading.RLock()
        self._token = uuid.uuid4()
        self._current: CalculationRequest | None = None
        self._timer: threading.Timer | None = None
        self._slow = False
        self._result: list[int] | None = None
        self._debug = _rt_current().debug

    # ---- state -----------------------------------------------------------

    @property
    def slow_threshold(self) -> float:
        """Seconds before `on_slow` fires; applies to the next `start`."""
        return self._slow_threshold

    @slow_threshold.setter
    def slow_threshold(self, seconds: float) -> None:
        seconds = float(seconds)
        if seconds < 0:
            raise ValueError("slow_threshold must be >= 0")
        self._slow_threshold = seconds

    @property
    def current(self) -> CalculationRequest | None:
        """The request whose result is still wanted, if any."""
        with self._lock:
            return self._current

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self._current is not None

    @property
    def is_slow(self) -> bool:
        with self._lock:
            return self._slow

    @property
    def result(self) -> list[int] | None:
        """Divisors delivered for the latest request, None until delivered."""
        with self._lock:
            return None if self._result is None else list(self._result)

    # ---- operations ------------------------------------------------------

    def start(self, n: int) -> CalculationRequest:
        """Begin enumerating the divisors of n, superseding any running request."""
        req = CalculationRequest(token=uuid.uuid4(), value=n)
        self._debug = _rt_current().debug  # runtime is context-local; capture here

        timer = threading.Timer(self.slow_threshold, self._dispatch, args=(self._deliver_slow, req.token))
        timer.daemon = True
        with self._lock:
            self._supersede(req.token)
            self._current = req
            self._timer = timer

        self._trace(f"start n={n} token={req.token.hex[:8]}")
        self._executor.submit(self._run, req)
        timer.start()
        return req

    def cancel(self) -> None:
        """Invalidate the running request (if any); its result will be dropped."""
        with self._lock:
            stale = self._current
            self._supersede(uuid.uuid4())
        if stale is not None:
            self._trace(f"cancel token={stale.token.hex[:8]}")

    def close(self) -> None:
        self.cancel()
        if self._owns_executor:
            self._executor.shutdown(wait=False)

    def __enter__(self) -> CalculationController:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    # ---- internals -------------------------------------------------------

    def _supersede(self, token: uuid.UUID) -> None:
        # caller holds _lock
        self._token = token
        self._current = None
        self._result = None
        self._slow = False
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _retire(self, req: CalculationRequest, result: list[int] | None = None) -> bool:
        """Close out req with its result if still current; False if superseded."""
        with self._lock:
            if req.token != self._token or self._current is None:
                return False
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._current = None
            self._slow = False
            self._result = result
            return True

    def _run(self, req: CalculationRequest) -> None:
        # worker thread
        t0 = perf_counter()
        try:
            divisors = list(self._work(req.value))
        except Exception as exc:
            self._dispatch(self._deliver_error, req, exc)
            return
        self._trace(f"computed n={req.value} in {format_duration(perf_counter() - t0)}")
        self._dispatch(self._deliver_result, req, divisors)

    def _deliver_slow(self, token: uuid.UUID) -> None:
        with self._signal_lock:
            with self._lock:
                if token != self._token or self._current is None or self._slow:
                    return
                self._slow = True
            self._trace(f"slow token={token.hex[:8]} after {self.slow_threshold:g}s")
            if self._on_slow is not None:
                self._on_slow()

    def _deliver_result(self, req: CalculationRequest, divisors: list[int]) -> None:
        with self._signal_lock:
            if not self._retire(req, divisors):
                self._trace(f"discard token={req.token.hex[:8]} n={req.value}")
                return
            self._trace(f"done token={req.token.hex[:8]} n={req.value}: {len(divisors)} divisor(s)")
            self._on_result(list(divisors))

    def _deliver_error(self, req: CalculationRequest, exc: BaseException) -> None:
        with self._signal_lock:
            if not self._retire(req):
                self._trace(f"discard token={req.token.hex[:8]} n={req.value} ({exc!r})")
                return
            self._trace(f"error token={req.token.hex[:8]}: {exc!r}")
            if self._on_error is not None:
                self._on_error(exc)
                return
            sys.stderr.write("\n[UNCAUGHT CALCULATION EXCEPTION]\n")
            traceback.print_exception(type(exc), exc, exc.__traceback__, file=sys.stderr)
            sys.stderr.flush()

    def _trace(self, msg: str) -> None:
        if self._debug:
            print(f"[calc] {msg}", file=sys.stderr)
