# Licensed to the Apache Software Foundation (ASF) under one or more
# contributor license agreements.  See the NOTICE file distributed with
# this work for additional information regarding copyright ownership.
# The ASF licenses this file to You under the Apache License, Version 2.0
# (the "License"); you may not use this file except in compliance with
# the License.  You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Timers and event sampling for benchmark measurements.

Durations are integer nanoseconds throughout this package. They come
straight from ``time.perf_counter_ns()`` (or CUDA events, rounded to the
nearest nanosecond) and are only converted to float seconds for arithmetic.

- WallClockTimer: monotonic wall-clock timing
- CUDATimer: GPU timing using CUDA events
- EventSamples: ordered list of event durations, filled by timing a callable

Example:
    >>> from iobench.core.timing import EventSamples
    >>> samples = EventSamples.time_events(10, lambda: sum(range(1000)))
    >>> len(samples)
    10
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterator, List, Optional

if TYPE_CHECKING:
    from .statistics import TimingStats

NANOS_PER_SECOND = 1_000_000_000

_DURATION_UNITS = (
    (NANOS_PER_SECOND, "s"),
    (1_000_000, "ms"),
    (1_000, "us"),
)


def to_seconds(nanos: int) -> float:
    """Convert a nanosecond duration to float seconds."""
    return nanos / NANOS_PER_SECOND


def from_seconds(seconds: float) -> int:
    """Convert float seconds to a nanosecond duration, rounding to nearest."""
    return int(round(seconds * NANOS_PER_SECOND))


def duration_to_dict(nanos: int) -> Dict[str, int]:
    """Serialize a duration as whole seconds plus sub-second nanoseconds."""
    secs, sub = divmod(int(nanos), NANOS_PER_SECOND)
    return {"secs": secs, "nanos": sub}


def duration_from_dict(data: Dict[str, int]) -> int:
    """Inverse of duration_to_dict."""
    return int(data["secs"]) * NANOS_PER_SECOND + int(data["nanos"])


def format_duration(nanos: int, precision: int = 1) -> str:
    """Format a duration with the largest unit that keeps it above 1.

    Example:
        >>> format_duration(1_500_000)
        '1.5ms'
    """
    for scale, unit in _DURATION_UNITS:
        if abs(nanos) >= scale:
            return f"{nanos / scale:.{precision}f}{unit}"
    return f"{nanos}ns"


class BaseTimer(ABC):
    """Abstract base timer for benchmark measurements.

    Timers can be used as context managers:

        with SomeTimer() as timer:
            do_work()
        print(timer.elapsed_ns)
    """

    @abstractmethod
    def reset(self) -> None:
        """Reset timer state to initial values."""

    @abstractmethod
    def start(self) -> None:
        """Start the timer."""

    @abstractmethod
    def stop(self) -> None:
        """Stop the timer and compute elapsed time."""

    @property
    @abstractmethod
    def elapsed_ns(self) -> int:
        """Return elapsed time in nanoseconds."""

    def __enter__(self) -> BaseTimer:
        self.reset()
        self.start()
        return self

    def __exit__(self, *args: Any) -> None:
        self.stop()


class WallClockTimer(BaseTimer):
    """Wall-clock timer using time.perf_counter_ns().

    Measures real elapsed time including any blocking in the timed call,
    which is what a synchronous host/device copy costs the caller.
    """

    def __init__(self) -> None:
        self._start: Optional[int] = None
        self._elapsed: int = 0

    def reset(self) -> None:
        self._start = None
        self._elapsed = 0

    def start(self) -> None:
        self._start = time.perf_counter_ns()

    def stop(self) -> None:
        """Stop timing.

        Raises:
            RuntimeError: If timer was not started.
        """
        end = time.perf_counter_ns()
        if self._start is None:
            raise RuntimeError("Timer not started")
        self._elapsed = end - self._start

    @property
    def elapsed_ns(self) -> int:
        return self._elapsed


class CUDATimer(BaseTimer):
    """GPU timer using CUDA events.

    Events are recorded on the device timeline, so the measured interval
    excludes host-side launch overhead. The device is synchronized before
    the start event and after the stop event.

    Note:
        Requires PyTorch with CUDA support.
    """

    def __init__(self, device_id: int = 0) -> None:
        """Initialize the CUDA timer.

        Args:
            device_id: CUDA device index to use for timing events.

        Raises:
            RuntimeError: If CUDA is not available.
        """
        self.device_id = device_id
        self._start_event: Any = None
        self._stop_event: Any = None
        self._elapsed: int = 0
        self._initialize_events()

    def _initialize_events(self) -> None:
        import torch

        if not torch.cuda.is_available():
            raise RuntimeError("CUDA not available")

        with torch.cuda.device(self.device_id):
            self._start_event = torch.cuda.Event(enable_timing=True)
            self._stop_event = torch.cuda.Event(enable_timing=True)

    def reset(self) -> None:
        self._elapsed = 0

    def start(self) -> None:
        import torch

        torch.cuda.synchronize(self.device_id)
        self._start_event.record(torch.cuda.current_stream(self.device_id))

    def stop(self) -> None:
        import torch

        self._stop_event.record(torch.cuda.current_stream(self.device_id))
        torch.cuda.synchronize(self.device_id)
        # elapsed_time() reports float milliseconds
        elapsed_ms = self._start_event.elapsed_time(self._stop_event)
        self._elapsed = int(round(elapsed_ms * 1_000_000))

    @property
    def elapsed_ns(self) -> int:
        return self._elapsed


def timed_trial(
    operation: Callable[[], Any],
    timer: Optional[BaseTimer] = None,
) -> Callable[[], int]:
    """Wrap a no-result operation into a trial function returning its duration.

    Args:
        operation: Zero-argument callable to time. Its result is discarded.
        timer: Timer to use for each call. Defaults to a WallClockTimer.

    Returns:
        Callable that runs ``operation`` once and returns elapsed nanoseconds.
    """
    if timer is None:
        timer = WallClockTimer()

    def trial() -> int:
        timer.reset()
        timer.start()
        operation()
        timer.stop()
        return timer.elapsed_ns

    return trial


@dataclass
class EventSamples:
    """Ordered list of event durations in nanoseconds.

    The list only ever grows by appending; filtering and statistics produce
    new values rather than reordering it.
    """

    durations: List[int] = field(default_factory=list)

    def push(self, duration: int) -> None:
        """Append one event duration."""
        self.durations.append(int(duration))

    def __len__(self) -> int:
        return len(self.durations)

    def __iter__(self) -> Iterator[int]:
        return iter(self.durations)

    @classmethod
    def time_events(
        cls,
        reps: int,
        operation: Callable[[], Any],
        timer: Optional[BaseTimer] = None,
    ) -> EventSamples:
        """Time ``operation`` ``reps`` times and collect the durations.

        Args:
            reps: Number of repetitions.
            operation: Zero-argument callable to time.
            timer: Timer used around each call. Defaults to WallClockTimer.

        Returns:
            EventSamples with ``reps`` durations in call order.
        """
        return cls.sample_events(reps, timed_trial(operation, timer))

    @classmethod
    def sample_events(cls, reps: int, trial: Callable[[], int]) -> EventSamples:
        """Collect durations reported by a self-timed trial function.

        Use this when each trial needs setup or teardown that must stay
        outside the timed interval: ``trial`` does its own timing and returns
        the elapsed nanoseconds.

        Args:
            reps: Number of repetitions.
            trial: Zero-argument callable returning one duration per call.

        Returns:
            EventSamples with ``reps`` durations in call order.

        Raises:
            ValueError: If reps is negative.
        """
        if reps < 0:
            raise ValueError(f"reps must be non-negative, got {reps}")

        samples = cls()
        for _ in range(reps):
            samples.push(trial())
        return samples

    def timing_stats(self, outliers: int) -> TimingStats:
        """Compute timing statistics, dropping ``outliers`` extreme samples."""
        from .statistics import timing_stats

        return timing_stats(self.durations, outliers)

    def to_dict(self) -> Dict[str, List[Dict[str, int]]]:
        return {"durations": [duration_to_dict(d) for d in self.durations]}
