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

"""Bandwidth derivation and per-payload trial records.

A trial pairs a payload size with the timing statistics of transferring it;
its bandwidth is the payload divided by the mean trimmed duration.

Example:
    >>> from iobench.core.bandwidth import Bandwidth
    >>> Bandwidth(bytes=100, duration=1_000_000_000).bytes_per_second()
    100.0
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, Tuple, Union

from .errors import DegenerateDuration
from .statistics import TimingStats
from .timing import EventSamples, duration_from_dict, duration_to_dict, to_seconds

_BYTE_UNITS = ["B", "KiB", "MiB", "GiB", "TiB", "PiB"]


def format_bytes(n: Union[int, float]) -> str:
    """Convert a byte count into a human-readable string using binary units.

    Example:
        >>> format_bytes(1048576)
        '1.0 MiB'
    """
    value = float(n)
    i = 0
    while value >= 1024.0 and i < len(_BYTE_UNITS) - 1:
        value /= 1024.0
        i += 1
    if i == 0:
        return f"{int(value)} B"
    return f"{value:.1f} {_BYTE_UNITS[i]}"


@dataclass(frozen=True)
class Bandwidth:
    """A byte count moved over a duration.

    Attributes:
        bytes: Bytes transferred.
        duration: Transfer time in nanoseconds.
    """

    bytes: int
    duration: int

    def bytes_per_second(self) -> float:
        """Return the transfer rate.

        Raises:
            DegenerateDuration: If duration is not strictly positive.
        """
        if self.duration <= 0:
            raise DegenerateDuration(
                f"Bandwidth of {self.bytes} bytes is undefined over a "
                f"duration of {self.duration}ns"
            )
        return self.bytes / to_seconds(self.duration)

    def __str__(self) -> str:
        try:
            return f"{format_bytes(self.bytes_per_second())}/s"
        except DegenerateDuration:
            return "n/a"

    def to_dict(self) -> Dict[str, Any]:
        return {"bytes": self.bytes, "duration": duration_to_dict(self.duration)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Bandwidth:
        return cls(bytes=int(data["bytes"]), duration=duration_from_dict(data["duration"]))


@dataclass(frozen=True)
class BandwidthStats:
    """Timing statistics and bandwidth for one payload size.

    ``bandwidth.bytes`` always equals ``payload_size`` and
    ``bandwidth.duration`` equals ``timing_stats.mean``; use
    :meth:`from_timing_stats` or :meth:`from_samples` to keep them in step.
    """

    payload_size: int
    timing_stats: TimingStats
    bandwidth: Bandwidth

    @classmethod
    def from_timing_stats(
        cls, payload_size: int, timing_stats: TimingStats
    ) -> BandwidthStats:
        return cls(
            payload_size=payload_size,
            timing_stats=timing_stats,
            bandwidth=Bandwidth(bytes=payload_size, duration=timing_stats.mean),
        )

    @classmethod
    def from_samples(
        cls,
        payload_size: int,
        outliers: int,
        samples: Union[EventSamples, Iterable[int]],
    ) -> BandwidthStats:
        """Build a trial record from raw event durations.

        Args:
            payload_size: Bytes moved by each timed event.
            outliers: Number of outliers to drop before aggregating.
            samples: Raw durations in nanoseconds.
        """
        if not isinstance(samples, EventSamples):
            samples = EventSamples(list(samples))
        return cls.from_timing_stats(payload_size, samples.timing_stats(outliers))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "payload_size": self.payload_size,
            "timing_stats": self.timing_stats.to_dict(),
            "bandwidth": self.bandwidth.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> BandwidthStats:
        return cls(
            payload_size=int(data["payload_size"]),
            timing_stats=TimingStats.from_dict(data["timing_stats"]),
            bandwidth=Bandwidth.from_dict(data["bandwidth"]),
        )


# Names used by reports and callers that think in terms of trials.
TrialRecord = BandwidthStats


@dataclass(frozen=True)
class BandwidthTrials:
    """Ordered trial records, one per swept payload size."""

    trials: Tuple[BandwidthStats, ...] = ()

    def __len__(self) -> int:
        return len(self.trials)

    def __iter__(self) -> Iterator[BandwidthStats]:
        return iter(self.trials)

    @property
    def payload_sizes(self) -> Tuple[int, ...]:
        return tuple(t.payload_size for t in self.trials)

    def to_dict(self) -> Dict[str, Any]:
        return {"trials": [t.to_dict() for t in self.trials]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> BandwidthTrials:
        return cls(trials=tuple(BandwidthStats.from_dict(t) for t in data["trials"]))


TrialReport = BandwidthTrials
