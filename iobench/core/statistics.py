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

"""Outlier trimming and timing statistics.

Outliers are removed in a single pass: every sample is ranked by its
distance from the mean of the full sample set, and the ``k`` farthest are
dropped. Mean and standard deviation are then computed over what remains,
against the mean of the retained samples rather than the ranking mean.

Example:
    >>> from iobench.core.statistics import drop_outliers, timing_stats
    >>> drop_outliers([1.0, 2.0, 3.0, 4.0, 5.0], 2)
    [2.0, 3.0, 4.0]
    >>> stats = timing_stats([1_000_000_000 * i for i in range(1, 6)], 2)
    >>> stats.summary()
    '3.0s +/- 1.0s (n=3, dropped=2)'
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, TypeVar

import numpy as np

from .errors import InvalidTrimCount
from .timing import (
    duration_from_dict,
    duration_to_dict,
    format_duration,
    from_seconds,
    to_seconds,
)


Number = TypeVar("Number", int, float)


def _check_trim_count(n_samples: int, outliers: int) -> None:
    if outliers < 0:
        raise InvalidTrimCount(f"outliers must be non-negative, got {outliers}")
    if outliers > n_samples:
        raise InvalidTrimCount(
            f"Cannot drop {outliers} outliers from {n_samples} samples"
        )


def _kept_indices(data: Sequence[Number], outliers: int) -> List[int]:
    n = len(data)
    total = sum(data)
    # n * |x - mean| without the division, exact for integer samples.
    distance = [abs(n * x - total) for x in data]
    # sorted() stays stable with reverse=True: ties keep input order.
    ranked = sorted(range(n), key=distance.__getitem__, reverse=True)
    return sorted(ranked[outliers:])


def drop_outliers(data: Sequence[Number], outliers: int) -> List[Number]:
    """Drop the ``outliers`` samples farthest from the mean.

    Samples are ranked by absolute distance from the mean of ``data``,
    farthest first. Equal distances keep their input order, so the earlier
    sample is dropped first. The surviving samples are returned unchanged
    and in their original order. Integer samples are ranked exactly.

    Args:
        data: Sample values.
        outliers: Number of samples to drop.

    Returns:
        New list of ``len(data) - outliers`` samples.

    Raises:
        InvalidTrimCount: If outliers is negative or exceeds len(data).
    """
    _check_trim_count(len(data), outliers)
    if outliers == 0:
        return list(data)
    return [data[i] for i in _kept_indices(data, outliers)]


@dataclass(frozen=True)
class TimingStats:
    """Summary statistics of a trimmed set of event durations.

    Attributes:
        mean: Mean event duration, in nanoseconds.
        std_dev: Sample standard deviation (ddof=1), in nanoseconds.
        samples: Number of samples used in the statistics.
        outliers: Number of outliers dropped before computing them.
    """

    mean: int
    std_dev: int
    samples: int
    outliers: int

    @property
    def total_samples(self) -> int:
        return self.samples + self.outliers

    def summary(self) -> str:
        """Return a human-readable summary string."""
        return (
            f"{format_duration(self.mean)} +/- {format_duration(self.std_dev)} "
            f"(n={self.samples}, dropped={self.outliers})"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mean": duration_to_dict(self.mean),
            "std_dev": duration_to_dict(self.std_dev),
            "samples": self.samples,
            "outliers": self.outliers,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> TimingStats:
        return cls(
            mean=duration_from_dict(data["mean"]),
            std_dev=duration_from_dict(data["std_dev"]),
            samples=int(data["samples"]),
            outliers=int(data["outliers"]),
        )


def timing_stats(durations: Sequence[int], outliers: int) -> TimingStats:
    """Compute timing statistics over durations with outliers removed.

    Args:
        durations: Event durations in nanoseconds.
        outliers: Number of most mean-distant samples to drop.

    Returns:
        TimingStats over the retained samples.

    Raises:
        InvalidTrimCount: If outliers is negative or would leave no samples.
    """
    if outliers >= len(durations) and outliers >= 0:
        raise InvalidTrimCount(
            f"Cannot drop {outliers} outliers from {len(durations)} samples: "
            "at least one sample must remain"
        )

    kept = drop_outliers([int(d) for d in durations], outliers)
    retained = np.asarray([to_seconds(d) for d in kept], dtype=np.float64)

    mean = float(np.mean(retained))
    std = float(np.std(retained, ddof=1)) if len(retained) > 1 else 0.0

    return TimingStats(
        mean=from_seconds(mean),
        std_dev=from_seconds(std),
        samples=len(retained),
        outliers=outliers,
    )
