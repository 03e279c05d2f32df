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

"""Core measurement engine for iobench.

- **timing**: timers and event sampling (WallClockTimer, CUDATimer, EventSamples)
- **statistics**: outlier trimming and timing statistics (drop_outliers, TimingStats)
- **bandwidth**: bandwidth and per-payload trial records (Bandwidth, BandwidthStats)
- **trials**: payload-size sweeps (run_trials)
- **report**: the two-direction report data model (BenchmarkReport)

Example:
    >>> from iobench.core import EventSamples
    >>> samples = EventSamples.time_events(12, my_transfer)
    >>> print(samples.timing_stats(outliers=2).summary())
    1.2ms +/- 0.1ms (n=10, dropped=2)
"""

from .bandwidth import (
    Bandwidth,
    BandwidthStats,
    BandwidthTrials,
    TrialRecord,
    TrialReport,
    format_bytes,
)
from .errors import (
    BenchmarkError,
    DegenerateDuration,
    InvalidPayloadSize,
    InvalidTrimCount,
)
from .report import BenchmarkReport
from .statistics import TimingStats, drop_outliers, timing_stats
from .timing import (
    BaseTimer,
    CUDATimer,
    EventSamples,
    WallClockTimer,
    format_duration,
    timed_trial,
)
from .trials import DEFAULT_ELEMENT_SIZE, run_trials, validate_payload_sizes

__all__ = [
    # Timing
    "BaseTimer",
    "WallClockTimer",
    "CUDATimer",
    "EventSamples",
    "timed_trial",
    "format_duration",
    # Statistics
    "TimingStats",
    "drop_outliers",
    "timing_stats",
    # Bandwidth
    "Bandwidth",
    "BandwidthStats",
    "BandwidthTrials",
    "TrialRecord",
    "TrialReport",
    "format_bytes",
    # Trials
    "DEFAULT_ELEMENT_SIZE",
    "run_trials",
    "validate_payload_sizes",
    # Reports
    "BenchmarkReport",
    # Errors
    "BenchmarkError",
    "InvalidTrimCount",
    "DegenerateDuration",
    "InvalidPayloadSize",
]
