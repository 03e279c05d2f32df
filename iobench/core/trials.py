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

"""Payload-size sweeps.

A sweep times one operation per payload size. The caller supplies a factory
that prepares the operation for a given size (allocating its buffer outside
the timed window) and the runner does the rest: sample, trim, aggregate,
derive bandwidth.

Example:
    >>> from iobench.core.trials import run_trials
    >>> def factory(size):
    ...     data = bytearray(size)
    ...     return lambda: bytes(data)
    >>> report = run_trials([64, 128], reps=5, outliers=1, operation_factory=factory)
    >>> report.payload_sizes
    (64, 128)
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional, Sequence

from .bandwidth import BandwidthStats, BandwidthTrials
from .errors import InvalidPayloadSize, InvalidTrimCount
from .timing import BaseTimer, EventSamples, format_duration

logger = logging.getLogger(__name__)

OperationFactory = Callable[[int], Callable[[], Any]]

# Width in bytes of the int32 elements transfer buffers are built from.
DEFAULT_ELEMENT_SIZE = 4


def validate_payload_sizes(sizes: Sequence[int], element_size: int) -> None:
    """Check that every size holds a whole, non-zero number of elements.

    Raises:
        InvalidPayloadSize: On the first size that does not.
    """
    if element_size < 1:
        raise ValueError(f"element_size must be positive, got {element_size}")
    for size in sizes:
        if size < element_size or size % element_size != 0:
            raise InvalidPayloadSize(
                f"Payload size {size} is not a positive multiple of the "
                f"{element_size}-byte element width"
            )


def run_trials(
    sizes: Sequence[int],
    reps: int,
    outliers: int,
    operation_factory: OperationFactory,
    element_size: int = DEFAULT_ELEMENT_SIZE,
    timer: Optional[BaseTimer] = None,
) -> BandwidthTrials:
    """Time an operation for each payload size and collect trial records.

    Each size is timed ``reps + outliers`` times; the ``outliers`` samples
    farthest from the mean are dropped, so every record aggregates exactly
    ``reps`` samples.

    Args:
        sizes: Payload sizes in bytes, in sweep order.
        reps: Samples retained per size after trimming.
        outliers: Samples dropped per size.
        operation_factory: Called with each size; returns the zero-argument
            operation to time.
        element_size: Width of one buffer element in bytes.
        timer: Timer used around each call. Defaults to WallClockTimer.

    Returns:
        BandwidthTrials in the order of ``sizes``.

    Raises:
        ValueError: If reps is less than 1.
        InvalidTrimCount: If outliers is negative.
        InvalidPayloadSize: If any size is invalid. Checked before any timing.
    """
    if reps < 1:
        raise ValueError(f"reps must be at least 1, got {reps}")
    if outliers < 0:
        raise InvalidTrimCount(f"outliers must be non-negative, got {outliers}")
    validate_payload_sizes(sizes, element_size)

    trials: List[BandwidthStats] = []
    for payload_size in sizes:
        operation = operation_factory(payload_size)
        samples = EventSamples.time_events(reps + outliers, operation, timer=timer)
        trial = BandwidthStats.from_samples(payload_size, outliers, samples)
        logger.debug(
            "payload=%d mean=%s std_dev=%s",
            payload_size,
            format_duration(trial.timing_stats.mean),
            format_duration(trial.timing_stats.std_dev),
        )
        trials.append(trial)

    return BandwidthTrials(trials=tuple(trials))
