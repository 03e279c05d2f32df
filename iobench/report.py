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
"""Running, rendering and storing benchmark reports.

Example:
    >>> from iobench.backends import TorchBackend
    >>> from iobench.report import ReportStore, format_report, run_report
    >>> report = run_report(TorchBackend("cpu"), sizes=[1024, 4096], reps=10, outliers=2)
    >>> print(format_report(report))
    >>> ReportStore("results/").save(report)
"""

from __future__ import annotations

import csv
import json
import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Any, List, Optional, Sequence

from .backends import TransferBackend
from .core.bandwidth import BandwidthTrials, format_bytes
from .core.errors import DegenerateDuration
from .core.report import BenchmarkReport
from .core.timing import BaseTimer, format_duration
from .core.trials import run_trials, validate_payload_sizes

logger = logging.getLogger(__name__)

_HEADER = (
    f" {'Payload':>10} | {'Bandwidth':>12} | {'Mean':>8} | {'Std Dev':>8} "
    f"| {'N':>3} | {'O':>3}"
)


def _format_trials(trials: BandwidthTrials) -> List[str]:
    lines = [_HEADER]
    for trial in trials:
        stats = trial.timing_stats
        lines.append(
            f" {format_bytes(trial.payload_size):>10} | {str(trial.bandwidth):>12} "
            f"| {format_duration(stats.mean):>8} | {format_duration(stats.std_dev):>8} "
            f"| {stats.samples:>3} | {stats.outliers:>3}"
        )
    return lines


def format_report(report: BenchmarkReport) -> str:
    """Render a report as fixed-width tables, one per direction."""
    lines = [
        "Backend:",
        f"  {report.backend}",
        "Device:",
        f"  {report.device}",
        "",
        "Host To Device Trials:",
        *_format_trials(report.host_to_device),
        "",
        "Device To Host Trials:",
        *_format_trials(report.device_to_host),
    ]
    return "\n".join(lines)


def run_report(
    backend: TransferBackend,
    sizes: Sequence[int],
    reps: int,
    outliers: int,
    element_size: Optional[int] = None,
    timer: Optional[BaseTimer] = None,
) -> BenchmarkReport:
    """Warm the backend, then sweep both transfer directions.

    Directions run one after the other, host-to-device first. Any failure
    aborts the whole report.

    Args:
        backend: Backend providing the transfer operations.
        sizes: Payload sizes in bytes, in sweep order.
        reps: Samples retained per size after trimming.
        outliers: Samples dropped per size.
        element_size: Buffer element width. Defaults to the backend's.
        timer: Timer used around each transfer.
    """
    if element_size is None:
        element_size = backend.element_size
    validate_payload_sizes(sizes, element_size)
    backend.warm()

    logger.info("Timing host-to-device transfers on %s", backend.device_name)
    host_to_device = run_trials(
        sizes, reps, outliers, backend.host_to_device, element_size, timer
    )
    logger.info("Timing device-to-host transfers on %s", backend.device_name)
    device_to_host = run_trials(
        sizes, reps, outliers, backend.device_to_host, element_size, timer
    )

    return BenchmarkReport(
        backend=backend.name,
        device=backend.device_name,
        host_to_device=host_to_device,
        device_to_host=device_to_host,
    )


_CSV_FIELDS = [
    "backend",
    "device",
    "direction",
    "payload_size",
    "bytes_per_second",
    "mean_ns",
    "std_dev_ns",
    "samples",
    "outliers",
]


class ReportStore:
    """Directory of saved benchmark reports, one JSON file per report.

    Example:
        >>> store = ReportStore("benchmark_results/")
        >>> store.save(report)
        >>> reports = store.load()
        >>> store.to_csv("results.csv")
    """

    def __init__(self, directory: str | Path):
        """Initialize the store, creating ``directory`` if needed."""
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def save(self, report: BenchmarkReport) -> Path:
        """Save a report and return the path written.

        Never overwrites: a name already taken gets a numeric suffix.
        """
        timestamp = datetime.now().strftime("%Y%m%dT%H%M%S%f")
        safe_backend = re.sub(r"[^A-Za-z0-9_.-]+", "-", report.backend)
        stem = f"{safe_backend}_{timestamp}"
        filepath = self.directory / f"{stem}.json"

        suffix = 0
        while True:
            try:
                with open(filepath, "x") as f:
                    f.write(report.to_json())
                break
            except FileExistsError:
                suffix += 1
                filepath = self.directory / f"{stem}_{suffix}.json"

        logger.info("Saved report to %s", filepath)
        return filepath

    def load(self, backend: Optional[str] = None) -> List[BenchmarkReport]:
        """Load saved reports, oldest first.

        Files that cannot be parsed are skipped with a warning.

        Args:
            backend: Only return reports for this backend identifier.
        """
        reports: List[BenchmarkReport] = []

        for filepath in sorted(self.directory.glob("*.json")):
            try:
                with open(filepath) as f:
                    report = BenchmarkReport.from_dict(json.load(f))
            # JSONDecodeError is a ValueError, as is int() on a bad field
            except (ValueError, KeyError, TypeError) as e:
                logger.warning("Could not load %s: %s", filepath, e)
                continue

            if backend and report.backend != backend:
                continue
            reports.append(report)

        return reports

    def to_csv(self, output_path: str | Path) -> Path:
        """Export every stored trial as one CSV row.

        Raises:
            ValueError: If the store is empty.
        """
        reports = self.load()
        if not reports:
            raise ValueError("No reports to export")

        output_path = Path(output_path)
        with open(output_path, "w", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=_CSV_FIELDS)
            writer.writeheader()
            for report in reports:
                directions = (
                    ("host_to_device", report.host_to_device),
                    ("device_to_host", report.device_to_host),
                )
                for direction, trials in directions:
                    for trial in trials:
                        try:
                            rate: Any = trial.bandwidth.bytes_per_second()
                        except DegenerateDuration:
                            rate = ""
                        writer.writerow(
                            {
                                "backend": report.backend,
                                "device": report.device,
                                "direction": direction,
                                "payload_size": trial.payload_size,
                                "bytes_per_second": rate,
                                "mean_ns": trial.timing_stats.mean,
                                "std_dev_ns": trial.timing_stats.std_dev,
                                "samples": trial.timing_stats.samples,
                                "outliers": trial.timing_stats.outliers,
                            }
                        )

        return output_path

    def clear(self) -> int:
        """Remove all stored reports and return how many were removed."""
        count = 0
        for filepath in self.directory.glob("*.json"):
            filepath.unlink()
            count += 1
        return count
