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

"""
Host/device transfer bandwidth benchmark CLI.

Usage:
    # Default sweep (16 B .. 128 MiB) on the best available device
    iobench

    # Small sweep on the CPU, JSON to stdout
    iobench --device cpu --min-pow 10 --max-pow 16 --output json

    # Settings from a file, results also saved to a directory
    iobench --config bench.yaml --save results/
"""

import argparse
import logging
import sys
from typing import List, Optional

from .backends import BACKENDS, create_backend, resolve_device
from .config import OUTPUT_MODES, TIMERS, BenchConfig
from .core import BenchmarkError, CUDATimer
from .report import ReportStore, format_report, run_report

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="iobench",
        description="Measure host-to-device and device-to-host transfer bandwidth.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--config", type=str, default=None, help="YAML file with default settings."
    )
    parser.add_argument(
        "--backend", choices=sorted(BACKENDS), default=None, help="Transfer backend."
    )
    parser.add_argument(
        "--device",
        type=str,
        default=None,
        help="Device to benchmark: auto, cpu, cuda or cuda:N (default: auto).",
    )
    parser.add_argument(
        "--min-pow",
        type=int,
        default=None,
        help="Smallest payload is 2**min_pow bytes (default: 4).",
    )
    parser.add_argument(
        "--max-pow",
        type=int,
        default=None,
        help="Largest payload is 2**max_pow bytes (default: 27).",
    )
    parser.add_argument(
        "--reps",
        type=int,
        default=None,
        help="Samples kept per payload size, excluding outliers (default: 20).",
    )
    parser.add_argument(
        "--outliers",
        type=int,
        default=None,
        help="Samples dropped per payload size (default: 2).",
    )
    parser.add_argument(
        "--output", choices=OUTPUT_MODES, default=None, help="Report format."
    )
    parser.add_argument(
        "--timer",
        choices=TIMERS,
        default=None,
        help="Clock used around each transfer: wall (default) or cuda events.",
    )
    parser.add_argument(
        "--save",
        dest="save_dir",
        type=str,
        default=None,
        help="Directory to also save the report to (JSON).",
    )
    parser.add_argument(
        "--seed", type=int, default=None, help="Seed for the random transfer buffers."
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log each trial as it completes."
    )
    return parser


def load_config(args: argparse.Namespace) -> BenchConfig:
    """Combine the config file (if any) with command-line overrides."""
    config = BenchConfig.from_yaml(args.config) if args.config else BenchConfig()
    overrides = {
        "backend": args.backend,
        "device": args.device,
        "min_pow": args.min_pow,
        "max_pow": args.max_pow,
        "reps": args.reps,
        "outliers": args.outliers,
        "output": args.output,
        "timer": args.timer,
        "save_dir": args.save_dir,
        "seed": args.seed,
    }
    config = config.merged(overrides)
    config.validate()
    return config


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(args)
        backend = create_backend(config.backend, config.device, seed=config.seed)
        timer = None
        if config.timer == "cuda":
            timer = CUDATimer(device_id=resolve_device(config.device).index or 0)
    except (FileNotFoundError, ValueError, RuntimeError) as exc:
        parser.error(str(exc))

    sizes = config.sizes()
    logger.info(
        "Sweeping %d payload sizes on %s (%d reps, %d outliers)",
        len(sizes),
        backend.device_name,
        config.reps,
        config.outliers,
    )

    try:
        report = run_report(backend, sizes, config.reps, config.outliers, timer=timer)
    except BenchmarkError as exc:
        logger.error("Benchmark failed: %s", exc)
        parser.error(str(exc))

    if config.output == "json":
        print(report.to_json())
    else:
        print(format_report(report))

    if config.save_dir:
        path = ReportStore(config.save_dir).save(report)
        print(f"Saved: {path}", file=sys.stderr)

    return 0


if __name__ == "__main__":
    sys.exit(main())
