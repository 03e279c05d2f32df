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
Configuration loading for benchmark runs.

Settings come from three layers, lowest precedence first: the dataclass
defaults, an optional YAML file, and command-line flags.

Example YAML:

    backend: torch
    device: cuda:0
    min_pow: 10
    max_pow: 24
    reps: 30
    outliers: 3
    output: json
    timer: cuda
"""

from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

OUTPUT_MODES = ("text", "json")
TIMERS = ("wall", "cuda")


@dataclass
class BenchConfig:
    """Settings for one benchmark run.

    Payload sizes are the powers of two ``2**min_pow`` through
    ``2**max_pow`` bytes, inclusive.
    """

    backend: str = "torch"
    device: str = "auto"
    min_pow: int = 4
    max_pow: int = 27
    reps: int = 20
    outliers: int = 2
    output: str = "text"
    timer: str = "wall"
    save_dir: Optional[str] = None
    seed: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BenchConfig":
        """Build a config from a mapping, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(unknown)}")
        return cls(**data)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "BenchConfig":
        """
        Load configuration from a YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            BenchConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config file is empty, not a mapping, or has unknown keys
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with path.open("r") as f:
            data = yaml.safe_load(f)

        if data is None:
            raise ValueError(f"Empty config file: {path}")
        if not isinstance(data, dict):
            raise ValueError(f"Config file must contain a mapping: {path}")

        return cls.from_dict(data)

    def merged(self, overrides: Dict[str, Any]) -> "BenchConfig":
        """Return a copy with every non-None value in ``overrides`` applied."""
        data = self.to_dict()
        data.update({k: v for k, v in overrides.items() if v is not None})
        return self.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def sizes(self) -> List[int]:
        """Payload sizes in bytes, smallest first."""
        return [2**k for k in range(self.min_pow, self.max_pow + 1)]

    def validate(self) -> None:
        """
        Check settings that would otherwise fail mid-run.

        Raises:
            ValueError: On the first invalid setting
        """
        if self.min_pow < 0:
            raise ValueError(f"min_pow must be non-negative, got {self.min_pow}")
        if self.min_pow > self.max_pow:
            raise ValueError(
                f"min_pow ({self.min_pow}) must not exceed max_pow ({self.max_pow})"
            )
        if self.reps < 1:
            raise ValueError(f"reps must be at least 1, got {self.reps}")
        if self.outliers < 0:
            raise ValueError(f"outliers must be non-negative, got {self.outliers}")
        if self.output not in OUTPUT_MODES:
            raise ValueError(
                f"output must be one of {', '.join(OUTPUT_MODES)}, got {self.output!r}"
            )
        if self.timer not in TIMERS:
            raise ValueError(
                f"timer must be one of {', '.join(TIMERS)}, got {self.timer!r}"
            )
