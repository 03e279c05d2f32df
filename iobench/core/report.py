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
"""Benchmark report data model: both transfer directions for one backend and device.

Building, rendering and storing reports happens outside the core, in
:mod:`iobench.report`.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .bandwidth import BandwidthTrials


@dataclass(frozen=True)
class BenchmarkReport:
    """Host-to-device and device-to-host trials for one backend/device pair.

    Attributes:
        backend: Backend identifier.
        device: Device identifier.
        host_to_device: Trials copying host buffers onto the device.
        device_to_host: Trials copying device buffers back to the host.
    """

    backend: str
    device: str
    host_to_device: BandwidthTrials
    device_to_host: BandwidthTrials

    def to_dict(self) -> Dict[str, Any]:
        return {
            "backend": self.backend,
            "device": self.device,
            "host_to_device": self.host_to_device.to_dict(),
            "device_to_host": self.device_to_host.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> BenchmarkReport:
        return cls(
            backend=data["backend"],
            device=data["device"],
            host_to_device=BandwidthTrials.from_dict(data["host_to_device"]),
            device_to_host=BandwidthTrials.from_dict(data["device_to_host"]),
        )

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)
