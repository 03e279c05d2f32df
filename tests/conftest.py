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

"""Shared test fixtures for iobench tests."""

import pytest

SECOND = 1_000_000_000


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "gpu: tests that require GPU/CUDA (deselect with '-m \"not gpu\"')"
    )


def pytest_collection_modifyitems(config, items):
    """Automatically skip GPU tests when CUDA is not available."""
    try:
        import torch

        cuda_available = torch.cuda.is_available()
    except ImportError:
        cuda_available = False

    if not cuda_available:
        skip_gpu = pytest.mark.skip(reason="CUDA not available")
        for item in items:
            if "gpu" in item.keywords:
                item.add_marker(skip_gpu)


@pytest.fixture
def one_to_five_seconds():
    """Durations 1s..5s in nanoseconds."""
    return [i * SECOND for i in range(1, 6)]


@pytest.fixture
def timings_with_spikes():
    """Steady ~1ms timings with a cold-start spike and a scheduler stall."""
    ms = 1_000_000
    return [
        9 * ms,
        int(1.02 * ms),
        int(0.98 * ms),
        int(1.01 * ms),
        int(0.99 * ms),
        7 * ms,
        int(1.00 * ms),
    ]


class FakeBackend:
    """In-memory backend that records which operations it built."""

    element_size = 4
    name = "fake"
    device_name = "fake:0"

    def __init__(self):
        self.warmed = 0
        self.built = []
        self.calls = []

    def warm(self):
        self.warmed += 1

    def _factory(self, direction, payload_size):
        self.built.append((direction, payload_size))
        data = bytearray(payload_size)

        def operation():
            self.calls.append((direction, payload_size))
            return bytes(data)

        return operation

    def host_to_device(self, payload_size):
        return self._factory("h2d", payload_size)

    def device_to_host(self, payload_size):
        return self._factory("d2h", payload_size)


@pytest.fixture
def fake_backend():
    return FakeBackend()


@pytest.fixture
def make_report():
    """Factory for a small two-direction report with known statistics."""
    from iobench.core.bandwidth import BandwidthStats, BandwidthTrials
    from iobench.core.report import BenchmarkReport

    def _make(backend="torch-2.3.0", device="cpu"):
        h2d = BandwidthTrials(
            trials=(
                BandwidthStats.from_samples(1024, 1, [SECOND, SECOND, 5 * SECOND]),
                BandwidthStats.from_samples(2048, 1, [SECOND, 2 * SECOND, 3 * SECOND]),
            )
        )
        d2h = BandwidthTrials(
            trials=(
                BandwidthStats.from_samples(1024, 0, [SECOND // 2]),
                BandwidthStats.from_samples(2048, 0, [SECOND]),
            )
        )
        return BenchmarkReport(
            backend=backend, device=device, host_to_device=h2d, device_to_host=d2h
        )

    return _make
