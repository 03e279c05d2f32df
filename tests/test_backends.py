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

"""Tests for iobench.backends module."""

import numpy as np
import pytest
import torch

from iobench.backends import (
    TorchBackend,
    create_backend,
    is_cuda_available,
    random_buffer,
    resolve_device,
    sync_cuda,
)
from iobench.report import run_report


class TestRandomBuffer:
    def test_length_and_dtype(self):
        buf = random_buffer(10)

        assert buf.shape == (10,)
        assert buf.dtype == np.int32

    def test_seeded_is_reproducible(self):
        np.testing.assert_array_equal(random_buffer(32, seed=7), random_buffer(32, seed=7))

    def test_other_dtypes(self):
        assert random_buffer(5, dtype=np.uint8).dtype == np.uint8
        floats = random_buffer(5, dtype=np.float32)
        assert floats.dtype == np.float32
        assert ((floats >= 0) & (floats < 1)).all()


class TestDeviceHelpers:
    def test_resolve_cpu(self):
        assert resolve_device("cpu") == torch.device("cpu")

    def test_resolve_auto(self):
        expected = "cuda" if is_cuda_available() else "cpu"

        assert resolve_device("auto").type == expected

    def test_resolve_cuda_without_cuda_raises(self):
        if is_cuda_available():
            pytest.skip("Test requires CUDA to be unavailable")

        with pytest.raises(RuntimeError, match="CUDA not available"):
            resolve_device("cuda:0")

    def test_sync_cuda_no_error(self):
        sync_cuda()


class TestTorchBackend:
    def test_identifiers(self):
        backend = TorchBackend("cpu")

        assert backend.name == f"torch-{torch.__version__}"
        assert backend.device_name == "cpu"
        assert backend.element_size == 4

    def test_host_to_device_operation(self):
        backend = TorchBackend("cpu", seed=0)
        backend.warm()

        upload = backend.host_to_device(64)
        upload()
        upload()

    def test_device_to_host_operation(self):
        download = TorchBackend("cpu", seed=0).device_to_host(64)

        download()

    def test_payload_without_elements_raises(self):
        with pytest.raises(ValueError, match="holds no"):
            TorchBackend("cpu").host_to_device(2)

    def test_create_backend(self):
        backend = create_backend("torch", "cpu")

        assert isinstance(backend, TorchBackend)

    def test_create_unknown_backend(self):
        with pytest.raises(ValueError, match="Unknown backend"):
            create_backend("wgpu")

    def test_report_on_cpu(self):
        report = run_report(TorchBackend("cpu", seed=1), [16, 1024], reps=3, outliers=1)

        assert report.device == "cpu"
        for trials in (report.host_to_device, report.device_to_host):
            assert trials.payload_sizes == (16, 1024)
            for trial in trials:
                assert trial.timing_stats.samples == 3
                assert trial.timing_stats.mean > 0


@pytest.mark.gpu
class TestTorchBackendGPU:
    def test_device_name_includes_gpu(self):
        backend = TorchBackend("cuda:0")

        assert backend.device_name.startswith("cuda:0 (")

    def test_report_on_gpu(self):
        report = run_report(TorchBackend("cuda"), [1024, 1 << 20], reps=3, outliers=1)

        assert report.host_to_device.trials[1].bandwidth.bytes_per_second() > 0
