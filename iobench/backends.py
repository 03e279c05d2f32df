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

"""Transfer backends: the operations a benchmark times.

A backend knows how to move an ``element_size``-aligned buffer between host
memory and its device. ``host_to_device`` and ``device_to_host`` are
operation factories: each prepares its buffers for one payload size and
returns the zero-argument callable that performs a single transfer.

Example:
    >>> from iobench.backends import TorchBackend
    >>> backend = TorchBackend("auto")
    >>> backend.warm()
    >>> upload = backend.host_to_device(1 << 20)
    >>> upload()
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional, Union

import numpy as np
import torch

logger = logging.getLogger(__name__)


def is_cuda_available() -> bool:
    """Check if CUDA is available via PyTorch."""
    return torch.cuda.is_available()


def sync_cuda(device: Optional[Union[int, torch.device]] = None) -> None:
    """Wait for all queued work on a CUDA device. No-op without CUDA."""
    if torch.cuda.is_available():
        if device is not None:
            torch.cuda.synchronize(device)
        else:
            torch.cuda.synchronize()


def resolve_device(spec: str = "auto") -> torch.device:
    """Turn a device string into a torch.device.

    Args:
        spec: ``"auto"`` picks the first CUDA device when available and
            falls back to the CPU; anything else is passed to torch.device.

    Raises:
        RuntimeError: If a CUDA device is requested but CUDA is unavailable.
    """
    if spec == "auto":
        return torch.device("cuda" if is_cuda_available() else "cpu")

    device = torch.device(spec)
    if device.type == "cuda" and not is_cuda_available():
        raise RuntimeError(f"CUDA not available for device {spec!r}")
    return device


def random_buffer(
    length: int,
    dtype: Any = np.int32,
    seed: Optional[int] = None,
) -> np.ndarray:
    """Generate a buffer of uniformly random values spanning ``dtype``.

    Args:
        length: Number of elements.
        dtype: Integer numpy dtype, or float32/float64.
        seed: Random seed for reproducibility. If None, uses fresh entropy.

    Returns:
        1D numpy array of ``length`` elements.
    """
    rng = np.random.default_rng(seed)
    dtype = np.dtype(dtype)
    if np.issubdtype(dtype, np.integer):
        info = np.iinfo(dtype)
        return rng.integers(info.min, info.max, size=length, dtype=dtype, endpoint=True)
    return rng.random(length, dtype=dtype)


class TransferBackend(ABC):
    """A device that buffers can be copied to and from."""

    #: Width in bytes of one buffer element.
    element_size: int = 4

    @property
    @abstractmethod
    def name(self) -> str:
        """Backend identifier used in reports."""

    @property
    @abstractmethod
    def device_name(self) -> str:
        """Device identifier used in reports."""

    def warm(self) -> None:
        """Run a throwaway transfer so first-use costs stay out of trials."""

    @abstractmethod
    def host_to_device(self, payload_size: int) -> Callable[[], Any]:
        """Return an operation copying ``payload_size`` host bytes to the device."""

    @abstractmethod
    def device_to_host(self, payload_size: int) -> Callable[[], Any]:
        """Return an operation copying ``payload_size`` device bytes to the host."""

    def _length(self, payload_size: int) -> int:
        length = payload_size // self.element_size
        if length == 0:
            raise ValueError(
                f"Payload of {payload_size} bytes holds no "
                f"{self.element_size}-byte elements"
            )
        return length


class TorchBackend(TransferBackend):
    """PyTorch tensors on a CPU or CUDA device, with int32 elements.

    Both directions make a real copy on every call, including on the CPU
    device where a plain ``.to()`` would return the same tensor.
    """

    element_size = np.dtype(np.int32).itemsize

    def __init__(self, device: str = "auto", seed: Optional[int] = None) -> None:
        """Initialize the backend.

        Args:
            device: Device string, see :func:`resolve_device`.
            seed: Seed for the random transfer buffers.
        """
        self.device = resolve_device(device)
        self.seed = seed

    @property
    def name(self) -> str:
        return f"torch-{torch.__version__}"

    @property
    def device_name(self) -> str:
        if self.device.type == "cuda":
            return f"{self.device} ({torch.cuda.get_device_name(self.device)})"
        return str(self.device)

    def sync(self) -> None:
        if self.device.type == "cuda":
            sync_cuda(self.device)

    def warm(self) -> None:
        logger.debug("Warming %s", self.device_name)
        tensor = torch.zeros(10, dtype=torch.float32, device=self.device)
        tensor.to("cpu", copy=True)
        self.sync()

    def host_to_device(self, payload_size: int) -> Callable[[], Any]:
        data = random_buffer(self._length(payload_size), np.int32, self.seed)
        device = self.device

        def upload() -> None:
            torch.tensor(data, device=device)
            self.sync()

        return upload

    def device_to_host(self, payload_size: int) -> Callable[[], Any]:
        data = random_buffer(self._length(payload_size), np.int32, self.seed)
        tensor = torch.from_numpy(data).to(self.device)
        self.sync()

        def download() -> None:
            tensor.to("cpu", copy=True)

        return download


BACKENDS = {
    "torch": TorchBackend,
}


def create_backend(name: str, device: str = "auto", **kwargs: Any) -> TransferBackend:
    """Instantiate a registered backend by name.

    Raises:
        ValueError: If no backend is registered under ``name``.
    """
    try:
        cls = BACKENDS[name]
    except KeyError:
        raise ValueError(
            f"Unknown backend {name!r}; choose from {', '.join(sorted(BACKENDS))}"
        ) from None
    return cls(device=device, **kwargs)
