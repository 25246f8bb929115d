# Copyright Amazon.com Inc. or its affiliates. All Rights Reserved.
#
# Licensed under the Apache License, Version 2.0 (the "License"). You
# may not use this file except in compliance with the License. A copy of
# the License is located at
#
#     http://aws.amazon.com/apache2.0/
#
# or in the "license" file accompanying this file. This file is
# distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF
# ANY KIND, either express or implied. See the License for the specific
# language governing permissions and limitations under the License.

from __future__ import annotations

import threading
from contextlib import contextmanager
from logging import getLogger
from typing import Iterator, Optional

import numpy as np

from braket.tensornet_simulator.errors import (
    BackendFailureError,
    InvalidArgumentError,
    ResourceExhaustedError,
)

DEFAULT_SCRATCH_SIZE = 1 << 30

_logger = getLogger(__name__)


class ScratchDeviceMem:
    """
    Fixed-capacity workspace handed to the contraction backend.

    The pool is never resized. It must be used by one query at a time: `acquire` fails
    instead of blocking when another query already holds the pool.
    """

    def __init__(self, scratch_size: int = DEFAULT_SCRATCH_SIZE):
        if scratch_size <= 0:
            raise InvalidArgumentError(
                f"[scratch-memory] Scratch size must be positive, got {scratch_size}."
            )
        self._scratch_size = int(scratch_size)
        self._buffer: Optional[np.ndarray] = None
        self._lock = threading.Lock()

    @property
    def scratch_size(self) -> int:
        """int: Capacity of the pool in bytes."""
        return self._scratch_size

    @property
    def buffer(self) -> np.ndarray:
        """np.ndarray: The workspace buffer, allocated on first access."""
        if self._buffer is None:
            self._buffer = np.empty(self._scratch_size, dtype=np.uint8)
        return self._buffer

    @property
    def in_use(self) -> bool:
        return self._lock.locked()

    def check_workspace(self, required_bytes: int) -> None:
        """Raises `ResourceExhaustedError` if `required_bytes` exceeds the capacity."""
        if required_bytes > self._scratch_size:
            raise ResourceExhaustedError(
                "[scratch-memory] Insufficient workspace size on device: "
                f"{required_bytes} bytes required, "
                f"{self._scratch_size} bytes available."
            )

    @contextmanager
    def acquire(self) -> Iterator[ScratchDeviceMem]:
        if not self._lock.acquire(blocking=False):
            raise BackendFailureError(
                "[scratch-memory] Scratch memory pool is already in use by another query."
            )
        try:
            yield self
        finally:
            self._lock.release()
            _logger.debug("Released scratch memory pool")
