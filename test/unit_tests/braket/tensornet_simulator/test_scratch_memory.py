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

import pytest

from braket.tensornet_simulator.errors import (
    BackendFailureError,
    InvalidArgumentError,
    ResourceExhaustedError,
)
from braket.tensornet_simulator.scratch_memory import DEFAULT_SCRATCH_SIZE, ScratchDeviceMem


def test_default_size():
    assert ScratchDeviceMem().scratch_size == DEFAULT_SCRATCH_SIZE


@pytest.mark.parametrize("size", [0, -16])
def test_invalid_size(size):
    with pytest.raises(InvalidArgumentError, match=r"^\[scratch-memory\] Scratch size"):
        ScratchDeviceMem(size)


def test_buffer_has_fixed_capacity():
    scratch = ScratchDeviceMem(256)
    assert scratch.buffer.nbytes == 256
    assert scratch.buffer is scratch.buffer


def test_check_workspace():
    scratch = ScratchDeviceMem(256)
    scratch.check_workspace(256)
    with pytest.raises(ResourceExhaustedError, match=r"^\[scratch-memory\] Insufficient workspace"):
        scratch.check_workspace(257)


def test_resource_exhausted_is_memory_error():
    with pytest.raises(MemoryError):
        ScratchDeviceMem(1).check_workspace(2)


def test_acquire_is_exclusive():
    scratch = ScratchDeviceMem(256)
    with scratch.acquire() as pool:
        assert pool is scratch
        assert scratch.in_use
        with pytest.raises(BackendFailureError, match=r"^\[scratch-memory\] .* already in use"):
            with scratch.acquire():
                pass
    assert not scratch.in_use


def test_acquire_released_on_error():
    scratch = ScratchDeviceMem(256)
    with pytest.raises(KeyError):
        with scratch.acquire():
            raise KeyError("boom")
    assert not scratch.in_use
