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

import numpy as np
import pytest

from braket.tensornet_simulator import (
    ContractionBackend,
    ScratchDeviceMem,
    TensorArena,
    TensorNetSimulationState,
    TensorNetState,
)


@pytest.fixture
def arena():
    return TensorArena()


@pytest.fixture
def backend():
    return ContractionBackend()


@pytest.fixture
def scratch_pad():
    return ScratchDeviceMem(1 << 24)


@pytest.fixture
def random_engine():
    return np.random.default_rng(42)


@pytest.fixture
def make_state(scratch_pad, backend, arena, random_engine):
    """Factory for simulation states sharing one backend, arena and scratch pool."""

    def _make_state(num_qubits, **kwargs):
        network = TensorNetState(num_qubits, scratch_pad, backend, arena)
        return TensorNetSimulationState(network, scratch_pad, backend, random_engine, **kwargs)

    return _make_state
