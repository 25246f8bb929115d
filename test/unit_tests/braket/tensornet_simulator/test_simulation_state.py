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

from braket.tensornet_simulator.errors import InvalidArgumentError
from braket.tensornet_simulator.simulation_state import (
    FloatingPointPrecision,
    SimulationState,
    StateDataType,
    StateRepresentation,
    Tensor,
    little_endian_index,
    validate_basis_state,
)


@pytest.fixture
def simulation_state():
    return SimulationState()


@pytest.mark.xfail(raises=NotImplementedError)
def test_simulation_state_representation(simulation_state):
    simulation_state.representation


@pytest.mark.xfail(raises=NotImplementedError)
def test_simulation_state_overlap(simulation_state):
    simulation_state.overlap(simulation_state)


@pytest.mark.xfail(raises=NotImplementedError)
def test_simulation_state_get_amplitudes(simulation_state):
    simulation_state.get_amplitudes([[0]])


@pytest.mark.xfail(raises=NotImplementedError)
def test_simulation_state_get_tensor(simulation_state):
    simulation_state.get_tensor(0)


@pytest.mark.xfail(raises=NotImplementedError)
def test_simulation_state_create_from_size_and_data(simulation_state):
    simulation_state.create_from_size_and_data(2, [1, 0])


@pytest.mark.xfail(raises=NotImplementedError)
def test_simulation_state_to_host(simulation_state):
    simulation_state.to_host(2)


@pytest.mark.xfail(raises=NotImplementedError)
def test_simulation_state_destroy_state(simulation_state):
    simulation_state.destroy_state()


def test_simulation_state_defaults(simulation_state):
    assert not simulation_state.is_device_data
    assert simulation_state.network is None


@pytest.mark.parametrize(
    "bits, index",
    [([0], 0), ([1], 1), ([1, 0, 0], 1), ([0, 0, 1], 4), ([1, 1, 0, 1], 11)],
)
def test_little_endian_index(bits, index):
    assert little_endian_index(bits) == index


def test_validate_basis_state():
    assert validate_basis_state((1, 0, True), 3) == [1, 0, 1]


@pytest.mark.parametrize(
    "basis_state, num_qubits, message",
    [
        ([0, 1], 3, "expected 3, provided 2"),
        ([0, 1, 0, 1], 3, "expected 3, provided 4"),
        ([0, 3], 2, "only qubit state"),
        ([], 0, "Empty basis state"),
    ],
)
def test_validate_invalid_basis_state(basis_state, num_qubits, message):
    with pytest.raises(InvalidArgumentError, match=message):
        validate_basis_state(basis_state, num_qubits)


@pytest.mark.parametrize(
    "dtype, precision",
    [
        (np.complex64, FloatingPointPrecision.FP32),
        (np.float32, FloatingPointPrecision.FP32),
        (np.complex128, FloatingPointPrecision.FP64),
        (np.float64, FloatingPointPrecision.FP64),
    ],
)
def test_precision_from_dtype(dtype, precision):
    assert FloatingPointPrecision.from_dtype(dtype) is precision


def test_tensor():
    data = np.zeros((2, 2, 2, 2))
    tensor = Tensor(data, data.shape, FloatingPointPrecision.FP64)
    assert tensor.rank == 4
    assert tensor.num_elements == 16


def test_enums():
    assert {representation.value for representation in StateRepresentation} == {
        "tensor_network",
        "state_vector",
        "mps",
    }
    assert StateDataType("tensors") is StateDataType.TENSORS
