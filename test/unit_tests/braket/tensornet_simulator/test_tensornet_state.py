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

from collections import Counter

import numpy as np
import pytest

from braket.tensornet_simulator.errors import BackendFailureError, InvalidArgumentError
from braket.tensornet_simulator.gate_tensor import GateTensorRecord, OperatorKind
from braket.tensornet_simulator.tensornet_state import TensorNetState

H = np.array([[1, 1], [1, -1]], dtype=complex) / np.sqrt(2)
X = np.array([[0, 1], [1, 0]], dtype=complex)


@pytest.fixture
def network(scratch_pad, backend, arena):
    return TensorNetState(2, scratch_pad, backend, arena)


def test_new_state(network):
    assert network.num_qubits == 2
    assert network.tensor_ops == ()
    assert network.version == 0
    assert not network.is_destroyed
    assert np.allclose(network.get_state_vector(), [1, 0, 0, 0])


def test_state_without_qubits(scratch_pad, backend, arena):
    with pytest.raises(InvalidArgumentError):
        TensorNetState(0, scratch_pad, backend, arena)


def test_apply_gate(network, arena):
    first = network.apply_gate([0], H)
    second = network.apply_gate([1], X, controls=[0])

    assert network.tensor_ops == (first, second)
    assert network.version == 2
    assert second.control_qubit_ids == (0,)
    assert second.is_unitary
    assert arena.get(first.device_data).shape == (2, 2)
    assert np.allclose(network.get_state_vector(), [1 / np.sqrt(2), 0, 0, 1 / np.sqrt(2)])


def test_apply_gate_copies_matrix(network, arena):
    matrix = X.copy()
    record = network.apply_gate([0], matrix)
    matrix[:] = 0
    assert np.allclose(arena.get(record.device_data), X)


def test_apply_adjoint_gate(network):
    s = np.diag([1, 1j])
    network.apply_gate([0], X)
    network.apply_gate([0], s, adjoint=True)
    assert np.allclose(network.get_state_vector(), [0, -1j, 0, 0])


@pytest.mark.parametrize(
    "targets, matrix, controls",
    [
        ([2], X, ()),
        ([0], X, (3,)),
        ([0], np.eye(4), ()),
        ([0], X, (0,)),
    ],
)
def test_apply_invalid_gate_releases_data(network, arena, targets, matrix, controls):
    with pytest.raises(InvalidArgumentError):
        network.apply_gate(targets, matrix, controls=controls)
    assert len(arena) == 0
    assert network.version == 0


def test_apply_tensor_with_borrowed_data(network, arena):
    handle = arena.allocate(X.reshape(2, 2))
    record = GateTensorRecord([1], handle)
    assert network.apply_tensor(record) == 0
    assert np.allclose(network.get_state_vector(), [0, 0, 1, 0])

    network.destroy()
    assert handle in arena


def test_apply_tensor_wrong_size(network, arena):
    record = GateTensorRecord([0, 1], arena.allocate(X))
    with pytest.raises(InvalidArgumentError, match="needs 16 elements"):
        network.apply_tensor(record)


def test_apply_qubit_projector(network):
    network.apply_gate([0], H)
    record = network.apply_qubit_projector(0, 1)
    assert record.kind is OperatorKind.NON_UNITARY
    assert np.allclose(network.get_state_vector(), [0, 1 / np.sqrt(2), 0, 0])
    assert np.isclose(network.compute_norm(), 0.5)


def test_apply_qubit_projector_invalid_outcome(network):
    with pytest.raises(InvalidArgumentError):
        network.apply_qubit_projector(0, 2)


def test_projected_state_vector(network):
    network.apply_gate([0], H)
    network.apply_gate([1], X, controls=[0])
    assert np.allclose(network.get_state_vector([1], [1]), [0, 1 / np.sqrt(2)])
    assert np.allclose(network.get_state_vector([0, 1], [0, 0]), [1 / np.sqrt(2)])


def test_create_from_state_vector(scratch_pad, backend, arena, random_engine):
    vector = random_engine.normal(size=8) + 1j * random_engine.normal(size=8)
    vector /= np.linalg.norm(vector)

    network = TensorNetState.create_from_state_vector(vector, scratch_pad, backend, arena)

    assert network.num_qubits == 3
    assert len(network.tensor_ops) == 1
    assert network.tensor_ops[0].kind is OperatorKind.NON_UNITARY
    assert network.tensor_ops[0].target_qubit_ids == (2, 1, 0)
    assert np.allclose(network.get_state_vector(), vector)
    assert np.isclose(network.compute_norm(), 1)


@pytest.mark.parametrize("size", [1, 3, 6])
def test_create_from_state_vector_invalid_size(scratch_pad, backend, arena, size):
    with pytest.raises(InvalidArgumentError, match="power of two"):
        TensorNetState.create_from_state_vector(np.ones(size), scratch_pad, backend, arena)


def test_sample_basis_state(network, random_engine):
    network.apply_gate([1], X)
    assert network.sample(10, random_engine) == Counter({"01": 10})
    assert network.sample(10, random_engine, measured_qubits=[1]) == Counter({"1": 10})
    assert network.sample(10, random_engine, measured_qubits=[1, 0]) == Counter({"10": 10})


def test_sample_bell_state(network, random_engine):
    network.apply_gate([0], H)
    network.apply_gate([1], X, controls=[0])
    counts = network.sample(200, random_engine)
    assert sum(counts.values()) == 200
    assert set(counts) <= {"00", "11"}


def test_sample_renormalizes_projected_state(network, random_engine):
    network.apply_gate([0], H)
    network.apply_qubit_projector(0, 0)
    assert network.sample(20, random_engine) == Counter({"00": 20})


@pytest.mark.parametrize("measured", [[], [2], [-1], [0, 0]])
def test_sample_invalid_qubits(network, random_engine, measured):
    with pytest.raises(InvalidArgumentError):
        network.sample(1, random_engine, measured_qubits=measured)


def test_destroy_releases_resources(network, backend, arena):
    network.apply_gate([0], H)
    network.apply_qubit_projector(1, 0)
    assert len(arena) == 2
    assert backend.live_states == 1

    network.destroy()
    network.destroy()

    assert network.is_destroyed
    assert len(arena) == 0
    assert backend.live_states == 0
    with pytest.raises(BackendFailureError):
        network.get_state_vector()
    with pytest.raises(BackendFailureError):
        network.apply_gate([0], H)


def test_context_manager(scratch_pad, backend, arena):
    with TensorNetState(1, scratch_pad, backend, arena) as network:
        network.apply_gate([0], X)
        assert np.allclose(network.get_state_vector(), [0, 1])
    assert network.is_destroyed
    assert backend.live_states == 0
