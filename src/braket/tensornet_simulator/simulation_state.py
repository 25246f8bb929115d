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

from dataclasses import dataclass
from enum import Enum
from functools import reduce
from typing import Optional, Sequence, TextIO

import numpy as np

from braket.tensornet_simulator.errors import InvalidArgumentError


def validate_basis_state(basis_state: Sequence[int], num_qubits: int) -> list[int]:
    """Checks that `basis_state` holds one bit, 0 or 1, per qubit and returns it as a list."""
    bits = list(basis_state)
    if len(bits) != num_qubits:
        raise InvalidArgumentError(
            "[simulation-state] get_amplitude with an invalid number of bits in the basis "
            f"state: expected {num_qubits}, provided {len(bits)}."
        )
    if any(bit != 0 and bit != 1 for bit in bits):
        raise InvalidArgumentError(
            "[simulation-state] get_amplitude with an invalid basis state: only qubit state "
            "(0 or 1) is supported."
        )
    if not bits:
        raise InvalidArgumentError("[simulation-state] Empty basis state.")
    return [int(bit) for bit in bits]


def little_endian_index(bits: Sequence[int]) -> int:
    """The state vector index of a basis state; qubit 0 is the least significant bit."""
    return reduce(lambda acc, bit: (acc << 1) + bit, reversed(bits), 0)


class StateRepresentation(Enum):
    """The closed set of ways a simulation state can be represented."""

    TENSOR_NETWORK = "tensor_network"
    STATE_VECTOR = "state_vector"
    MPS = "mps"


class StateDataType(Enum):
    """Formats accepted when reconstructing a state from raw data."""

    STATE_VECTOR = "state_vector"
    TENSORS = "tensors"


class FloatingPointPrecision(Enum):
    FP32 = "fp32"
    FP64 = "fp64"

    @classmethod
    def from_dtype(cls, dtype) -> FloatingPointPrecision:
        single = (np.dtype(np.complex64), np.dtype(np.float32))
        return cls.FP32 if np.dtype(dtype) in single else cls.FP64


@dataclass(frozen=True)
class Tensor:
    """
    A read-only view of one tensor of a simulation state.

    Attributes:
        data: The tensor data. Aliases the state's storage and must not outlive the state.
        extents: The size of each tensor leg.
        fp_precision: The numeric precision of the data.
    """

    data: np.ndarray
    extents: tuple[int, ...]
    fp_precision: FloatingPointPrecision

    @property
    def num_elements(self) -> int:
        return int(np.prod(self.extents))

    @property
    def rank(self) -> int:
        return len(self.extents)


class SimulationState:
    """
    The state of a quantum system produced by a simulator, queried for classical data.

    Subclasses implement one `StateRepresentation`. Operations that combine two states, such
    as `overlap`, use the capability queries to check that the representations are compatible.
    """

    @property
    def representation(self) -> StateRepresentation:
        """StateRepresentation: How this state is stored."""
        raise NotImplementedError("representation is not implemented.")

    @property
    def supports_network_overlap(self) -> bool:
        """bool: Whether overlaps can be computed by joining tensor networks."""
        return self.representation is StateRepresentation.TENSOR_NETWORK

    @property
    def is_device_data(self) -> bool:
        """bool: Whether the state's data lives in device memory."""
        return False

    @property
    def network(self):
        """The tensor network behind the state, if the representation has one."""
        return None

    def get_num_qubits(self) -> int:
        raise NotImplementedError("get_num_qubits is not implemented.")

    def get_precision(self) -> FloatingPointPrecision:
        raise NotImplementedError("get_precision is not implemented.")

    def overlap(self, other: SimulationState) -> float:
        """Computes the magnitude of the overlap of this state with `other`."""
        raise NotImplementedError("overlap is not implemented.")

    def get_amplitude(self, basis_state: Sequence[int]) -> complex:
        """Returns the amplitude of a computational basis state, one bit per qubit."""
        raise NotImplementedError("get_amplitude is not implemented.")

    def get_amplitudes(self, basis_states: Sequence[Sequence[int]]) -> list[complex]:
        """Returns the amplitudes of several computational basis states."""
        return [self.get_amplitude(basis_state) for basis_state in basis_states]

    def get_tensor(self, tensor_idx: int = 0) -> Tensor:
        raise NotImplementedError("get_tensor is not implemented.")

    def get_tensors(self) -> list[Tensor]:
        raise NotImplementedError("get_tensors is not implemented.")

    def get_num_tensors(self) -> int:
        raise NotImplementedError("get_num_tensors is not implemented.")

    def create_from_size_and_data(
        self, size: int, data, data_type: StateDataType = StateDataType.STATE_VECTOR
    ) -> SimulationState:
        """Creates a new state of the same kind from raw data."""
        raise NotImplementedError("create_from_size_and_data is not implemented.")

    def to_host(self, num_elements: int, out: Optional[np.ndarray] = None) -> np.ndarray:
        """Copies the dense state vector into host memory."""
        raise NotImplementedError("to_host is not implemented.")

    def dump(self, stream: Optional[TextIO] = None) -> None:
        """Writes the state vector to `stream`, one amplitude per line."""
        raise NotImplementedError("dump is not implemented.")

    def destroy_state(self) -> None:
        """Releases the resources backing the state."""
        raise NotImplementedError("destroy_state is not implemented.")
