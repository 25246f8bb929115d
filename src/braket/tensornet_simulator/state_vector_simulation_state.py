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

import sys
from typing import Optional, Sequence, TextIO

import numpy as np

from braket.tensornet_simulator.errors import (
    BackendFailureError,
    DimensionMismatchError,
    InvalidArgumentError,
    OutOfRangeError,
    UnsupportedFormatError,
    UnsupportedTypeError,
)
from braket.tensornet_simulator.simulation_state import (
    FloatingPointPrecision,
    SimulationState,
    StateDataType,
    StateRepresentation,
    Tensor,
    little_endian_index,
    validate_basis_state,
)


class StateVectorSimulationState(SimulationState):
    """
    A simulation state held as a dense little-endian state vector in host memory.
    """

    def __init__(self, state_vector: np.ndarray):
        vector = np.asarray(state_vector)
        vector = vector.astype(np.result_type(vector.dtype, np.complex64)).reshape(-1)
        size = vector.size
        if size < 2 or size & (size - 1):
            raise InvalidArgumentError(
                f"[state-vector] State vector size must be a power of two, got {size}."
            )
        self._state_vector: Optional[np.ndarray] = vector
        self._num_qubits = size.bit_length() - 1
        self._dtype = vector.dtype

    @property
    def representation(self) -> StateRepresentation:
        return StateRepresentation.STATE_VECTOR

    def get_num_qubits(self) -> int:
        return self._num_qubits

    def get_precision(self) -> FloatingPointPrecision:
        return FloatingPointPrecision.from_dtype(self._dtype)

    def get_amplitude(self, basis_state: Sequence[int]) -> complex:
        bits = validate_basis_state(basis_state, self._num_qubits)
        return complex(self._require_vector()[little_endian_index(bits)])

    def overlap(self, other: SimulationState) -> float:
        if not isinstance(other, StateVectorSimulationState):
            raise UnsupportedTypeError(
                "[state-vector] Computing overlap with other types of state is not supported."
            )
        bra, ket = other._require_vector(), self._require_vector()
        if bra.size != ket.size:
            raise DimensionMismatchError(
                f"[state-vector] Cannot compute the overlap of states with {bra.size} and "
                f"{ket.size} amplitudes."
            )
        return float(abs(np.vdot(bra, ket)))

    def get_tensor(self, tensor_idx: int = 0) -> Tensor:
        if tensor_idx != 0:
            raise OutOfRangeError(f"Invalid tensor index {tensor_idx}")
        data = self._require_vector().view()
        data.flags.writeable = False
        return Tensor(data, (data.size,), self.get_precision())

    def get_tensors(self) -> list[Tensor]:
        return [self.get_tensor(0)]

    def get_num_tensors(self) -> int:
        return 1

    def create_from_size_and_data(
        self, size: int, data, data_type: StateDataType = StateDataType.STATE_VECTOR
    ) -> StateVectorSimulationState:
        if data_type is StateDataType.TENSORS:
            raise UnsupportedFormatError(
                "Cannot create a state vector simulation state from MPS tensors."
            )
        vector = np.asarray(data, dtype=self._dtype).reshape(-1)
        if size < 1 or vector.size < size:
            raise InvalidArgumentError(
                f"[state-vector] Cannot read {size} amplitudes from {vector.size} values."
            )
        return StateVectorSimulationState(vector[:size])

    def to_host(self, num_elements: int, out: Optional[np.ndarray] = None) -> np.ndarray:
        vector = self._require_vector()
        if num_elements != vector.size or (out is not None and out.shape != (num_elements,)):
            provided = num_elements if out is None else out.size
            raise DimensionMismatchError(
                f"[state-vector] Dimension mismatch: expecting {vector.size} elements but "
                f"providing an array of size {provided}."
            )
        if out is None:
            return vector.copy()
        out[:] = vector
        return out

    def dump(self, stream: Optional[TextIO] = None) -> None:
        stream = stream or sys.stdout
        for amplitude in self._require_vector():
            stream.write(f"{amplitude}\n")

    def destroy_state(self) -> None:
        self._state_vector = None

    def _require_vector(self) -> np.ndarray:
        if self._state_vector is None:
            raise BackendFailureError("[state-vector] The state has been destroyed.")
        return self._state_vector
