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

"""
Simulation state backed by a tensor network.

`TensorNetSimulationState` answers classical queries about a `TensorNetState`: amplitudes,
overlaps with other network states, the raw operator tensors and the dense state vector.
Small networks are contracted into a dense vector once and served from that cache; larger
networks are queried one amplitude at a time so the full vector is never formed.
"""

from __future__ import annotations

import sys
from logging import Logger, getLogger
from typing import Optional, Sequence, TextIO

import numpy as np

from braket.tensornet_simulator.contraction_backend import ContractionBackend
from braket.tensornet_simulator.errors import (
    BackendFailureError,
    DimensionMismatchError,
    InvalidArgumentError,
    OutOfRangeError,
    UnsupportedFormatError,
    UnsupportedTypeError,
)
from braket.tensornet_simulator.gate_tensor import GateTensorRecord, TensorArena, conjugate_for_bra
from braket.tensornet_simulator.scratch_memory import ScratchDeviceMem
from braket.tensornet_simulator.simulation_state import (
    FloatingPointPrecision,
    SimulationState,
    StateDataType,
    StateRepresentation,
    Tensor,
    little_endian_index,
    validate_basis_state,
)
from braket.tensornet_simulator.tensornet_state import TensorNetState

# Largest qubit count for which amplitude queries contract and cache the full state vector
MAX_QUBITS_FOR_STATE_CONTRACTION = 30

# Randomized path searches run for each overlap contraction
NUM_HYPER_SAMPLES = 8


class TensorNetSimulationState(SimulationState):
    """
    Queries a tensor network state for amplitudes, overlaps, tensors and state vectors.

    The manager owns its `TensorNetState`. The scratch pool, backend and random engine are
    borrowed and must outlive the manager. The manager is meant to be used from a single
    thread; concurrent tasks should each get their own manager, network and scratch pool.
    """

    def __init__(
        self,
        state: TensorNetState,
        scratch_pad: ScratchDeviceMem,
        backend: ContractionBackend,
        random_engine: np.random.Generator,
        max_qubits_for_state_contraction: int = MAX_QUBITS_FOR_STATE_CONTRACTION,
        logger: Optional[Logger] = None,
    ):
        """
        Args:
            state (TensorNetState): The network to query; ownership passes to the manager.
            scratch_pad (ScratchDeviceMem): Workspace for contractions.
            backend (ContractionBackend): The backend the network was built in.
            random_engine (np.random.Generator): Shared source of randomness, used for
                sampling and handed on to states created from this one.
            max_qubits_for_state_contraction (int): Up to this many qubits, amplitude queries
                contract and cache the full state vector. Default: 30.
            logger (Optional[Logger]): Logger to use. Default: the module logger.
        """
        self._state: Optional[TensorNetState] = state
        self._num_qubits = state.num_qubits
        self._dtype = state.dtype
        self._arena = state.arena
        self._scratch_pad = scratch_pad
        self._backend = backend
        self._random_engine = random_engine
        self._max_qubits_for_state_contraction = max_qubits_for_state_contraction
        self._logger = logger or getLogger(__name__)
        self._contracted_state_vec: Optional[np.ndarray] = None
        self._contracted_version = -1

    @property
    def representation(self) -> StateRepresentation:
        return StateRepresentation.TENSOR_NETWORK

    @property
    def is_device_data(self) -> bool:
        return True

    @property
    def network(self) -> Optional[TensorNetState]:
        """Optional[TensorNetState]: The owned network, or None once destroyed."""
        return self._state

    @property
    def random_engine(self) -> np.random.Generator:
        return self._random_engine

    def get_num_qubits(self) -> int:
        return self._num_qubits

    def get_precision(self) -> FloatingPointPrecision:
        return FloatingPointPrecision.from_dtype(self._dtype)

    def get_amplitude(self, basis_state: Sequence[int]) -> complex:
        """Returns the amplitude ⟨basis_state|ψ⟩.

        Args:
            basis_state (Sequence[int]): One bit per qubit; ``basis_state[i]`` is the value
                of qubit ``i``.

        Returns:
            complex: The amplitude.
        """
        bits = validate_basis_state(basis_state, self._num_qubits)
        state = self._require_state()
        if self._num_qubits <= self._max_qubits_for_state_contraction:
            return complex(self._cached_state_vector(state)[little_endian_index(bits)])

        amplitudes = state.get_state_vector(range(self._num_qubits), bits)
        return complex(amplitudes[0])

    def overlap(self, other: SimulationState) -> float:
        """Computes the magnitude of the overlap ⟨other|ψ⟩.

        The bra side is conjugated by reversing its operators and flipping their adjoint
        flags; non-unitary operators also get transposed copies of their data. The ket
        operators followed by the conjugated bra operators form a temporary network whose
        all-zero amplitude is the overlap. Neither state is modified.

        Args:
            other (SimulationState): A state that supports network overlaps.

        Returns:
            float: ``|⟨other|ψ⟩|``.
        """
        if not isinstance(other, SimulationState) or not other.supports_network_overlap:
            raise UnsupportedTypeError(
                "[tensornet-state] Computing overlap with other types of state is not supported."
            )
        ket = self._state
        bra = other.network
        if ket is None or bra is None or not self._num_qubits or not other.get_num_qubits():
            raise InvalidArgumentError(
                "[tensornet-state] Cannot compute the overlap of a destroyed or empty state."
            )

        num_qubits = max(ket.num_qubits, bra.num_qubits)
        temp_state = self._backend.create_state(num_qubits, np.result_type(ket.dtype, bra.dtype))
        temporaries = []
        try:
            for record in ket.tensor_ops:
                self._append_to(temp_state, record, ket.arena)
            for record in reversed(bra.tensor_ops):
                bra_record, temporary = conjugate_for_bra(record, bra.arena)
                if temporary is not None:
                    temporaries.append(temporary)
                self._append_to(temp_state, bra_record, bra.arena)

            # Cap off with the all-zero projection, the initial state of the bra.
            amplitudes, _ = self._backend.compute_accessor(
                temp_state,
                range(num_qubits),
                [0] * num_qubits,
                self._scratch_pad,
                hyper_samples=NUM_HYPER_SAMPLES,
            )
        finally:
            self._backend.destroy_state(temp_state)
            for temporary in temporaries:
                bra.arena.release(temporary)

        overlap = abs(complex(amplitudes[0]))
        self._logger.debug(f"Overlap over {num_qubits} qubits: {overlap}")
        return overlap

    def get_tensor(self, tensor_idx: int = 0) -> Tensor:
        if tensor_idx < 0 or tensor_idx >= self.get_num_tensors():
            raise OutOfRangeError(f"Invalid tensor index {tensor_idx}")
        return self._export(self._require_state().tensor_ops[tensor_idx])

    def get_tensors(self) -> list[Tensor]:
        return [self._export(record) for record in self._require_state().tensor_ops]

    def get_num_tensors(self) -> int:
        return len(self._require_state().tensor_ops)

    def create_from_size_and_data(
        self, size: int, data, data_type: StateDataType = StateDataType.STATE_VECTOR
    ) -> TensorNetSimulationState:
        """Creates a new state from a dense state vector.

        Args:
            size (int): The number of amplitudes to read from `data`.
            data: The amplitudes, little-endian.
            data_type (StateDataType): The format of `data`. Only dense state vectors are
                supported. Default: `StateDataType.STATE_VECTOR`.

        Returns:
            TensorNetSimulationState: A new state sharing this state's scratch pool, backend
            and random engine. This state is not modified.
        """
        if data_type is StateDataType.TENSORS:
            raise UnsupportedFormatError(
                "Cannot create tensornet backend's simulation state with MPS tensors."
            )
        vector = np.asarray(data, dtype=self._dtype).reshape(-1)
        if size < 1 or vector.size < size:
            raise InvalidArgumentError(
                f"[tensornet-state] Cannot read {size} amplitudes from {vector.size} values."
            )
        state = TensorNetState.create_from_state_vector(
            vector[:size], self._scratch_pad, self._backend, self._arena, self._dtype
        )
        return TensorNetSimulationState(
            state,
            self._scratch_pad,
            self._backend,
            self._random_engine,
            self._max_qubits_for_state_contraction,
            self._logger,
        )

    def to_host(self, num_elements: int, out: Optional[np.ndarray] = None) -> np.ndarray:
        """Contracts the network and copies the state vector to host memory.

        The amplitude cache is neither used nor populated.

        Args:
            num_elements (int): The number of amplitudes expected; must be ``2**num_qubits``.
            out (Optional[np.ndarray]): A one-dimensional buffer of length `num_elements` to
                fill. If None, a new array is returned.

        Returns:
            np.ndarray: The state vector.
        """
        expected = 1 << self._num_qubits
        if num_elements != expected or (out is not None and out.shape != (num_elements,)):
            provided = num_elements if out is None else out.size
            raise DimensionMismatchError(
                f"[tensornet-state] Dimension mismatch: expecting {expected} elements but "
                f"providing an array of size {provided}."
            )
        state_vector = self._require_state().get_state_vector()
        if out is None:
            return state_vector
        out[:] = state_vector
        return out

    def sample(self, shots: int, measured_qubits: Optional[Sequence[int]] = None):
        """Samples computational basis outcomes with the shared random engine."""
        return self._require_state().sample(shots, self._random_engine, measured_qubits)

    def dump(self, stream: Optional[TextIO] = None) -> None:
        stream = stream or sys.stdout
        cached = self._contracted_state_vec
        if cached is not None and (
            self._state is None or self._contracted_version == self._state.version
        ):
            state_vector = cached
        else:
            state_vector = self._require_state().get_state_vector()
        for amplitude in state_vector:
            stream.write(f"{amplitude}\n")

    def destroy_state(self) -> None:
        self._logger.info("Destroying tensor network state handle")
        if self._state is not None:
            self._state.destroy()
            self._state = None

    def _cached_state_vector(self, state: TensorNetState) -> np.ndarray:
        if self._contracted_state_vec is None or self._contracted_version != state.version:
            self._logger.debug(f"Contracting {self._num_qubits}-qubit state vector for caching")
            self._contracted_state_vec = state.get_state_vector()
            self._contracted_version = state.version
        return self._contracted_state_vec

    def _append_to(self, temp_state, record: GateTensorRecord, arena: TensorArena) -> None:
        self._backend.append_operator(
            temp_state,
            record.target_qubit_ids,
            record.control_qubit_ids,
            arena.get(record.device_data),
            adjoint=record.is_adjoint,
            unitary=record.is_unitary,
        )

    def _export(self, record: GateTensorRecord) -> Tensor:
        data = self._arena.get(record.device_data).view()
        data.flags.writeable = False
        return Tensor(data, record.extents, self.get_precision())

    def _require_state(self) -> TensorNetState:
        if self._state is None:
            raise BackendFailureError("[tensornet-state] The state has been destroyed.")
        return self._state
