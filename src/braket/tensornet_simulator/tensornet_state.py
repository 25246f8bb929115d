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

from collections import Counter
from logging import getLogger
from typing import Optional, Sequence

import numpy as np

from braket.tensornet_simulator.contraction_backend import ContractionBackend, StateHandle
from braket.tensornet_simulator.errors import BackendFailureError, InvalidArgumentError
from braket.tensornet_simulator.gate_tensor import (
    GateTensorRecord,
    OperatorKind,
    TensorArena,
    TensorHandle,
)
from braket.tensornet_simulator.scratch_memory import ScratchDeviceMem

_logger = getLogger(__name__)


class TensorNetState:
    """
    An append-only tensor network describing the state of a fixed qubit register.

    All qubits start in |0⟩. Operators are appended in application order, either as
    records whose data already lives in the arena (`apply_tensor`) or as matrices that
    the state allocates itself (`apply_gate`, `apply_qubit_projector`). Tensors the state
    allocated are released when the state is destroyed; all other data is only borrowed.
    """

    def __init__(
        self,
        num_qubits: int,
        scratch_pad: ScratchDeviceMem,
        backend: ContractionBackend,
        arena: TensorArena,
        dtype=np.complex128,
    ):
        if num_qubits < 1:
            raise InvalidArgumentError(
                f"[tensornet-state] A state needs at least one qubit, got {num_qubits}."
            )
        self._num_qubits = num_qubits
        self._scratch_pad = scratch_pad
        self._backend = backend
        self._arena = arena
        self._dtype = np.dtype(dtype)
        self._handle: Optional[StateHandle] = backend.create_state(num_qubits, self._dtype)
        self._tensor_ops: list[GateTensorRecord] = []
        self._owned_tensors: list[TensorHandle] = []
        self._version = 0

    @classmethod
    def create_from_state_vector(
        cls,
        state_vector: np.ndarray,
        scratch_pad: ScratchDeviceMem,
        backend: ContractionBackend,
        arena: TensorArena,
        dtype=np.complex128,
    ) -> TensorNetState:
        """Builds a network whose state is exactly `state_vector`.

        The network holds a single non-unitary operator on all qubits, |v⟩⟨0...0|, so that
        applying it to the initial all-zero state yields the given vector.

        Args:
            state_vector (np.ndarray): A little-endian dense state vector whose length is a
                power of two.
            scratch_pad (ScratchDeviceMem): Workspace for later contractions.
            backend (ContractionBackend): The backend to build the network in.
            arena (TensorArena): The arena to allocate the operator in.
            dtype: The numeric type of the network.

        Returns:
            TensorNetState: The new state.
        """
        vector = np.asarray(state_vector, dtype=dtype).reshape(-1)
        size = vector.size
        if size < 2 or size & (size - 1):
            raise InvalidArgumentError(
                f"[tensornet-state] State vector size must be a power of two, got {size}."
            )
        num_qubits = size.bit_length() - 1
        state = cls(num_qubits, scratch_pad, backend, arena, dtype)
        matrix = np.zeros((size, size), dtype=dtype)
        matrix[:, 0] = vector
        # The first target is the most significant matrix index, so list qubits high to low.
        state._apply_owned(
            tuple(reversed(range(num_qubits))), matrix, (), OperatorKind.NON_UNITARY, False
        )
        return state

    @property
    def num_qubits(self) -> int:
        return self._num_qubits

    @property
    def dtype(self) -> np.dtype:
        return self._dtype

    @property
    def arena(self) -> TensorArena:
        return self._arena

    @property
    def backend(self) -> ContractionBackend:
        return self._backend

    @property
    def scratch_pad(self) -> ScratchDeviceMem:
        return self._scratch_pad

    @property
    def tensor_ops(self) -> tuple[GateTensorRecord, ...]:
        """tuple[GateTensorRecord, ...]: The applied operators in application order."""
        return tuple(self._tensor_ops)

    @property
    def version(self) -> int:
        """int: Incremented every time an operator is appended."""
        return self._version

    @property
    def is_destroyed(self) -> bool:
        return self._handle is None

    def apply_tensor(self, record: GateTensorRecord) -> int:
        """Appends an operator whose data already lives in the arena.

        Args:
            record (GateTensorRecord): The operator to append.

        Returns:
            int: The operator's id within the network.
        """
        handle = self._require_handle()
        out_of_range = [q for q in record.qubits if q >= self._num_qubits]
        if out_of_range:
            raise InvalidArgumentError(
                f"[tensornet-state] Qubits {out_of_range} out of range for a "
                f"{self._num_qubits}-qubit state."
            )
        data = self._arena.get(record.device_data)
        expected = 4 ** len(record.target_qubit_ids)
        if data.size != expected:
            raise InvalidArgumentError(
                f"[tensornet-state] Operator on {len(record.target_qubit_ids)} qubits needs "
                f"{expected} elements, got {data.size}."
            )
        op_id = self._backend.append_operator(
            handle,
            record.target_qubit_ids,
            record.control_qubit_ids,
            data,
            adjoint=record.is_adjoint,
            unitary=record.is_unitary,
        )
        self._tensor_ops.append(record)
        self._version += 1
        return op_id

    def apply_gate(
        self,
        targets: Sequence[int],
        matrix: np.ndarray,
        controls: Sequence[int] = (),
        adjoint: bool = False,
    ) -> GateTensorRecord:
        """Appends a unitary gate given as a matrix.

        Args:
            targets (Sequence[int]): Qubits the gate acts on; the first is the most
                significant index of `matrix`.
            matrix (np.ndarray): The ``2**k`` by ``2**k`` gate matrix.
            controls (Sequence[int]): Control qubits, conditioned on |1⟩. Default: ().
            adjoint (bool): Whether to apply the adjoint of the gate. Default: False.

        Returns:
            GateTensorRecord: The appended record.
        """
        return self._apply_owned(
            tuple(targets), matrix, tuple(controls), OperatorKind.UNITARY, adjoint
        )

    def apply_qubit_projector(self, qubit: int, outcome: int) -> GateTensorRecord:
        """Appends the non-unitary projector |outcome⟩⟨outcome| on `qubit`.

        The resulting state is not renormalized.
        """
        if outcome not in (0, 1):
            raise InvalidArgumentError(f"[tensornet-state] Invalid projector outcome {outcome}.")
        projector = np.zeros((2, 2), dtype=self._dtype)
        projector[outcome, outcome] = 1.0
        return self._apply_owned((qubit,), projector, (), OperatorKind.NON_UNITARY, False)

    def get_state_vector(
        self, projected_modes: Sequence[int] = (), projected_values: Sequence[int] = ()
    ) -> np.ndarray:
        """Contracts the network into a dense little-endian vector.

        If modes are projected, only the amplitudes consistent with the projected values are
        returned, as a vector over the remaining qubits.
        """
        handle = self._require_handle()
        if not projected_modes:
            return self._backend.materialize_state_vector(handle, self._scratch_pad)
        amplitudes, _ = self._backend.compute_accessor(
            handle, projected_modes, projected_values, self._scratch_pad
        )
        return amplitudes

    def compute_norm(self) -> float:
        """float: The squared norm ⟨ψ|ψ⟩ of the state."""
        return self._backend.compute_norm(self._require_handle(), self._scratch_pad)

    def sample(
        self,
        shots: int,
        random_engine: np.random.Generator,
        measured_qubits: Optional[Sequence[int]] = None,
    ) -> Counter:
        """Samples measurement outcomes in the computational basis.

        Args:
            shots (int): The number of samples to draw.
            random_engine (np.random.Generator): Source of randomness.
            measured_qubits (Optional[Sequence[int]]): Qubits to measure; all qubits if None.

        Returns:
            Counter: Counts keyed by bitstring, where character ``i`` is the outcome of
            ``measured_qubits[i]``.
        """
        n = self._num_qubits
        measured = tuple(range(n)) if measured_qubits is None else tuple(measured_qubits)
        valid = measured and len(set(measured)) == len(measured)
        if not valid or any(q < 0 or q >= n for q in measured):
            raise InvalidArgumentError(f"[tensornet-state] Invalid measured qubits {measured}.")
        probabilities = np.abs(self.get_state_vector()) ** 2
        # Axis j of the reshaped vector is qubit n - 1 - j.
        axes = [n - 1 - q for q in measured]
        rest = [axis for axis in range(n) if axis not in axes]
        marginal = probabilities.reshape((2,) * n).transpose(axes + rest)
        marginal = marginal.reshape(2 ** len(measured), -1).sum(axis=1)
        total = marginal.sum()
        if total <= 0:
            raise InvalidArgumentError("[tensornet-state] Cannot sample from a zero-norm state.")
        outcomes = random_engine.choice(marginal.size, size=shots, p=marginal / total)
        return Counter(format(outcome, f"0{len(measured)}b") for outcome in outcomes)

    def destroy(self) -> None:
        """Releases the backend network and the tensors this state allocated."""
        if self._handle is not None:
            self._backend.destroy_state(self._handle)
            self._handle = None
        for tensor in self._owned_tensors:
            self._arena.release(tensor)
        _logger.debug(
            f"Destroyed {self._num_qubits}-qubit network, "
            f"released {len(self._owned_tensors)} tensors"
        )
        self._owned_tensors.clear()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.destroy()

    def _apply_owned(
        self,
        targets: tuple[int, ...],
        matrix: np.ndarray,
        controls: tuple[int, ...],
        kind: OperatorKind,
        adjoint: bool,
    ) -> GateTensorRecord:
        matrix = np.array(matrix, dtype=self._dtype)
        if matrix.size != 4 ** len(targets):
            raise InvalidArgumentError(
                f"[tensornet-state] Operator on {len(targets)} qubits needs "
                f"{4 ** len(targets)} elements, got {matrix.size}."
            )
        tensor = self._arena.allocate(matrix.reshape((2,) * (2 * len(targets))))
        try:
            record = GateTensorRecord(targets, tensor, controls, kind, adjoint)
            self.apply_tensor(record)
        except Exception:
            self._arena.release(tensor)
            raise
        self._owned_tensors.append(tensor)
        return record

    def _require_handle(self) -> StateHandle:
        if self._handle is None:
            raise BackendFailureError("[tensornet-state] The state has been destroyed.")
        return self._handle
