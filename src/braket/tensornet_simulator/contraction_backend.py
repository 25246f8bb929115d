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
Contraction backend for quantum circuit tensor networks.

The backend keeps one network per `StateHandle`: every qubit starts in the |0⟩ state and
operators are appended in application order. Queries build a single einsum expression for
the network, let opt_einsum search a contraction path, check the path's workspace against
the scratch pool and contract.

Conventions:
- Operator tensors are indexed output legs first, then input legs (``ABC...abc...``); the
  first target is the most significant index of the operator's matrix.
- Control qubits are conditioned on |1⟩: the operator is the identity on every other
  control block.
- The adjoint of a unitary operator is its conjugate transpose. For non-unitary operators
  the adjoint flag only conjugates the elements and keeps the leg pairing; callers that need
  the conjugate transpose must transpose the data themselves.
- State vectors are little-endian: qubit 0 is the least significant bit of the index.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import Optional, Sequence

import numpy as np
import opt_einsum

from braket.tensornet_simulator.errors import BackendFailureError, InvalidArgumentError
from braket.tensornet_simulator.scratch_memory import ScratchDeviceMem

_logger = getLogger(__name__)

_BASIS_VECTORS = (
    np.array([1.0, 0.0], dtype=np.complex128),
    np.array([0.0, 1.0], dtype=np.complex128),
)


@dataclass(frozen=True)
class StateHandle:
    """Opaque reference to a network owned by a `ContractionBackend`."""

    index: int


@dataclass
class _AppliedOperator:
    targets: tuple[int, ...]
    controls: tuple[int, ...]
    tensor: np.ndarray
    adjoint: bool
    unitary: bool

    def matrix(self) -> np.ndarray:
        """The operator's matrix on controls + targets, with adjoint and controls resolved."""
        dim = 2 ** len(self.targets)
        matrix = self.tensor.reshape(dim, dim)
        if self.adjoint:
            matrix = matrix.conj().T if self.unitary else matrix.conj()
        if self.controls:
            full = np.eye(2 ** (len(self.controls) + len(self.targets)), dtype=matrix.dtype)
            full[-dim:, -dim:] = matrix
            matrix = full
        return matrix


@dataclass
class _Network:
    num_qubits: int
    dtype: np.dtype
    operators: list[_AppliedOperator] = field(default_factory=list)


class ContractionBackend:
    """
    Builds, contracts and destroys tensor networks on behalf of tensor network states.

    The backend is not thread-safe; give each concurrent task its own backend or serialize
    access externally.
    """

    def __init__(self):
        self._networks: dict[int, _Network] = {}
        self._next_index = 0

    @property
    def live_states(self) -> int:
        """int: The number of networks created and not yet destroyed."""
        return len(self._networks)

    def create_state(self, num_qubits: int, dtype=np.complex128) -> StateHandle:
        if num_qubits < 1:
            raise InvalidArgumentError(
                f"[contraction-backend] A network needs at least one qubit, got {num_qubits}."
            )
        handle = StateHandle(self._next_index)
        self._networks[handle.index] = _Network(num_qubits, np.dtype(dtype))
        self._next_index += 1
        return handle

    def destroy_state(self, handle: StateHandle) -> None:
        self._networks.pop(handle.index, None)

    def append_operator(
        self,
        handle: StateHandle,
        targets: Sequence[int],
        controls: Sequence[int],
        tensor: np.ndarray,
        adjoint: bool = False,
        unitary: bool = True,
    ) -> int:
        """Appends an operator to the network and returns its id within the network.

        Args:
            handle (StateHandle): The network to extend.
            targets (Sequence[int]): Qubits the operator acts on.
            controls (Sequence[int]): Qubits controlling the operator, conditioned on |1⟩.
            tensor (np.ndarray): Operator data with ``4 ** len(targets)`` elements. The array
                is referenced, not copied.
            adjoint (bool): Whether to apply the operator in adjoint form.
            unitary (bool): Whether the operator is unitary.

        Returns:
            int: The operator id, i.e. its position in the network.
        """
        network = self._network(handle)
        qubits = tuple(controls) + tuple(targets)
        if any(q < 0 or q >= network.num_qubits for q in qubits):
            raise InvalidArgumentError(
                f"[contraction-backend] Operator qubits {qubits} out of range for a "
                f"{network.num_qubits}-qubit network."
            )
        if tensor.size != 4 ** len(targets):
            raise InvalidArgumentError(
                f"[contraction-backend] Operator on {len(targets)} qubits needs "
                f"{4 ** len(targets)} elements, got {tensor.size}."
            )
        network.operators.append(
            _AppliedOperator(tuple(targets), tuple(controls), tensor, bool(adjoint), bool(unitary))
        )
        return len(network.operators) - 1

    def num_operators(self, handle: StateHandle) -> int:
        return len(self._network(handle).operators)

    def materialize_state_vector(
        self, handle: StateHandle, scratch: ScratchDeviceMem
    ) -> np.ndarray:
        """Contracts the whole network into a dense little-endian state vector."""
        amplitudes, _ = self.compute_accessor(handle, (), (), scratch)
        return amplitudes

    def compute_accessor(
        self,
        handle: StateHandle,
        pinned_modes: Sequence[int],
        pinned_values: Sequence[int],
        scratch: ScratchDeviceMem,
        hyper_samples: Optional[int] = None,
        return_norm: bool = False,
    ) -> tuple[np.ndarray, Optional[float]]:
        """Computes the amplitudes of the state with some qubits pinned to fixed values.

        Args:
            handle (StateHandle): The network to contract.
            pinned_modes (Sequence[int]): Qubits whose value is fixed.
            pinned_values (Sequence[int]): The value, 0 or 1, of each pinned qubit.
            scratch (ScratchDeviceMem): Workspace for the contraction.
            hyper_samples (Optional[int]): Number of randomized path searches to run. If None,
                opt_einsum picks a strategy based on the network size.
            return_norm (bool): Whether to also compute the squared norm of the state.

        Returns:
            tuple[np.ndarray, Optional[float]]: The amplitudes of the unpinned qubits as a
            little-endian vector (a single element if every qubit is pinned), and the squared
            norm of the state if requested.
        """
        network = self._network(handle)
        pinned = self._validate_pins(network, pinned_modes, pinned_values)
        operands, output = _build_expression(network, pinned)
        amplitudes = _contract(operands, output, scratch, hyper_samples).reshape(-1)
        norm = self.compute_norm(handle, scratch, hyper_samples) if return_norm else None
        return amplitudes, norm

    def compute_norm(
        self, handle: StateHandle, scratch: ScratchDeviceMem, hyper_samples: Optional[int] = None
    ) -> float:
        """Computes ⟨ψ|ψ⟩ by closing the network with its conjugate."""
        ket, ket_output = _build_expression(self._network(handle), {})
        closed = _contract(_with_conjugate(ket, ket_output), (), scratch, hyper_samples)
        return float(closed.real)

    def _network(self, handle: StateHandle) -> _Network:
        try:
            return self._networks[handle.index]
        except KeyError:
            raise BackendFailureError(
                f"[contraction-backend] Network {handle.index} has been destroyed."
            ) from None

    @staticmethod
    def _validate_pins(
        network: _Network, pinned_modes: Sequence[int], pinned_values: Sequence[int]
    ) -> dict[int, int]:
        if len(pinned_modes) != len(pinned_values):
            raise InvalidArgumentError(
                f"[contraction-backend] {len(pinned_modes)} pinned modes but "
                f"{len(pinned_values)} pinned values."
            )
        pinned = {}
        for mode, value in zip(pinned_modes, pinned_values):
            mode, value = int(mode), int(value)
            if mode < 0 or mode >= network.num_qubits or mode in pinned:
                raise InvalidArgumentError(f"[contraction-backend] Invalid pinned mode {mode}.")
            if value not in (0, 1):
                raise InvalidArgumentError(f"[contraction-backend] Invalid pinned value {value}.")
            pinned[mode] = value
        return pinned


def _build_expression(
    network: _Network, pinned: dict[int, int]
) -> tuple[list[tuple[np.ndarray, tuple[int, ...]]], tuple[int, ...]]:
    """Lays the network out as einsum operands with integer indices.

    Index ``q`` is the input leg of qubit ``q``; every operator leg gets a fresh index.
    """
    current = list(range(network.num_qubits))
    next_index = network.num_qubits
    operands = [(_BASIS_VECTORS[0].astype(network.dtype), (q,)) for q in current]

    for op in network.operators:
        qubits = op.controls + op.targets
        outputs = tuple(range(next_index, next_index + len(qubits)))
        inputs = tuple(current[q] for q in qubits)
        tensor = op.matrix().astype(network.dtype, copy=False).reshape([2] * (2 * len(qubits)))
        operands.append((tensor, outputs + inputs))
        for q, index in zip(qubits, outputs):
            current[q] = index
        next_index += len(qubits)

    for q, value in pinned.items():
        operands.append((_BASIS_VECTORS[value].astype(network.dtype), (current[q],)))

    output = tuple(current[q] for q in reversed(range(network.num_qubits)) if q not in pinned)
    return operands, output


def _with_conjugate(
    operands: list[tuple[np.ndarray, tuple[int, ...]]], output: tuple[int, ...]
) -> list[tuple[np.ndarray, tuple[int, ...]]]:
    """Closes a ket network with its conjugate over the open indices, giving ⟨ψ|ψ⟩."""
    offset = 1 + max(i for _, indices in operands for i in indices)
    open_indices = set(output)
    mirrored = [
        (tensor.conj(), tuple(i if i in open_indices else i + offset for i in indices))
        for tensor, indices in operands
    ]
    return operands + mirrored


def _contract(
    operands: list[tuple[np.ndarray, tuple[int, ...]]],
    output: tuple[int, ...],
    scratch: ScratchDeviceMem,
    hyper_samples: Optional[int],
) -> np.ndarray:
    arrays = [tensor for tensor, _ in operands]
    subscripts = (
        ",".join("".join(opt_einsum.get_symbol(i) for i in indices) for _, indices in operands)
        + "->"
        + "".join(opt_einsum.get_symbol(i) for i in output)
    )
    # Random trials are seeded by their run number, so the chosen path is reproducible.
    optimize = (
        "auto" if hyper_samples is None else opt_einsum.RandomGreedy(max_repeats=hyper_samples)
    )
    try:
        path, info = opt_einsum.contract_path(subscripts, *arrays, optimize=optimize)
    except ValueError as e:
        raise BackendFailureError(f"[contraction-backend] Path search failed: {e}") from e

    dtype = np.result_type(*arrays)
    out_elements = 2 ** len(output)
    workspace = max(int(info.largest_intermediate), out_elements) * dtype.itemsize
    _logger.debug(
        f"Contraction of {len(arrays)} tensors: cost {info.opt_cost}, workspace {workspace} bytes"
    )
    scratch.check_workspace(workspace)

    with scratch.acquire():
        try:
            if not output:
                return np.asarray(opt_einsum.contract(subscripts, *arrays, optimize=path))
            # Non-scalar results are written into the pool, then copied out before release.
            out = scratch.buffer[: out_elements * dtype.itemsize].view(dtype)
            out = out.reshape((2,) * len(output))
            opt_einsum.contract(subscripts, *arrays, optimize=path, out=out)
            return out.copy()
        except (ValueError, FloatingPointError, np.linalg.LinAlgError) as e:
            raise BackendFailureError(f"[contraction-backend] Contraction failed: {e}") from e
