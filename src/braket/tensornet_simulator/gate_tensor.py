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
Gate tensor records and the arena that owns their data.

A `GateTensorRecord` describes one operator applied to a tensor network: the qubits it acts
on, the qubits controlling it and a `TensorHandle` to its data. Records never own data; the
data lives in a `TensorArena`, which plays the role of the circuit builder's device memory.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Callable, Optional

import numpy as np

from braket.tensornet_simulator.errors import InvalidArgumentError


@dataclass(frozen=True)
class TensorHandle:
    """Non-owning reference to a tensor allocated in a `TensorArena`."""

    index: int


class TensorArena:
    """
    Owner of the tensor data referenced by gate tensor records.

    Allocations stay alive until explicitly released, independently of the records and
    networks that borrow them.
    """

    def __init__(self):
        self._tensors: dict[int, np.ndarray] = {}
        self._next_index = 0

    def allocate(self, data: np.ndarray) -> TensorHandle:
        """Takes ownership of `data` and returns a handle to it."""
        handle = TensorHandle(self._next_index)
        self._tensors[handle.index] = data
        self._next_index += 1
        return handle

    def get(self, handle: TensorHandle) -> np.ndarray:
        try:
            return self._tensors[handle.index]
        except KeyError:
            raise InvalidArgumentError(
                f"[tensor-arena] Tensor handle {handle.index} does not refer to a live allocation."
            ) from None

    def release(self, handle: TensorHandle) -> None:
        self._tensors.pop(handle.index, None)

    def __contains__(self, handle: TensorHandle) -> bool:
        return handle.index in self._tensors

    def __len__(self) -> int:
        return len(self._tensors)


class OperatorKind(Enum):
    """Whether an operator is known to be unitary.

    Non-unitary operators (e.g. projectors) need their data transposed, not just their
    adjoint flag flipped, when moved to the bra side of an overlap.
    """

    UNITARY = "unitary"
    NON_UNITARY = "non_unitary"


@dataclass(frozen=True)
class GateTensorRecord:
    """
    An operator applied to a tensor network.

    Attributes:
        target_qubit_ids: Qubits the operator acts on; the tensor has 2 * len(targets) legs.
        device_data: Handle to the operator's tensor data, owned by a `TensorArena`.
        control_qubit_ids: Qubits controlling the operator; empty means uncontrolled.
        kind: Whether the operator is unitary.
        is_adjoint: Whether the operator is applied in adjoint form.
    """

    target_qubit_ids: tuple[int, ...]
    device_data: TensorHandle
    control_qubit_ids: tuple[int, ...] = field(default=())
    kind: OperatorKind = OperatorKind.UNITARY
    is_adjoint: bool = False

    def __post_init__(self):
        targets = tuple(int(q) for q in self.target_qubit_ids)
        controls = tuple(int(q) for q in self.control_qubit_ids)
        if not targets:
            raise InvalidArgumentError("[gate-tensor] An operator needs at least one target qubit.")
        if len(set(targets)) != len(targets) or len(set(controls)) != len(controls):
            raise InvalidArgumentError(
                f"[gate-tensor] Duplicate qubits in targets {targets} or controls {controls}."
            )
        if set(targets) & set(controls):
            raise InvalidArgumentError(
                f"[gate-tensor] Target qubits {targets} and control qubits {controls} overlap."
            )
        if any(q < 0 for q in targets + controls):
            raise InvalidArgumentError("[gate-tensor] Qubit ids must be non-negative.")
        object.__setattr__(self, "target_qubit_ids", targets)
        object.__setattr__(self, "control_qubit_ids", controls)

    @property
    def is_unitary(self) -> bool:
        return self.kind is OperatorKind.UNITARY

    @property
    def qubits(self) -> tuple[int, ...]:
        """All qubits touched by the operator, controls first."""
        return self.control_qubit_ids + self.target_qubit_ids

    @property
    def extents(self) -> tuple[int, ...]:
        return (2,) * (2 * len(self.target_qubit_ids))

    def adjoint(self) -> GateTensorRecord:
        return replace(self, is_adjoint=not self.is_adjoint)

    def with_data(self, handle: TensorHandle) -> GateTensorRecord:
        return replace(self, device_data=handle)


def _conjugate_unitary(
    record: GateTensorRecord, arena: TensorArena
) -> tuple[GateTensorRecord, Optional[TensorHandle]]:
    return record.adjoint(), None


def _conjugate_non_unitary(
    record: GateTensorRecord, arena: TensorArena
) -> tuple[GateTensorRecord, Optional[TensorHandle]]:
    data = arena.get(record.device_data)
    dim = 2 ** len(record.target_qubit_ids)
    # Swap the output and input legs; the backend only conjugates non-unitary data.
    transposed = np.ascontiguousarray(data.reshape(dim, dim).T).reshape(data.shape)
    handle = arena.allocate(transposed)
    return record.adjoint().with_data(handle), handle


_BRA_SIDE_CONJUGATION: MappingProxyType[
    OperatorKind,
    Callable[[GateTensorRecord, TensorArena], tuple[GateTensorRecord, Optional[TensorHandle]]],
] = MappingProxyType(
    {
        OperatorKind.UNITARY: _conjugate_unitary,
        OperatorKind.NON_UNITARY: _conjugate_non_unitary,
    }
)


def conjugate_for_bra(
    record: GateTensorRecord, arena: TensorArena
) -> tuple[GateTensorRecord, Optional[TensorHandle]]:
    """Returns the record to apply on the bra side of an overlap.

    The adjoint flag is always flipped. Non-unitary operators additionally get a transposed
    copy of their data, allocated in `arena`; its handle is returned so the caller can release
    it. The original record and its data are left untouched.

    Args:
        record (GateTensorRecord): A ket-side operator.
        arena (TensorArena): The arena owning the operator's data.

    Returns:
        tuple[GateTensorRecord, Optional[TensorHandle]]: The bra-side record and the handle
        of any temporary allocation made for it.
    """
    return _BRA_SIDE_CONJUGATION[record.kind](record, arena)
