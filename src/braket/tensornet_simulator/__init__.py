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

from braket.tensornet_simulator._version import __version__  # noqa: F401
from braket.tensornet_simulator.contraction_backend import (  # noqa: F401
    ContractionBackend,
    StateHandle,
)
from braket.tensornet_simulator.errors import (  # noqa: F401
    BackendFailureError,
    DimensionMismatchError,
    InvalidArgumentError,
    OutOfRangeError,
    ResourceExhaustedError,
    TensorNetStateError,
    UnsupportedFormatError,
    UnsupportedTypeError,
)
from braket.tensornet_simulator.gate_tensor import (  # noqa: F401
    GateTensorRecord,
    OperatorKind,
    TensorArena,
    TensorHandle,
)
from braket.tensornet_simulator.scratch_memory import ScratchDeviceMem  # noqa: F401
from braket.tensornet_simulator.simulation_state import (  # noqa: F401
    FloatingPointPrecision,
    SimulationState,
    StateDataType,
    StateRepresentation,
    Tensor,
)
from braket.tensornet_simulator.state_vector_simulation_state import (  # noqa: F401
    StateVectorSimulationState,
)
from braket.tensornet_simulator.tensornet_simulation_state import (  # noqa: F401
    MAX_QUBITS_FOR_STATE_CONTRACTION,
    NUM_HYPER_SAMPLES,
    TensorNetSimulationState,
)
from braket.tensornet_simulator.tensornet_state import TensorNetState  # noqa: F401
