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

"""Exceptions raised by the tensor network simulation state.

Every error derives from `TensorNetStateError` and from the built-in exception closest in
meaning, so callers that already catch e.g. `ValueError` keep working.
"""


class TensorNetStateError(Exception):
    """Base class for all tensor network simulation state errors."""


class InvalidArgumentError(TensorNetStateError, ValueError):
    """A query was malformed, e.g. a basis state of the wrong length or with non-binary bits."""


class OutOfRangeError(TensorNetStateError, IndexError):
    """An index referred past the end of the network's operator list."""


class UnsupportedTypeError(TensorNetStateError, TypeError):
    """An operation was attempted between incompatible state representations."""


class UnsupportedFormatError(TensorNetStateError, ValueError):
    """State data was supplied in a format that cannot be turned into a tensor network."""


class DimensionMismatchError(TensorNetStateError, ValueError):
    """A host buffer does not have the size of the state vector."""


class ResourceExhaustedError(TensorNetStateError, MemoryError):
    """The contraction workspace does not fit into the scratch memory pool."""


class BackendFailureError(TensorNetStateError, RuntimeError):
    """The contraction backend failed; the current call cannot be completed."""
