"""Backends -- language-specific shaping of the IR.

* :mod:`~sdkgen.backends.base` -- the :class:`Backend` contract and the
  call-scoped :class:`ShapingContext`.
* :mod:`~sdkgen.backends.manager` -- entry-point discovery.
* :mod:`~sdkgen.backends.python` -- the reference Python SDK backend.
"""

from sdkgen.backends.base import (
    Backend,
    ParameterKind,
    ShapedParameter,
    ShapingContext,
    TypeDescriptor,
    TypeKind,
)
from sdkgen.backends.manager import ENTRY_POINT_GROUP, BackendRegistry
from sdkgen.backends.python import PythonBackend

__all__ = [
    "ENTRY_POINT_GROUP",
    "Backend",
    "BackendRegistry",
    "ParameterKind",
    "PythonBackend",
    "ShapedParameter",
    "ShapingContext",
    "TypeDescriptor",
    "TypeKind",
]
