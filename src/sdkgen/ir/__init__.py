"""Intermediate representation -- the read-only graph backends shape from.

Typical usage::

    from sdkgen.ir import build_spec

    spec = build_spec(document, GenerationConfig(qa_mode=False))
    for resource in spec.resources():
        for action in resource.sorted_actions:
            ...

Sub-modules:

* :mod:`~sdkgen.ir.traits` -- Attribute Classifier; frozen trait records.
* :mod:`~sdkgen.ir.attribute` -- Recursive attribute nodes.
* :mod:`~sdkgen.ir.enum` -- Enum nodes.
* :mod:`~sdkgen.ir.action` -- Operations and their parameters.
* :mod:`~sdkgen.ir.response` -- Success payloads of actions.
* :mod:`~sdkgen.ir.resource` -- Resources, sub-resources, dependents.
* :mod:`~sdkgen.ir.error` -- Error payload types.
* :mod:`~sdkgen.ir.spec` -- The graph builder.
"""

from sdkgen.ir.action import Action, HttpMethod, Parameter
from sdkgen.ir.attribute import Attribute
from sdkgen.ir.enum import Enum
from sdkgen.ir.error import ErrorResource
from sdkgen.ir.resource import Resource
from sdkgen.ir.response import ListResponse, Response, ResponseField
from sdkgen.ir.spec import Spec, build_spec
from sdkgen.ir.traits import (
    ActionTraits,
    AttributeKind,
    AttributeTraits,
    ResourceTraits,
    classify_action,
    classify_attribute,
    classify_resource,
)

__all__ = [
    "Action",
    "ActionTraits",
    "Attribute",
    "AttributeKind",
    "AttributeTraits",
    "Enum",
    "ErrorResource",
    "HttpMethod",
    "ListResponse",
    "Parameter",
    "Resource",
    "ResourceTraits",
    "Response",
    "ResponseField",
    "Spec",
    "build_spec",
    "classify_action",
    "classify_attribute",
    "classify_resource",
]
