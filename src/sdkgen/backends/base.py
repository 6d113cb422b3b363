"""Backend Shaping Contract -- the abstract base every target backend implements.

A backend turns the read-only IR into the nested per-resource structure a
renderer consumes. Subclasses supply the four language-specific operations:

* :meth:`Backend.data_type` -- map a schema to a :class:`TypeDescriptor`;
  total over every schema shape, with :attr:`TypeKind.UNKNOWN` as the
  explicit marker for shapes the language has no mapping for.
* :meth:`Backend.naming_convention` -- raw snake/kebab name to the
  language's identifier casing.
* :meth:`Backend.sort_key` -- ordering key of an IR node (defaults to its
  sort order).
* :meth:`Backend.shape_request_parameters` -- an action's inputs as a flat
  list of :class:`ShapedParameter`.

:meth:`Backend.shape` and :meth:`Backend.shape_resource` are template
methods. Each resource gets its own :class:`ShapingContext`, which carries
the active resource and collects the imports referenced while shaping it.
Nothing is kept on the backend instance between calls, so one backend can
shape several resources concurrently.

Third-party backends register under the ``sdkgen.backends`` entry-point
group; see :mod:`sdkgen.backends.manager`.
"""

from __future__ import annotations

import abc
import enum
import logging
from typing import Any, ClassVar, Optional, Sequence, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from sdkgen.generator.enum_resolver import EnumResolver
from sdkgen.ir.action import Action
from sdkgen.ir.enum import Enum
from sdkgen.ir.resource import Resource
from sdkgen.ir.spec import Spec
from sdkgen.models import GenerationConfig, Schema

logger = logging.getLogger(__name__)

_Node = TypeVar("_Node")


# --- Shaped values ---


class TypeKind(str, enum.Enum):
    """Broad category of a target-language type."""

    PRIMITIVE = "primitive"
    LIST = "list"
    MAP = "map"
    REFERENCE = "reference"
    FILTER = "filter"
    UNKNOWN = "unknown"


class TypeDescriptor(BaseModel):
    """A target-language type expression with its category."""

    model_config = ConfigDict(frozen=True)

    kind: TypeKind
    name: str = Field(description="The type expression as rendered in the target language")

    @property
    def is_unknown(self) -> bool:
        return self.kind == TypeKind.UNKNOWN

    def __str__(self) -> str:
        return self.name


class ParameterKind(str, enum.Enum):
    """How a request parameter is passed in a generated SDK."""

    VALUE = "value"
    ENUM = "enum"
    FILTER = "filter"
    SORT = "sort"
    NESTED_OBJECT = "nested_object"
    INDEXED_LIST = "indexed_list"


class ShapedParameter(BaseModel):
    """One request parameter as a backend renders it.

    ``NESTED_OBJECT`` parameters are addressed as ``parent[child]`` and
    ``INDEXED_LIST`` parameters as ``parent[child][index]``; both carry
    their nested entries in :attr:`fields`.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    kind: ParameterKind
    type: str
    is_required: bool = False
    is_deprecated: bool = False
    sort_order: int = -1
    fields: list[ShapedParameter] = Field(default_factory=list)


ShapedParameter.model_rebuild()


# --- Context ---


class ShapingContext:
    """Call-scoped state for shaping one resource.

    Args:
        resource: The resource being shaped (the *active* resource).
        resources: Every resource shaped in the same run; used to resolve
            references to other resources.
        enums: The enums generated for *resource*.
    """

    def __init__(
        self,
        resource: Resource,
        resources: Sequence[Resource] = (),
        enums: Sequence[Enum] = (),
    ) -> None:
        self.resource = resource
        self.resources = list(resources)
        self.enums = list(enums)
        self.enum_names = frozenset(e.name for e in self.enums)
        self.enum_imports: set[str] = set()
        self.filter_imports: set[str] = set()
        self.model_imports: set[str] = set()

    def __repr__(self) -> str:
        return f"ShapingContext({self.resource.name!r})"

    @property
    def has_dependent_attributes(self) -> bool:
        return self.resource.has_dependent_attributes

    def find_resource(self, name: str) -> Optional[Resource]:
        for resource in self.resources:
            if resource.name == name:
                return resource
        return None

    def add_enum_import(self, module: str) -> None:
        self.enum_imports.add(module)

    def add_filter_import(self, module: str) -> None:
        self.filter_imports.add(module)

    def add_model_import(self, module: str) -> None:
        # A resource never imports itself.
        if module and module != self.resource.id:
            self.model_imports.add(module)

    def snapshot(self) -> dict[str, list[str]]:
        """The imports collected so far, each list sorted."""
        return {
            "enums": sorted(self.enum_imports),
            "filters": sorted(self.filter_imports),
            "models": sorted(self.model_imports),
        }


# --- Backend ---


class Backend(abc.ABC):
    """Abstract base class for target-language backends.

    Subclasses must set :attr:`name` and implement the abstract methods.
    They may list resource ids in :attr:`hidden_overrides`; those resources
    are never shaped, whatever the document says.

    Args:
        config: Generation inputs. The ``hidden_overrides`` of the config
            are added to the backend's own list.
    """

    name: ClassVar[str] = ""
    hidden_overrides: ClassVar[tuple[str, ...]] = ()

    def __init__(self, config: Optional[GenerationConfig] = None) -> None:
        self.config = config or GenerationConfig()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"

    # ------------------------------------------------------------------ #
    # Contract
    # ------------------------------------------------------------------ #

    @abc.abstractmethod
    def data_type(
        self, schema: Schema, name_hint: str, context: Optional[ShapingContext] = None
    ) -> TypeDescriptor:
        """Map *schema* to a target type.

        Must return a descriptor for every schema; shapes without a mapping
        return a descriptor of kind :attr:`TypeKind.UNKNOWN`.
        """

    @abc.abstractmethod
    def naming_convention(self, raw: str) -> str:
        """Convert a raw snake/kebab name to the target's class-name casing."""

    def sort_key(self, node: Any) -> int:
        """Ordering key of a resource, action, or attribute."""
        return int(node.sort_order)

    def sort_nodes(self, nodes: Sequence[_Node]) -> list[_Node]:
        """*nodes* stably sorted by :meth:`sort_key`."""
        return sorted(nodes, key=self.sort_key)

    @abc.abstractmethod
    def shape_request_parameters(
        self, action: Action, context: ShapingContext
    ) -> list[ShapedParameter]:
        """Shape the inputs of *action* into the target's parameter list."""

    @abc.abstractmethod
    def build_resource(self, resource: Resource, context: ShapingContext) -> dict[str, Any]:
        """Shape one resource; imports are added by :meth:`shape_resource`."""

    # ------------------------------------------------------------------ #
    # Template methods
    # ------------------------------------------------------------------ #

    def shape_enum(self, enum: Enum) -> dict[str, Any]:
        return enum.to_dict()

    def resource_enums(
        self, resource: Resource, spec: Spec, resources: Sequence[Resource]
    ) -> list[Enum]:
        """Enums generated for *resource*: schema-less ones, then local ones."""
        return EnumResolver(spec).resource_enums(resource, list(resources))

    def hidden_resource_ids(self) -> frozenset[str]:
        return frozenset(self.hidden_overrides) | frozenset(self.config.hidden_overrides)

    def resources(self, spec: Spec) -> list[Resource]:
        """Resources of *spec* minus hidden overrides, sorted by :meth:`sort_key`."""
        hidden = self.hidden_resource_ids()
        kept: list[Resource] = []
        for resource in spec.resources():
            if resource.id in hidden:
                logger.info("Resource '%s' hidden by override for %s", resource.id, self.name)
                continue
            kept.append(resource)
        return self.sort_nodes(kept)

    def shape_resource(
        self,
        resource: Resource,
        spec: Spec,
        resources: Optional[Sequence[Resource]] = None,
    ) -> dict[str, Any]:
        """Shape one resource inside a fresh :class:`ShapingContext`.

        Args:
            resource: The resource to shape.
            spec: The IR the resource belongs to.
            resources: The resources of the run; defaults to
                :meth:`resources`.

        Returns:
            The shaped structure, with an ``"imports"`` entry holding the
            context's :meth:`~ShapingContext.snapshot`.
        """
        if resources is None:
            resources = self.resources(spec)
        context = ShapingContext(
            resource, resources, self.resource_enums(resource, spec, resources)
        )
        shaped = self.build_resource(resource, context)
        shaped["imports"] = context.snapshot()
        return shaped

    def shape(self, spec: Spec) -> dict[str, Any]:
        """Shape every resource of *spec*.

        Returns:
            ``{"backend", "version", "global_enums", "resources"}``, resources
            in sort order.
        """
        resources = self.resources(spec)
        logger.debug("Shaping %d resources with %s", len(resources), self.name)
        return {
            "backend": self.name,
            "version": {
                "api_version": spec.version.api_version.value,
                "product_catalog_version": spec.version.product_catalog_version.value,
            },
            "global_enums": [self.shape_enum(e) for e in EnumResolver(spec).global_enums()],
            "resources": [self.shape_resource(r, spec, resources) for r in resources],
        }
