"""Parameter assembly -- the request-parameter views backends render from.

An action's raw query and body parameters rarely map one-to-one onto SDK
method arguments. :class:`ParameterAssembler` turns them into the views a
backend asks for:

* :meth:`~ParameterAssembler.all_attributes` -- every visible input, for
  backends that emit one flat argument list;
* :meth:`~ParameterAssembler.query` / :meth:`~ParameterAssembler.request_body`
  -- inputs split by where they travel;
* :meth:`~ParameterAssembler.singular_sub_attributes` and
  :meth:`~ParameterAssembler.multi_sub_attributes` -- object and
  composite-array inputs whose nested fields become their own parameter
  types.

The flags mirror the knobs backends need; all views are stably ordered by
sort order.

Example::

    assembler = ParameterAssembler(
        action, include_pagination=True, accept_only_pagination=True
    )
    for attribute in assembler.all_attributes():
        ...
"""

from __future__ import annotations

from typing import Iterable

from sdkgen.ir.action import Action
from sdkgen.ir.attribute import Attribute


def _by_sort_order(attributes: Iterable[Attribute]) -> list[Attribute]:
    return sorted(attributes, key=lambda a: a.sort_order)


def _is_pagination(attribute: Attribute) -> bool:
    return attribute.traits.is_pagination


def _is_composite(attribute: Attribute) -> bool:
    return attribute.traits.is_composite_array_body


class ParameterAssembler:
    """Assemble the request-parameter views of one action.

    Args:
        action: The action whose parameters are assembled.
        flat_multi_attribute: Split composite-array parameters into one
            entry per nested field.
        flat_single_attribute: Order :meth:`all_attributes` by field, with
            object parameters split per nested field.
        include_filter_sub_resource: Keep sub-resource inputs in
            :meth:`all_attributes`.
        include_pagination: Keep pagination inputs (``limit``, ``offset``).
        accept_only_pagination: Keep pagination inputs even when they are
            the only two inputs.
        include_sort_by: Keep the ``sort_by`` input in the query views.
        flat_outer_entries: Order :meth:`all_attributes` by a single level
            of nested sort orders.
    """

    def __init__(
        self,
        action: Action,
        *,
        flat_multi_attribute: bool = True,
        flat_single_attribute: bool = False,
        include_filter_sub_resource: bool = False,
        include_pagination: bool = False,
        accept_only_pagination: bool = False,
        include_sort_by: bool = False,
        flat_outer_entries: bool = False,
    ) -> None:
        self.action = action
        self.flat_multi_attribute = flat_multi_attribute
        self.flat_single_attribute = flat_single_attribute
        self.include_filter_sub_resource = include_filter_sub_resource
        self.include_pagination = include_pagination
        self.accept_only_pagination = accept_only_pagination
        self.include_sort_by = include_sort_by
        self.flat_outer_entries = flat_outer_entries

    # ------------------------------------------------------------------ #
    # Raw inputs
    # ------------------------------------------------------------------ #

    def _body(self) -> list[Attribute]:
        return [
            p.attribute for p in self.action.request_body_parameters if p.attribute.is_visible
        ]

    def _query(self) -> list[Attribute]:
        return [p.attribute for p in self.action.query_parameters if p.attribute.is_visible]

    # ------------------------------------------------------------------ #
    # Views
    # ------------------------------------------------------------------ #

    def all_attributes(self) -> list[Attribute]:
        """Visible body inputs followed by visible query inputs."""
        attributes = self._body() + self._query()
        if not self.include_filter_sub_resource:
            attributes = [
                a for a in attributes if not a.traits.is_sub_resource or a.traits.is_filter
            ]
        if not self.include_pagination or (
            not self.accept_only_pagination and len(attributes) == 2
        ):
            attributes = [a for a in attributes if not _is_pagination(a)]
        if self.flat_outer_entries:
            return self._single_level_sort(attributes)
        if self.flat_single_attribute:
            return self._generic_sort(attributes)
        return _by_sort_order(attributes)

    def request_body(self) -> list[Attribute]:
        """Body inputs that are neither composite arrays nor filters."""
        return _by_sort_order(
            a for a in self._body() if not _is_composite(a) and not a.traits.is_filter
        )

    def query(self) -> list[Attribute]:
        """Query inputs plus filter inputs sent in the body."""
        attributes = self._query()
        if self.include_sort_by:
            attributes += [a for a in self._query() if a.traits.is_sort]
        attributes += [a for a in self._body() if a.traits.is_filter]
        if not self.include_pagination or len(attributes) == 2:
            attributes = [a for a in attributes if not _is_pagination(a)]
        return _by_sort_order(attributes)

    def singular_sub_attributes(self) -> list[Attribute]:
        """Object inputs that hold at least one sub-resource field."""
        candidates = [
            a
            for a in self.query()
            if a.schema.type == "object"
            and a.schema.properties is not None
            and a.schema.items is None
            and not _is_composite(a)
            and (a.traits.is_filter or a.traits.is_sub_resource)
        ]
        for attribute in self.request_body():
            if self.include_filter_sub_resource:
                if attribute.traits.is_sub_resource or attribute.has_sub_resource_attribute:
                    candidates.append(attribute)
            elif not attribute.traits.is_filter:
                candidates.append(attribute)
        candidates = _by_sort_order(
            a for a in candidates if self.include_sort_by or not a.traits.is_sort
        )
        return [a for a in candidates if a.has_sub_resource_attribute]

    def multi_sub_attributes(self) -> list[Attribute]:
        """Composite-array inputs, flattened per nested field when configured."""
        inputs = self._query() + self._body()
        attributes = [a for a in inputs if _is_composite(a)]
        if self.include_sort_by:
            attributes += [a for a in inputs if a.traits.is_sort and a.attributes]
        if self.flat_multi_attribute:
            attributes = self._flatten(attributes)
        return _by_sort_order(attributes)

    def consolidated_sub_params(self) -> list[Attribute]:
        """Inputs holding sub-resources, ordered by their nested fields' sort orders."""
        attributes = [
            a
            for a in self.all_attributes()
            if a.traits.is_sub_resource or a.has_sub_resource_attribute
        ]
        ordered: list[Attribute] = []
        for name in self._multi_attribute_order(attributes):
            ordered.extend(a for a in attributes if a.name == name)
        return ordered

    # ------------------------------------------------------------------ #
    # Ordering helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _nested_orders(attributes: Iterable[Attribute]) -> list[int]:
        return sorted({sub.sort_order for a in attributes for sub in a.attributes})

    def _flatten(self, attributes: list[Attribute]) -> list[Attribute]:
        flat: list[Attribute] = []
        for order in self._nested_orders(attributes):
            for attribute in attributes:
                for sub in attribute.attributes:
                    if sub.sort_order == order:
                        flat.append(attribute.with_single_property(sub))
        return flat

    def _multi_attribute_order(self, attributes: list[Attribute]) -> list[str]:
        names: list[str] = []
        for order in self._nested_orders(attributes):
            for attribute in attributes:
                if attribute.name in names:
                    continue
                if any(sub.sort_order == order for sub in attribute.attributes):
                    names.append(attribute.name)
        return names

    def _single_level_sort(self, attributes: list[Attribute]) -> list[Attribute]:
        orders = {
            sub.sort_order
            for a in attributes
            if not a.traits.is_filter and not a.traits.is_sort
            for sub in a.attributes
        }
        orders.update(a.sort_order for a in attributes)

        result: list[Attribute] = []
        for order in sorted(orders):
            for attribute in attributes:
                traits = attribute.traits
                if (not attribute.attributes or traits.is_sort or traits.is_filter) and (
                    attribute.sort_order == order
                ):
                    if all(a.name != attribute.name for a in result):
                        result.append(attribute)
                    continue
                if traits.is_filter or traits.is_pagination or traits.is_sort:
                    continue
                for sub in attribute.attributes:
                    if sub.sort_order == order:
                        result.append(attribute.with_single_property(sub))
                        break
        return result

    def _generic_sort(self, attributes: list[Attribute]) -> list[Attribute]:
        result: list[Attribute] = []
        top_orders = sorted({a.sort_order for a in attributes if a.sort_order > -1})
        for order in top_orders:
            for attribute in attributes:
                traits = attribute.traits
                if attribute.attributes and not traits.is_filter and not traits.is_sort:
                    continue
                if attribute.sort_order == order:
                    result.append(attribute)

        orders = set(top_orders)
        orders.update(
            sub.sort_order
            for a in attributes
            if a.sort_order == -1
            for sub in a.attributes
        )
        for order in sorted(orders):
            for attribute in attributes:
                for sub in attribute.attributes:
                    if sub.sort_order == order:
                        result.append(attribute.with_single_property(sub))
        return result
