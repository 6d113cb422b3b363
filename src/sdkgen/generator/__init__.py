"""Generation helpers shared by every backend.

Sub-modules:

* :mod:`~sdkgen.generator.inflector` -- English singular/plural rules.
* :mod:`~sdkgen.generator.naming` -- Case conversion.
* :mod:`~sdkgen.generator.enum_resolver` -- Global, local, and
  schema-less enum sets.
* :mod:`~sdkgen.generator.params` -- Request-parameter views of an action.

The last two depend on :mod:`sdkgen.ir` and are imported from their own
modules.
"""

from sdkgen.generator.inflector import pluralize, singularize
from sdkgen.generator.naming import (
    enum_member_name,
    to_camel_case,
    to_lower_camel_case,
    to_pascal_case,
    to_snake_case,
    upper_camel_from_snake,
)

__all__ = [
    "enum_member_name",
    "pluralize",
    "singularize",
    "to_camel_case",
    "to_lower_camel_case",
    "to_pascal_case",
    "to_snake_case",
    "upper_camel_from_snake",
]
