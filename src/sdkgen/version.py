"""Version Resolver -- API and product-catalog version of a document.

The document ``info`` block may carry ``x-cb-api-version`` and
``x-cb-product-catalog-version``. :func:`resolve_version` turns them into a
:class:`Version`, which the graph builder uses to keep only resources whose
catalog tag matches (see :meth:`~sdkgen.ir.spec.Spec.pc_aware_resources`).
Resolution never fails: missing or unrecognised values fall back to the
``{V2, PC2}`` default.
"""

from __future__ import annotations

import enum
import logging
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict

from sdkgen.exceptions import ExtensionError
from sdkgen.extensions import InfoExtensions, decode

logger = logging.getLogger(__name__)


class ApiVersion(int, enum.Enum):
    """Major API version."""

    V1 = 1
    V2 = 2


class ProductCatalogVersion(int, enum.Enum):
    """Product catalog generation a resource belongs to."""

    PC1 = 1
    PC2 = 2

    @classmethod
    def from_tag(cls, value: Optional[int]) -> Optional[ProductCatalogVersion]:
        """Map a resource's catalog tag to a version; ``None`` when untagged.

        Any tag other than ``1`` means the current catalog.
        """
        if value is None:
            return None
        return cls.PC1 if value == cls.PC1.value else cls.PC2


class Version(BaseModel):
    """Resolved ``{api_version, product_catalog_version}`` pair."""

    model_config = ConfigDict(frozen=True)

    api_version: ApiVersion = ApiVersion.V2
    product_catalog_version: ProductCatalogVersion = ProductCatalogVersion.PC2


def resolve_version(info: Optional[Mapping[str, Any]], strict: bool = False) -> Version:
    """Derive the document version from its ``info`` block.

    Rules:
        * default ``{V2, PC2}``;
        * ``x-cb-api-version == 1`` gives ``{V1, PC1}``;
        * ``x-cb-api-version == 2`` with ``x-cb-product-catalog-version == 1``
          gives ``{V2, PC1}``.

    Args:
        info: The raw ``info`` object, or ``None`` when absent.
        strict: Passed through to :func:`~sdkgen.extensions.decode`.

    Returns:
        The resolved :class:`Version`.
    """
    if not info:
        return Version()

    try:
        extensions = decode(info, InfoExtensions, "#/info", strict=strict)
    except ExtensionError:
        if strict:
            raise
        logger.warning("Unrecognised version tags in #/info; using the default version")
        return Version()
    if extensions.api_version == ApiVersion.V1.value:
        return Version(
            api_version=ApiVersion.V1,
            product_catalog_version=ProductCatalogVersion.PC1,
        )
    if (
        extensions.api_version == ApiVersion.V2.value
        and extensions.product_catalog_version == ProductCatalogVersion.PC1.value
    ):
        return Version(
            api_version=ApiVersion.V2,
            product_catalog_version=ProductCatalogVersion.PC1,
        )
    return Version()
