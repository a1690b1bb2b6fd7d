"""
Hand-off point for products that passed validation.

Storing products in the catalog is not part of this service; the default
sink only logs. A sink raises (preferably AcceptanceError) to reject a
product, and the importer quarantines it with a "save" error.
"""

from abc import ABC, abstractmethod
from typing import Any, Mapping
from schemas.product import ProductItem
import logging

logger = logging.getLogger(__name__)


class ProductSink(ABC):

    @abstractmethod
    async def accept(self, product: ProductItem, raw: Mapping[str, Any]) -> None:
        pass


class LoggingProductSink(ProductSink):

    async def accept(self, product: ProductItem, raw: Mapping[str, Any]) -> None:
        logger.debug(f"Valid product processed external_id={product.id} sku={product.sku}")
