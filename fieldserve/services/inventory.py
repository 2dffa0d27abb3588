"""
Inventory ledger.

Keeps Product.stock_quantity equal to shelf stock minus the quantities of the
live ProductUsage rows that reference it. Every usage mutation goes through
InventoryLedger; sufficiency checks are separate functions so the API layer can
reject a request before anything is written.
"""
from typing import Any, Dict, Optional, Tuple

import structlog

from ..errors import InsufficientStockError, NotFoundError
from ..models.models import Product, ProductUsage
from ..store.memory import MemoryStore


logger = structlog.get_logger(__name__)


def ensure_available(product: Product, quantity: int) -> None:
    """Raise InsufficientStockError when `quantity` more units cannot be drawn from `product`."""
    if product.stock_quantity < quantity:
        logger.warning(
            "insufficient_stock",
            product_id=product.id,
            available=product.stock_quantity,
            requested=quantity,
        )
        raise InsufficientStockError(
            available_quantity=product.stock_quantity,
            requested_quantity=quantity,
            product_id=product.id,
        )


def check_usage_create(store: MemoryStore, product_id: int, quantity: int) -> Product:
    product = store.get_product(product_id)
    if not product:
        raise NotFoundError("Product not found", detail={"product_id": product_id})
    ensure_available(product, quantity)
    return product


def check_usage_update(store: MemoryStore, usage: ProductUsage, patch: Dict[str, Any]) -> Product:
    """
    Validate a usage patch against current stock.

    Same product: only the increase must be available. Different product: the
    full quantity must be available on the new product.
    """
    product_id = patch.get("product_id", usage.product_id)
    quantity = patch.get("quantity", usage.quantity)
    product = store.get_product(product_id)
    if not product:
        raise NotFoundError("Product not found", detail={"product_id": product_id})
    if product_id == usage.product_id:
        increase = quantity - usage.quantity
        if increase > 0:
            ensure_available(product, increase)
    else:
        ensure_available(product, quantity)
    return product


class InventoryLedger:
    def __init__(self, store: MemoryStore):
        self.store = store

    def record_usage(self, task_id: int, product_id: int, quantity: int) -> Tuple[ProductUsage, Optional[Product]]:
        usage = self.store.insert_product_usage({"task_id": task_id, "product_id": product_id, "quantity": quantity})
        # Floors at zero; with check_usage_create in front this never engages.
        product = self.store.shift_stock(product_id, -quantity)
        logger.info("product_usage_recorded", usage_id=usage.id, product_id=product_id, quantity=quantity)
        return usage, product

    def adjust_usage(self, usage_id: int, patch: Dict[str, Any]) -> Optional[Tuple[ProductUsage, Optional[Product]]]:
        usage = self.store.get_product_usage(usage_id)
        if usage is None:
            return None
        new_product_id = patch.get("product_id", usage.product_id)
        new_quantity = patch.get("quantity", usage.quantity)

        if new_product_id == usage.product_id:
            delta = usage.quantity - new_quantity
            if delta:
                self.store.shift_stock(usage.product_id, delta)
        else:
            # Move the draw from the old product to the new one.
            self.store.shift_stock(usage.product_id, usage.quantity)
            self.store.shift_stock(new_product_id, -new_quantity)

        updated = self.store.replace_product_usage(usage_id, patch)
        logger.info(
            "product_usage_adjusted",
            usage_id=usage_id,
            old_product_id=usage.product_id,
            new_product_id=new_product_id,
            old_quantity=usage.quantity,
            new_quantity=new_quantity,
        )
        return updated, self.store.get_product(new_product_id)

    def release_usage(self, usage_id: int) -> bool:
        usage = self.store.get_product_usage(usage_id)
        if usage is None:
            return False
        self.store.shift_stock(usage.product_id, usage.quantity)
        self.store.remove_product_usage(usage_id)
        logger.info("product_usage_released", usage_id=usage_id, product_id=usage.product_id, quantity=usage.quantity)
        return True


def expected_stock(store: MemoryStore, product_id: int, shelf_stock: int) -> int:
    """Stock a product should show given its shelf stock and the live usage rows against it."""
    used = sum(u.quantity for u in store.get_product_usages() if u.product_id == product_id)
    return shelf_stock - used
