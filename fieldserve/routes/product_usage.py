from typing import List

from fastapi import APIRouter, Depends, Response

from ..db import get_store
from ..errors import NotFoundError
from ..schemas.products import ProductUsageCreate, ProductUsageResponse, ProductUsageUpdate
from ..services.inventory import InventoryLedger, check_usage_create, check_usage_update
from ..services.task_service import resolve_product_usage, usage_to_dict
from ..store.memory import MemoryStore


router = APIRouter(prefix="/api", tags=["product-usage"])


@router.get("/tasks/{task_id}/products", response_model=List[ProductUsageResponse])
def list_task_product_usage(task_id: int, store: MemoryStore = Depends(get_store)):
    return resolve_product_usage(store, task_id)


@router.post("/product-usage", response_model=ProductUsageResponse, status_code=201)
def create_product_usage(payload: ProductUsageCreate, store: MemoryStore = Depends(get_store)):
    if not store.get_task(payload.task_id):
        raise NotFoundError("Task not found")
    check_usage_create(store, payload.product_id, payload.quantity)
    usage, product = InventoryLedger(store).record_usage(payload.task_id, payload.product_id, payload.quantity)
    return usage_to_dict(usage, product)


@router.patch("/product-usage/{usage_id}", response_model=ProductUsageResponse)
def update_product_usage(usage_id: int, payload: ProductUsageUpdate, store: MemoryStore = Depends(get_store)):
    usage = store.get_product_usage(usage_id)
    if not usage:
        raise NotFoundError("Product usage not found")
    patch = payload.to_patch()
    if "task_id" in patch and not store.get_task(patch["task_id"]):
        raise NotFoundError("Task not found")
    check_usage_update(store, usage, patch)
    updated, product = InventoryLedger(store).adjust_usage(usage_id, patch)
    return usage_to_dict(updated, product)


@router.delete("/product-usage/{usage_id}", status_code=204)
def delete_product_usage(usage_id: int, store: MemoryStore = Depends(get_store)):
    if not InventoryLedger(store).release_usage(usage_id):
        raise NotFoundError("Product usage not found")
    return Response(status_code=204)
