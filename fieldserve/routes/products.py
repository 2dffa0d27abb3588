from typing import List

from fastapi import APIRouter, Depends, Response

from ..db import get_store
from ..errors import ConflictError, NotFoundError
from ..schemas.products import ProductCreate, ProductResponse, ProductUpdate
from ..store.memory import MemoryStore


router = APIRouter(prefix="/api/products", tags=["products"])


@router.get("", response_model=List[ProductResponse])
def list_products(low_stock: bool = False, store: MemoryStore = Depends(get_store)):
    if low_stock:
        return store.get_low_stock_products()
    return store.get_products()


@router.get("/{product_id}", response_model=ProductResponse)
def get_product(product_id: int, store: MemoryStore = Depends(get_store)):
    product = store.get_product(product_id)
    if not product:
        raise NotFoundError("Product not found")
    return product


@router.post("", response_model=ProductResponse, status_code=201)
def create_product(payload: ProductCreate, store: MemoryStore = Depends(get_store)):
    if store.get_product_by_sku(payload.sku):
        raise ConflictError("SKU already exists", detail={"sku": payload.sku})
    return store.create_product(payload.model_dump())


@router.patch("/{product_id}", response_model=ProductResponse)
def update_product(product_id: int, payload: ProductUpdate, store: MemoryStore = Depends(get_store)):
    patch = payload.to_patch()
    if "sku" in patch:
        other = store.get_product_by_sku(patch["sku"])
        if other and other.id != product_id:
            raise ConflictError("SKU already exists", detail={"sku": patch["sku"]})
    product = store.update_product(product_id, patch)
    if not product:
        raise NotFoundError("Product not found")
    return product


@router.delete("/{product_id}", status_code=204)
def delete_product(product_id: int, store: MemoryStore = Depends(get_store)):
    if not store.delete_product(product_id):
        raise NotFoundError("Product not found")
    return Response(status_code=204)
