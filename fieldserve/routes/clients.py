from typing import List

from fastapi import APIRouter, Depends, Response

from ..db import get_store
from ..errors import NotFoundError
from ..schemas.clients import ClientCreate, ClientResponse, ClientUpdate
from ..store.memory import MemoryStore


router = APIRouter(prefix="/api/clients", tags=["clients"])


@router.get("", response_model=List[ClientResponse])
def list_clients(store: MemoryStore = Depends(get_store)):
    return store.get_clients()


@router.get("/{client_id}", response_model=ClientResponse)
def get_client(client_id: int, store: MemoryStore = Depends(get_store)):
    client = store.get_client(client_id)
    if not client:
        raise NotFoundError("Client not found")
    return client


@router.post("", response_model=ClientResponse, status_code=201)
def create_client(payload: ClientCreate, store: MemoryStore = Depends(get_store)):
    return store.create_client(payload.model_dump())


@router.patch("/{client_id}", response_model=ClientResponse)
def update_client(client_id: int, payload: ClientUpdate, store: MemoryStore = Depends(get_store)):
    client = store.update_client(client_id, payload.to_patch())
    if not client:
        raise NotFoundError("Client not found")
    return client


@router.delete("/{client_id}", status_code=204)
def delete_client(client_id: int, store: MemoryStore = Depends(get_store)):
    # Tasks may keep pointing at a deleted client; their lookups just come back empty.
    if not store.delete_client(client_id):
        raise NotFoundError("Client not found")
    return Response(status_code=204)
