from typing import List

from fastapi import APIRouter, Depends

from ..db import get_store
from ..errors import ConflictError, NotFoundError
from ..schemas.users import UserCreate, UserResponse
from ..store.memory import MemoryStore


router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("", response_model=List[UserResponse])
def list_users(store: MemoryStore = Depends(get_store)):
    return store.get_users()


@router.get("/{user_id}", response_model=UserResponse)
def get_user(user_id: int, store: MemoryStore = Depends(get_store)):
    user = store.get_user(user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


@router.post("", response_model=UserResponse, status_code=201)
def create_user(payload: UserCreate, store: MemoryStore = Depends(get_store)):
    if store.get_user_by_username(payload.username):
        raise ConflictError("Username already taken", detail={"username": payload.username})
    return store.create_user(payload.model_dump())
