"""
Category API endpoints.
"""

from typing import List

from fastapi import APIRouter, Depends

from backend.dependencies import get_storage, get_user_id
from backend.schemas import CategoryCreate, CategoryResponse, Envelope
from src.core.storage import Storage

router = APIRouter(prefix="/api/categories", tags=["categories"])


@router.get("", response_model=Envelope[List[CategoryResponse]])
async def list_categories(
    user_id: int = Depends(get_user_id),
    storage: Storage = Depends(get_storage),
):
    """List a user's categories by name."""
    categories = storage.list_categories(user_id)
    return {"data": [CategoryResponse.model_validate(c) for c in categories]}


@router.post("", response_model=Envelope[CategoryResponse], status_code=201)
async def create_category(body: CategoryCreate, storage: Storage = Depends(get_storage)):
    category = storage.create_category(body.name, body.color, body.user_id)
    return {"data": CategoryResponse.model_validate(category)}
