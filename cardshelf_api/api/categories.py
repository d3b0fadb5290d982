"""Category endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from ..core import CategoryManager
from ..middleware.auth import get_current_owner, get_read_owner
from ..models import (
    Category,
    CategoryCreateRequest,
    CategoryListResponse,
    CategoryUpdateRequest,
    MessageResponse,
)
from ..storage import Database, get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/categories", tags=["categories"])


async def get_category_manager(db: Database = Depends(get_db)) -> CategoryManager:
    """Dependency to get category manager instance."""
    return CategoryManager(db)


@router.get("", response_model=CategoryListResponse)
async def list_categories(
    owner_id: str = Depends(get_read_owner),
    manager: CategoryManager = Depends(get_category_manager),
) -> CategoryListResponse:
    """List the categories of the resolved owner."""
    categories = await manager.list_categories(owner_id)
    return CategoryListResponse(owner_id=owner_id, categories=categories, total=len(categories))


@router.post("", response_model=Category, status_code=201)
async def create_category(
    request: CategoryCreateRequest,
    owner_id: str = Depends(get_current_owner),
    manager: CategoryManager = Depends(get_category_manager),
) -> Category:
    return await manager.create_category(owner_id, request.name)


@router.put("/{category_id}", response_model=Category)
async def rename_category(
    category_id: str,
    request: CategoryUpdateRequest,
    owner_id: str = Depends(get_current_owner),
    manager: CategoryManager = Depends(get_category_manager),
) -> Category:
    category = await manager.rename_category(category_id, owner_id, request.name)
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    return category


@router.delete("/{category_id}", response_model=MessageResponse)
async def delete_category(
    category_id: str,
    owner_id: str = Depends(get_current_owner),
    manager: CategoryManager = Depends(get_category_manager),
) -> MessageResponse:
    """Delete a category and remove it from every card that used it."""
    deleted = await manager.delete_category(category_id, owner_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Category not found")
    return MessageResponse(message="Category deleted")
