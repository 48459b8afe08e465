"""
Song categories

app/api/v1/categories.py
"""
from typing import List
from fastapi import APIRouter, Depends, status
from app.api.deps import get_catalog, get_current_admin
from app.models.category import CategoryCreate, CategoryResponse
from app.services.catalog import SongCatalog

router = APIRouter()

@router.get("/", response_model=List[CategoryResponse])
async def get_categories(
    catalog: SongCatalog = Depends(get_catalog),
    current_user: str = Depends(get_current_admin)
):
    """Get all categories with stringified IDs"""
    return [CategoryResponse(**doc) for doc in await catalog.list_categories()]

@router.post("/", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(
    category: CategoryCreate,
    catalog: SongCatalog = Depends(get_catalog),
    current_user: str = Depends(get_current_admin)
):
    return CategoryResponse(**await catalog.create_category(category.name))

@router.patch("/{category_id}", response_model=CategoryResponse)
async def rename_category(
    category_id: str,
    category: CategoryCreate,
    catalog: SongCatalog = Depends(get_catalog),
    current_user: str = Depends(get_current_admin)
):
    return CategoryResponse(**await catalog.rename_category(category_id, category.name))

@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(
    category_id: str,
    catalog: SongCatalog = Depends(get_catalog),
    current_user: str = Depends(get_current_admin)
):
    await catalog.delete_category(category_id)
