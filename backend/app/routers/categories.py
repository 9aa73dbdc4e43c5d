"""Admin category routes."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.deps import get_admin_db
from app.models.category import Category
from app.schemas.catalog import CategoryCreate, CategoryOut, CategoryUpdate
from app.services import catalog

router = APIRouter()


@router.get("/", response_model=list[CategoryOut])
async def list_categories(db: AsyncSession = Depends(get_admin_db)):
    return [CategoryOut.model_validate(c) for c in await catalog.list_categories(db)]


@router.post("/", response_model=CategoryOut, status_code=status.HTTP_201_CREATED)
async def create_category(body: CategoryCreate, db: AsyncSession = Depends(get_admin_db)):
    category = Category(name=body.name.strip(), description=body.description)
    db.add(category)
    await db.flush()
    return CategoryOut.model_validate(category)


@router.patch("/{category_id}", response_model=CategoryOut)
async def update_category(
    category_id: str,
    body: CategoryUpdate,
    db: AsyncSession = Depends(get_admin_db),
):
    category = await catalog.get_category(db, category_id)
    updates = body.model_dump(exclude_unset=True)
    if updates.get("name"):
        category.name = updates["name"].strip()
    if "description" in updates:
        category.description = updates["description"]
    await db.flush()
    return CategoryOut.model_validate(category)


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(category_id: str, db: AsyncSession = Depends(get_admin_db)):
    await catalog.delete_category(db, category_id)
