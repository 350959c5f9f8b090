"""
Navigation bookmark routes.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc
from typing import Optional

from ..database import get_db
from ..errors import ValidationError
from ..models.nav import NavItem
from ..models.user import User
from ..schemas.nav import NavItemCreate, NavItemUpdate, NavItemResponse
from ..utils.ownership import get_owned_or_raise
from ..utils.security import get_current_user


router = APIRouter(prefix="/api/nav", tags=["Navigation"])


@router.get("")
async def list_nav_items(
    category: Optional[str] = None,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    query = select(NavItem).filter(NavItem.user_id == current_user.id)
    if category:
        query = query.filter(NavItem.category == category)

    result = await db.execute(query.order_by(desc(NavItem.created_at), desc(NavItem.id)))
    return {"navItems": [NavItemResponse.model_validate(n) for n in result.scalars().all()]}


@router.get("/categories")
async def list_categories(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Distinct categories in use, alphabetically."""
    result = await db.execute(
        select(NavItem.category)
        .filter(NavItem.user_id == current_user.id)
        .distinct()
        .order_by(NavItem.category)
    )
    return {"categories": list(result.scalars().all())}


@router.post("")
async def create_nav_item(
    item_data: NavItemCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    title = (item_data.title or "").strip()
    url = (item_data.url or "").strip()
    category = (item_data.category or "").strip()

    if not title or not url or not category:
        raise ValidationError("Title, url and category are required")

    nav_item = NavItem(
        user_id=current_user.id,
        title=title,
        description=item_data.description or "",
        url=url,
        icon_url=item_data.icon_url or None,
        category=category
    )
    db.add(nav_item)
    await db.commit()
    await db.refresh(nav_item)

    return {"navItem": NavItemResponse.model_validate(nav_item)}


@router.patch("/{item_id}")
async def update_nav_item(
    item_id: int,
    updates: NavItemUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    nav_item = await get_owned_or_raise(db, NavItem, item_id, current_user.id, "Nav item")
    changes = updates.model_dump(exclude_unset=True)

    for field in ("title", "url", "category"):
        if field in changes and not (changes[field] or "").strip():
            raise ValidationError(f"{field} cannot be empty", field=field)

    for key, value in changes.items():
        setattr(nav_item, key, value)

    await db.commit()
    await db.refresh(nav_item)

    return {"navItem": NavItemResponse.model_validate(nav_item)}


@router.delete("/{item_id}")
async def delete_nav_item(
    item_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    nav_item = await get_owned_or_raise(db, NavItem, item_id, current_user.id, "Nav item")
    await db.delete(nav_item)
    await db.commit()

    return {"success": True}
