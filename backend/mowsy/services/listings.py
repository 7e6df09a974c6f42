"""Paginated listing reads with the optional visibility filter."""

from typing import Any, Optional

from sqlalchemy import Select
from sqlalchemy.ext.asyncio import AsyncSession

from mowsy.models.user import User
from mowsy.schemas.base import PageParams
from mowsy.services.visibility import filter_visible


async def load_viewer(db: AsyncSession, viewer_id: Optional[int]) -> Optional[User]:
    if viewer_id is None:
        return None
    viewer = await db.get(User, viewer_id)
    if viewer is None or not viewer.is_active:
        return None
    return viewer


async def fetch_listings(
    db: AsyncSession,
    query: Select,
    viewer: Optional[User],
    apply_filter: bool,
    page: PageParams,
) -> list[Any]:
    """Run a listing query, filtering by visibility before paginating when active."""
    page = page.normalized()

    if apply_filter and viewer is not None:
        result = await db.execute(query)
        visible = filter_visible(list(result.scalars().all()), viewer, True)
        return visible[page.offset:page.offset + page.limit]

    result = await db.execute(query.offset(page.offset).limit(page.limit))
    return list(result.scalars().all())
