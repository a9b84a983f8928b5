from fastapi import APIRouter, Depends, Query, status
from typing import Optional

from fastfinder.core.result import render_result
from fastfinder.models.item import ItemCategory, ItemStatus, ItemType
from fastfinder.models.user import User
from fastfinder.modules.auth.dependencies import get_current_user, get_item_service
from fastfinder.schemas.item import ItemCreate, ItemStatusUpdate, ItemUpdate
from fastfinder.services.item_service import ItemService
from fastfinder.utils.pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

router = APIRouter()


@router.get("")
async def list_items(
    q: Optional[str] = Query(None, description="Search title, description, category and location"),
    item_type: Optional[ItemType] = Query(None, alias="type"),
    category: Optional[ItemCategory] = Query(None),
    status_filter: Optional[ItemStatus] = Query(None, alias="status"),
    reported_by: Optional[str] = Query(None, alias="reportedBy"),
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, alias="pageSize"),
    items: ItemService = Depends(get_item_service),
):
    """Browse and search reports, newest first"""
    result = await items.list_items(
        q=q,
        item_type=item_type,
        category=category,
        status=status_filter,
        reported_by=reported_by,
        page=page,
        page_size=page_size,
    )
    return render_result(result)


@router.get("/mine")
async def list_my_items(
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, alias="pageSize"),
    current_user: User = Depends(get_current_user),
    items: ItemService = Depends(get_item_service),
):
    return render_result(await items.list_mine(current_user, page, page_size))


@router.get("/{item_id}")
async def get_item(
    item_id: str,
    items: ItemService = Depends(get_item_service),
):
    return render_result(await items.get_item(item_id))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_item(
    data: ItemCreate,
    current_user: User = Depends(get_current_user),
    items: ItemService = Depends(get_item_service),
):
    """Report a lost or found item; contact info defaults to the reporter's number"""
    return render_result(await items.create_item(current_user, data), status.HTTP_201_CREATED)


@router.put("/{item_id}")
async def update_item(
    item_id: str,
    data: ItemUpdate,
    current_user: User = Depends(get_current_user),
    items: ItemService = Depends(get_item_service),
):
    return render_result(await items.update_item(current_user, item_id, data))


@router.patch("/{item_id}/status")
async def update_item_status(
    item_id: str,
    data: ItemStatusUpdate,
    current_user: User = Depends(get_current_user),
    items: ItemService = Depends(get_item_service),
):
    return render_result(await items.update_status(current_user, item_id, data))


@router.delete("/{item_id}")
async def delete_item(
    item_id: str,
    current_user: User = Depends(get_current_user),
    items: ItemService = Depends(get_item_service),
):
    return render_result(await items.delete_item(current_user, item_id))
