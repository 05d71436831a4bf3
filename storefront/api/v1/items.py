"""Catalogue item routes"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from storefront.api.deps import AccessClaims, get_current_admin, get_current_claims
from storefront.core.database import get_db
from storefront.schemas.base import dump
from storefront.schemas.item import ItemCreate, ItemResponse, ItemUpdate
from storefront.schemas.response import api_response
from storefront.services.item_service import item_service

router = APIRouter()


@router.get("")
def list_items(
    claims: AccessClaims = Depends(get_current_claims),
    db: Session = Depends(get_db)
):
    items = item_service.list_items(db)
    return api_response(data=[dump(ItemResponse.model_validate(i)) for i in items])


@router.get("/{item_id}")
def get_item(
    item_id: int,
    claims: AccessClaims = Depends(get_current_claims),
    db: Session = Depends(get_db)
):
    item = item_service.get_item(db, item_id)
    return api_response(data=dump(ItemResponse.model_validate(item)))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_item(
    data: ItemCreate,
    admin: AccessClaims = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    """Create a catalogue item (admin only)"""
    item = item_service.create_item(db, data)
    return api_response("Item created successfully", dump(ItemResponse.model_validate(item)))


@router.put("/{item_id}")
def update_item(
    item_id: int,
    data: ItemUpdate,
    admin: AccessClaims = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    """Update a catalogue item (admin only)"""
    item = item_service.update_item(db, item_id, data)
    return api_response("Item updated successfully", dump(ItemResponse.model_validate(item)))


@router.delete("/{item_id}")
def delete_item(
    item_id: int,
    admin: AccessClaims = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    """Delete a catalogue item (admin only)"""
    item_service.delete_item(db, item_id)
    return api_response("Item deleted successfully")
