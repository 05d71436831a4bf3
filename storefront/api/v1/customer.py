"""Wishlist and recently-viewed routes"""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from storefront.api.deps import AccessClaims, get_current_claims
from storefront.core.database import get_db
from storefront.schemas.base import dump
from storefront.schemas.item import RecentlyViewedResponse, WishlistEntryResponse
from storefront.schemas.response import api_response
from storefront.services.customer_service import customer_service

wishlist_router = APIRouter()
history_router = APIRouter()


@wishlist_router.get("")
def get_wishlist(
    claims: AccessClaims = Depends(get_current_claims),
    db: Session = Depends(get_db)
):
    entries = customer_service.get_wishlist(db, claims.user_id)
    return api_response(data=[dump(WishlistEntryResponse.model_validate(e)) for e in entries])


@wishlist_router.post("/{product_id}", status_code=status.HTTP_201_CREATED)
def add_to_wishlist(
    product_id: int,
    response: Response,
    claims: AccessClaims = Depends(get_current_claims),
    db: Session = Depends(get_db)
):
    """
    Save a product to the wishlist

    Adding an already-saved product answers 200 with the existing entry.
    """
    entry, created = customer_service.add_to_wishlist(db, claims.user_id, product_id)
    if not created:
        response.status_code = status.HTTP_200_OK
    return api_response("Added to wishlist", dump(WishlistEntryResponse.model_validate(entry)))


@wishlist_router.delete("/{product_id}")
def remove_from_wishlist(
    product_id: int,
    claims: AccessClaims = Depends(get_current_claims),
    db: Session = Depends(get_db)
):
    customer_service.remove_from_wishlist(db, claims.user_id, product_id)
    return api_response("Removed from wishlist")


@history_router.get("")
def get_recently_viewed(
    claims: AccessClaims = Depends(get_current_claims),
    db: Session = Depends(get_db)
):
    """Most recent views first"""
    views = customer_service.get_recently_viewed(db, claims.user_id)
    return api_response(data=[dump(RecentlyViewedResponse.model_validate(v)) for v in views])


@history_router.post("/{product_id}")
def record_view(
    product_id: int,
    claims: AccessClaims = Depends(get_current_claims),
    db: Session = Depends(get_db)
):
    customer_service.record_view(db, claims.user_id, product_id)
    return api_response("Recorded view")
