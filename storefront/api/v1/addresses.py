"""Address book routes"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from storefront.api.deps import AccessClaims, get_current_claims
from storefront.core.database import get_db
from storefront.schemas.address import AddressCreate, AddressResponse, AddressUpdate
from storefront.schemas.base import dump
from storefront.schemas.response import api_response
from storefront.services.address_service import address_service

router = APIRouter()


@router.get("")
def list_addresses(
    claims: AccessClaims = Depends(get_current_claims),
    db: Session = Depends(get_db)
):
    addresses = address_service.list_addresses(db, claims.user_id)
    return api_response(data=[dump(AddressResponse.model_validate(a)) for a in addresses])


@router.post("", status_code=status.HTTP_201_CREATED)
def create_address(
    data: AddressCreate,
    claims: AccessClaims = Depends(get_current_claims),
    db: Session = Depends(get_db)
):
    """
    Add an address for the current user

    Marking it as default clears the flag on the user's other addresses.
    """
    address = address_service.create_address(db, claims.user_id, data)
    return api_response("Address created successfully", dump(AddressResponse.model_validate(address)))


@router.put("/{address_id}")
def update_address(
    address_id: int,
    data: AddressUpdate,
    claims: AccessClaims = Depends(get_current_claims),
    db: Session = Depends(get_db)
):
    address = address_service.update_address(db, claims.user_id, address_id, data)
    return api_response("Address updated successfully", dump(AddressResponse.model_validate(address)))


@router.delete("/{address_id}")
def delete_address(
    address_id: int,
    claims: AccessClaims = Depends(get_current_claims),
    db: Session = Depends(get_db)
):
    address_service.delete_address(db, claims.user_id, address_id)
    return api_response("Address deleted successfully")
