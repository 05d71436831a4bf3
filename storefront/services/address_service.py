"""Address book service"""

from typing import List

from sqlalchemy.orm import Session

from storefront.core.exceptions import ResourceNotFoundError
from storefront.models.address import Address
from storefront.schemas.address import AddressCreate, AddressUpdate


class AddressService:
    """Per-user address CRUD; at most one default address per user"""

    @staticmethod
    def _clear_default(db: Session, user_id: int, keep_id: int = None) -> None:
        query = db.query(Address).filter(Address.user_id == user_id, Address.is_default == True)  # noqa: E712
        if keep_id is not None:
            query = query.filter(Address.id != keep_id)
        query.update({Address.is_default: False}, synchronize_session="fetch")

    @staticmethod
    def _get_owned(db: Session, user_id: int, address_id: int) -> Address:
        address = (
            db.query(Address)
            .filter(Address.id == address_id, Address.user_id == user_id)
            .first()
        )
        if not address:
            raise ResourceNotFoundError("Address")
        return address

    @staticmethod
    def list_addresses(db: Session, user_id: int) -> List[Address]:
        return (
            db.query(Address)
            .filter(Address.user_id == user_id)
            .order_by(Address.is_default.desc(), Address.id.asc())
            .all()
        )

    @staticmethod
    def create_address(db: Session, user_id: int, data: AddressCreate) -> Address:
        if data.is_default:
            AddressService._clear_default(db, user_id)

        address = Address(user_id=user_id, **data.model_dump())
        db.add(address)
        db.commit()
        db.refresh(address)
        return address

    @staticmethod
    def update_address(db: Session, user_id: int, address_id: int, data: AddressUpdate) -> Address:
        """
        Update an address owned by the user

        Raises:
            ResourceNotFoundError: If the address does not exist or belongs to someone else
        """
        address = AddressService._get_owned(db, user_id, address_id)

        fields = data.model_dump(exclude_unset=True)
        if fields.get("is_default"):
            AddressService._clear_default(db, user_id, keep_id=address.id)
        for name, value in fields.items():
            if value is None and name != "address_line2":
                continue
            setattr(address, name, value)

        db.commit()
        db.refresh(address)
        return address

    @staticmethod
    def delete_address(db: Session, user_id: int, address_id: int) -> None:
        address = AddressService._get_owned(db, user_id, address_id)
        db.delete(address)
        db.commit()


# Singleton instance
address_service = AddressService()
