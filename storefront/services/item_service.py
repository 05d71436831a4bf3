"""Catalogue item service"""

from typing import List

from sqlalchemy.orm import Session

from storefront.core.exceptions import ResourceNotFoundError
from storefront.models.item import Item
from storefront.schemas.item import ItemCreate, ItemUpdate
import logging

logger = logging.getLogger(__name__)


class ItemService:
    """Item CRUD"""

    @staticmethod
    def get_item(db: Session, item_id: int) -> Item:
        item = db.query(Item).filter(Item.id == item_id).first()
        if not item:
            raise ResourceNotFoundError(f"Item with id {item_id}")
        return item

    @staticmethod
    def list_items(db: Session) -> List[Item]:
        return db.query(Item).order_by(Item.id.asc()).all()

    @staticmethod
    def create_item(db: Session, data: ItemCreate) -> Item:
        item = Item(name=data.name, description=data.description)
        db.add(item)
        db.commit()
        db.refresh(item)

        logger.info(f"Created item: {item.id}")
        return item

    @staticmethod
    def update_item(db: Session, item_id: int, data: ItemUpdate) -> Item:
        item = ItemService.get_item(db, item_id)
        for name, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(item, name, value)
        db.commit()
        db.refresh(item)
        return item

    @staticmethod
    def delete_item(db: Session, item_id: int) -> None:
        item = ItemService.get_item(db, item_id)
        db.delete(item)
        db.commit()

        logger.info(f"Deleted item: {item_id}")


# Singleton instance
item_service = ItemService()
