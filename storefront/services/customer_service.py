"""Wishlist and recently-viewed history"""

from typing import List, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from storefront.config import settings
from storefront.core.exceptions import ResourceNotFoundError
from storefront.core.security import utcnow
from storefront.models.customer import RecentlyViewed, WishlistEntry
from storefront.services.item_service import item_service


class CustomerService:
    """Per-user product lists"""

    @staticmethod
    def get_wishlist(db: Session, user_id: int) -> List[WishlistEntry]:
        return (
            db.query(WishlistEntry)
            .options(joinedload(WishlistEntry.product))
            .filter(WishlistEntry.user_id == user_id)
            .order_by(WishlistEntry.id.desc())
            .all()
        )

    @staticmethod
    def add_to_wishlist(db: Session, user_id: int, product_id: int) -> Tuple[WishlistEntry, bool]:
        """
        Save a product; adding one that is already saved is a no-op

        Returns:
            Tuple of (entry, created)
        """
        item_service.get_item(db, product_id)

        existing = (
            db.query(WishlistEntry)
            .filter(WishlistEntry.user_id == user_id, WishlistEntry.product_id == product_id)
            .first()
        )
        if existing:
            return existing, False

        entry = WishlistEntry(user_id=user_id, product_id=product_id)
        db.add(entry)
        try:
            db.commit()
        except IntegrityError:
            # Concurrent add of the same product
            db.rollback()
            existing = (
                db.query(WishlistEntry)
                .filter(WishlistEntry.user_id == user_id, WishlistEntry.product_id == product_id)
                .one()
            )
            return existing, False

        db.refresh(entry)
        return entry, True

    @staticmethod
    def remove_from_wishlist(db: Session, user_id: int, product_id: int) -> None:
        deleted = (
            db.query(WishlistEntry)
            .filter(WishlistEntry.user_id == user_id, WishlistEntry.product_id == product_id)
            .delete(synchronize_session=False)
        )
        if not deleted:
            raise ResourceNotFoundError("Item in wishlist")
        db.commit()

    @staticmethod
    def get_recently_viewed(db: Session, user_id: int) -> List[RecentlyViewed]:
        return (
            db.query(RecentlyViewed)
            .options(joinedload(RecentlyViewed.product))
            .filter(RecentlyViewed.user_id == user_id)
            .order_by(RecentlyViewed.viewed_at.desc(), RecentlyViewed.id.desc())
            .limit(settings.RECENTLY_VIEWED_LIMIT)
            .all()
        )

    @staticmethod
    def record_view(db: Session, user_id: int, product_id: int) -> RecentlyViewed:
        """
        Record that the user opened a product

        Re-viewing moves the product to the front. Rows beyond
        RECENTLY_VIEWED_LIMIT are evicted oldest first.
        """
        item_service.get_item(db, product_id)

        view = (
            db.query(RecentlyViewed)
            .filter(RecentlyViewed.user_id == user_id, RecentlyViewed.product_id == product_id)
            .first()
        )
        if view:
            view.viewed_at = utcnow()
        else:
            view = RecentlyViewed(user_id=user_id, product_id=product_id, viewed_at=utcnow())
            db.add(view)
        db.flush()

        stale_ids = [
            row_id
            for (row_id,) in db.query(RecentlyViewed.id)
            .filter(RecentlyViewed.user_id == user_id)
            .order_by(RecentlyViewed.viewed_at.desc(), RecentlyViewed.id.desc())
            .offset(settings.RECENTLY_VIEWED_LIMIT)
            .all()
        ]
        if stale_ids:
            db.query(RecentlyViewed).filter(RecentlyViewed.id.in_(stale_ids)).delete(
                synchronize_session=False
            )

        db.commit()
        db.refresh(view)
        return view


# Singleton instance
customer_service = CustomerService()
