"""User service - admin user management"""

from sqlalchemy.orm import Session
from typing import List
from storefront.models.user import User
from storefront.repositories.refresh_tokens import RefreshTokenRepository
from storefront.repositories.users import UserRepository
from storefront.schemas.user import UserRole
from storefront.core.exceptions import ResourceNotFoundError, ValidationError
import logging

logger = logging.getLogger(__name__)


class UserService:
    """Admin user management; callers commit together with the audit event"""

    @staticmethod
    def _get_user(db: Session, user_id: int) -> User:
        user = UserRepository(db).get_by_id(user_id)
        if not user:
            raise ResourceNotFoundError("User")
        return user

    @staticmethod
    def get_all_users(db: Session) -> List[User]:
        """Every user, newest first"""
        return UserRepository(db).list_all()

    @staticmethod
    def ban_user(db: Session, user_id: int, actor_id: int) -> int:
        """
        Ban a user and end all of their sessions

        Args:
            db: Database session
            user_id: User to ban
            actor_id: Admin performing the ban

        Returns:
            Number of refresh tokens revoked
        """
        if user_id == actor_id:
            raise ValidationError("Administrators cannot ban themselves")

        user = UserService._get_user(db, user_id)
        user.is_banned = True
        revoked = RefreshTokenRepository(db).revoke_all(user.id)
        db.flush()

        logger.warning(f"User id={user.id} banned by id={actor_id}; revoked {revoked} session(s)")
        return revoked

    @staticmethod
    def unban_user(db: Session, user_id: int) -> User:
        user = UserService._get_user(db, user_id)
        user.is_banned = False
        db.flush()

        logger.info(f"User id={user.id} unbanned")
        return user

    @staticmethod
    def update_role(db: Session, user_id: int, role: UserRole) -> User:
        """Set a user's role; takes effect on their next access token"""
        user = UserService._get_user(db, user_id)
        user.role = role.value
        db.flush()

        logger.info(f"User id={user.id} role set to {user.role}")
        return user


# Singleton instance
user_service = UserService()
