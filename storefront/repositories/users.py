"""User repository - credential store queries"""

from typing import List, Optional

from sqlalchemy.orm import Session

from storefront.core.security import get_password_hash
from storefront.models.user import User


class UserRepository:
    """Persistence operations on users; callers own the commit"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email.strip().lower()).first()

    def get_by_provider(self, provider: str, provider_id: str) -> Optional[User]:
        return (
            self.db.query(User)
            .filter(User.auth_provider == provider, User.auth_provider_id == provider_id)
            .first()
        )

    def list_all(self) -> List[User]:
        return self.db.query(User).order_by(User.created_at.desc(), User.id.desc()).all()

    def create(
        self,
        *,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        role: str = "user",
        auth_provider: str = "local",
        auth_provider_id: Optional[str] = None,
        is_verified: bool = False,
        avatar_url: Optional[str] = None,
    ) -> User:
        """Insert a user, hashing the plaintext password"""
        user = User(
            email=email.strip().lower(),
            password_hash=get_password_hash(password),
            first_name=first_name,
            last_name=last_name,
            role=role,
            auth_provider=auth_provider,
            auth_provider_id=auth_provider_id,
            is_verified=is_verified,
            avatar_url=avatar_url,
        )
        self.db.add(user)
        self.db.flush()
        return user

    def set_password(self, user: User, password: str) -> None:
        user.password_hash = get_password_hash(password)
        self.db.flush()

    def update(self, user: User, **fields) -> User:
        for name, value in fields.items():
            setattr(user, name, value)
        self.db.flush()
        return user
