from sqlalchemy.orm import Session
from sqlalchemy import or_
from typing import List, Optional
from ..db.models.user import User
from ..db.models.priority import PriorityConfig
from ..schemas.user import CreateUserRequest, ProfileUpdate
from ..core.constants import DEFAULT_PRIORITY_CONFIGS
from ..core.exceptions import AuthenticationError, ConflictError
from ..utils.logger import get_logger
from .auth import hash_password, verify_password

logger = get_logger(__name__)


class UserService:
    def __init__(self, db: Session):
        self.db = db

    def register(self, user_data: CreateUserRequest) -> User:
        email = user_data.email.strip().lower()
        if self.get_by_email(email):
            raise ConflictError("Email already exists")

        try:
            user = User(
                email=email,
                hashed_password=hash_password(user_data.password),
                name=user_data.name,
                surname=user_data.surname
            )
            self.db.add(user)
            self.db.flush()

            for config in DEFAULT_PRIORITY_CONFIGS:
                self.db.add(PriorityConfig(user_id=user.id, **config))

            self.db.commit()
            self.db.refresh(user)

            logger.info(f"User registered: {user.id} - {user.email}")
            return user

        except Exception as e:
            self.db.rollback()
            logger.error(f"Error registering user {email}: {e}")
            raise

    def authenticate(self, email: str, password: str) -> User:
        user = self.get_by_email(email.strip().lower())

        # Same message for unknown email and wrong password
        if not user or not verify_password(password, user.hashed_password):
            logger.warning(f"Failed login for {email}")
            raise AuthenticationError("Invalid email or password")

        if not user.is_active:
            raise AuthenticationError("Account disabled")

        return user

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def get_by_id(self, user_id) -> Optional[User]:
        try:
            return self.db.query(User).filter(User.id == int(user_id)).first()
        except (TypeError, ValueError):
            return None

    def update_profile(self, user: User, profile_data: ProfileUpdate) -> User:
        try:
            for field, value in profile_data.model_dump(exclude_unset=True).items():
                setattr(user, field, value)

            self.db.commit()
            self.db.refresh(user)

            logger.info(f"Profile updated: {user.id}")
            return user

        except Exception as e:
            self.db.rollback()
            logger.error(f"Error updating profile {user.id}: {e}")
            raise

    def list_users(self, search: Optional[str] = None) -> List[User]:
        query = self.db.query(User).filter(User.is_active == True)

        if search:
            search_term = f"%{search}%"
            query = query.filter(
                or_(
                    User.name.ilike(search_term),
                    User.surname.ilike(search_term),
                    User.email.ilike(search_term)
                )
            )

        return query.order_by(User.surname.asc(), User.name.asc()).all()
