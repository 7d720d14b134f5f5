# supergains/services/user_service.py
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from supergains.data.models.user import UserModel
from supergains.domain.errors import AuthenticationError, NotFoundError
from supergains.domain.schemas import TokenOut, UserLogin, UserRead, UserRegister
from supergains.repos.user_repo import UserRepo
from supergains.utils.logging import get_logger
from supergains.utils.security import create_access_token, hash_password, verify_password
from supergains.utils.settings import JWT_EXPIRES_MINUTES

logger = get_logger(__name__)

ROLES = ("user", "moderator", "admin")


class UserService:
    def __init__(self, db: Session):
        self.repo = UserRepo(db)

    def register(self, payload: UserRegister, role: str = "user") -> TokenOut:
        user = self.create_user(payload, role=role)
        return self._token_for(user)

    def create_user(self, payload: UserRegister, role: str = "user") -> UserModel:
        if role not in ROLES:
            raise ValueError(f"Unknown role {role}")

        if self.repo.get_by_email(payload.email):
            raise ValueError("User already exists")

        user = UserModel(
            name=payload.name.strip(),
            email=payload.email.lower(),
            password_hash=hash_password(payload.password),
            role=role,
            is_active=True,
        )
        created = self.repo.create_user(user)
        logger.info(f"Registered user {created.id} ({created.role})")
        return created

    def login(self, payload: UserLogin) -> TokenOut:
        user = self.repo.get_by_email(payload.email)

        #same message for unknown email and wrong password
        if not user or not verify_password(payload.password, user.password_hash):
            logger.info(f"Failed login for {payload.email}")
            raise AuthenticationError("Invalid email or password")

        if not user.is_active:
            raise AuthenticationError("User is inactive")

        user.last_login = datetime.now(timezone.utc)
        self.repo.save(user)
        return self._token_for(user)

    def get_user(self, user_id: int) -> UserModel:
        user = self.repo.get_user(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def list_users(self, page: int = 1, limit: int = 50) -> list[UserModel]:
        limit = min(100, max(1, limit))
        return self.repo.list_users(offset=(max(1, page) - 1) * limit, limit=limit)

    def set_active(self, user_id: int, active: bool) -> UserModel:
        user = self.get_user(user_id)
        user.is_active = active
        logger.info(f"User {user_id} {'activated' if active else 'deactivated'}")
        return self.repo.save(user)

    def _token_for(self, user: UserModel) -> TokenOut:
        token = create_access_token(user.id, user.email, user.role)
        return TokenOut(
            user=UserRead.model_validate(user),
            access_token=token,
            expires_in=JWT_EXPIRES_MINUTES * 60,
        )
