# supergains/api/deps.py
from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from supergains.data.database import get_db
from supergains.data.models.user import UserModel
from supergains.domain.errors import AuthenticationError
from supergains.repos.user_repo import UserRepo
from supergains.services.lock_service import LockService
from supergains.utils.rate_limit import POLICIES, get_limiter
from supergains.utils.security import decode_access_token
from supergains.utils.settings import RATE_LIMIT_ENABLED, TRUSTED_PROXIES

bearer_scheme = HTTPBearer(auto_error=False)

_lock_service: LockService | None = None


def get_lock_service() -> LockService:
    global _lock_service
    if _lock_service is None:
        _lock_service = LockService()
    return _lock_service


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> UserModel:
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise HTTPException(status_code=401, detail="Access token required. Format: Bearer <token>")

    try:
        payload = decode_access_token(credentials.credentials)
        user_id = int(payload["sub"])
    except AuthenticationError as e:
        raise HTTPException(status_code=401, detail=str(e))
    except (KeyError, ValueError):
        raise HTTPException(status_code=401, detail="Invalid token")

    user = UserRepo(db).get_user(user_id)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid token - user not found")
    if not user.is_active:
        raise HTTPException(status_code=401, detail="User is inactive")
    return user


def require_roles(*roles: str):
    def dependency(user: UserModel = Depends(get_current_user)) -> UserModel:
        if user.role not in roles:
            raise HTTPException(status_code=403, detail="Insufficient permissions")
        return user

    return dependency


require_admin = require_roles("admin")
require_stock_access = require_roles("admin", "moderator")


def client_key(request: Request) -> str:
    peer = request.client.host if request.client else "unknown"
    #X-Forwarded-For is client supplied, only a known proxy may set it
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded and peer in TRUSTED_PROXIES:
        return forwarded.split(",")[0].strip()
    return peer


def rate_limit(policy_name: str):
    """
    Dependency factory. Stores the window state on request.state so the
    response middleware can decorate the response with X-RateLimit-* headers.
    """
    policy = POLICIES[policy_name]

    def dependency(request: Request) -> None:
        if not RATE_LIMIT_ENABLED:
            return
        state = get_limiter().hit(policy, client_key(request))
        request.state.rate_limit = state
        if state.exceeded:
            raise HTTPException(status_code=429, detail={"error": policy.message, "code": policy.code})

    return dependency
