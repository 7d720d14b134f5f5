# supergains/api/routers/users.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from supergains.api.deps import get_current_user, rate_limit, require_admin
from supergains.api.errors import SERVICE_ERRORS, to_http
from supergains.data.database import get_db
from supergains.data.models.user import UserModel
from supergains.domain.schemas import TokenOut, UserLogin, UserRead, UserRegister, UserStatusIn
from supergains.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.post(
    "/register",
    response_model=TokenOut,
    status_code=201,
    dependencies=[Depends(rate_limit("register"))],
)
def register(payload: UserRegister, db: Session = Depends(get_db)):
    service = UserService(db)
    try:
        return service.register(payload)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/login", response_model=TokenOut, dependencies=[Depends(rate_limit("auth"))])
def login(payload: UserLogin, db: Session = Depends(get_db)):
    service = UserService(db)
    try:
        return service.login(payload)
    except SERVICE_ERRORS as e:
        raise to_http(e)


@router.get("/me", response_model=UserRead)
def me(user: UserModel = Depends(get_current_user)):
    return user


@router.get("/", response_model=List[UserRead], dependencies=[Depends(rate_limit("admin"))])
def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
    admin: UserModel = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return UserService(db).list_users(page=page, limit=limit)


@router.patch("/{user_id}/status", response_model=UserRead, dependencies=[Depends(rate_limit("admin"))])
def set_user_status(
    user_id: int,
    payload: UserStatusIn,
    admin: UserModel = Depends(require_admin),
    db: Session = Depends(get_db),
):
    if user_id == admin.id and not payload.active:
        raise HTTPException(status_code=400, detail="Admins cannot deactivate themselves")
    try:
        return UserService(db).set_active(user_id, payload.active)
    except SERVICE_ERRORS as e:
        raise to_http(e)
