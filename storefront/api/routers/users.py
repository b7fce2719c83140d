from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import current_user, http_error
from storefront.data.database import get_db
from storefront.data.models.user import UserModel
from storefront.domain.errors import StorefrontError
from storefront.domain.schemas import UserCreate, UserRead
from storefront.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=UserRead, status_code=201)
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    service = UserService(db)
    try:
        return service.create_user(payload)
    except StorefrontError as e:
        raise http_error(e)


# must stay above /{user_id}, otherwise "me" is parsed as an id
@router.get("/me", response_model=UserRead)
def get_me(user: UserModel = Depends(current_user)):
    return user


@router.get("/{user_id}", response_model=UserRead)
def get_user(user_id: int, db: Session = Depends(get_db)):
    service = UserService(db)
    try:
        return service.get_user(user_id)
    except StorefrontError as e:
        raise http_error(e)
