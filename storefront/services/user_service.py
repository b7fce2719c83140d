from sqlalchemy.orm import Session

from storefront.data.models.user import UserModel
from storefront.domain.errors import EmailTakenError, NotFoundError
from storefront.domain.schemas import UserCreate, UserRead
from storefront.repos.user_repo import UserRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class UserService:
    def __init__(self, db: Session):
        self.repo = UserRepo(db)

    def create_user(self, payload: UserCreate) -> UserRead:
        email = payload.email.lower()
        if self.repo.get_by_email(email):
            raise EmailTakenError()

        user = UserModel(
            email=email,
            first_name=payload.first_name,
            last_name=payload.last_name,
            is_admin=payload.is_admin,
        )
        created = self.repo.create_user(user)
        logger.info(f"Registered user {created.id} ({created.email})")
        return UserRead.model_validate(created)

    def get_user(self, user_id: int) -> UserRead:
        user = self.repo.get_user(user_id)
        if not user:
            raise NotFoundError("User not found")
        return UserRead.model_validate(user)
