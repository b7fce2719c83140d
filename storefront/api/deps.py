# storefront/api/deps.py
"""
Caller identity.

Credentials are checked upstream. This backend trusts the ``user_id`` it
is given and only checks that the user exists and, for admin routes, that
it carries the admin flag.
"""
from fastapi import Depends, HTTPException, Query
from sqlalchemy.orm import Session

from storefront.data.database import get_db
from storefront.data.models.user import UserModel
from storefront.domain.errors import StorefrontError
from storefront.repos.user_repo import UserRepo


def current_user(
    user_id: int = Query(..., gt=0, description="Authenticated caller"),
    db: Session = Depends(get_db),
) -> UserModel:
    user = UserRepo(db).get_user(user_id)
    if not user:
        raise HTTPException(status_code=401, detail="Authentication required")
    return user


def admin_user(user: UserModel = Depends(current_user)) -> UserModel:
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="Admin access required")
    return user


def http_error(e: StorefrontError) -> HTTPException:
    return HTTPException(status_code=e.status_code, detail=e.detail)
