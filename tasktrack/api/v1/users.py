from fastapi import APIRouter, Query
from typing import Optional
from ...services.auth import user_dependency
from ...services.user_service import UserService
from ...db.base import db_dependency
from ...schemas.user import UserSummary
from ..errors import ok, to_http_exception

router = APIRouter(prefix='/users', tags=['users'])


@router.get("")
async def list_users(
    user: user_dependency,
    db: db_dependency,
    search: Optional[str] = Query(None, max_length=100)
):
    try:
        users = UserService(db).list_users(search)
        return ok([UserSummary.model_validate(u) for u in users])
    except Exception as e:
        raise to_http_exception(e)
