from fastapi import APIRouter, HTTPException
from ...services.priority_service import PriorityService
from ...services.auth import user_dependency
from ...db.base import db_dependency
from ...schemas.priority import PriorityConfig, PriorityConfigUpdate, ReminderSyncRequest
from ..errors import ok, to_http_exception

router = APIRouter(prefix='/priorities', tags=['priorities'])


@router.get("")
async def list_priorities(user: user_dependency, db: db_dependency):
    try:
        configs = PriorityService(db, user).get_all_priorities()
        return ok([PriorityConfig.model_validate(c) for c in configs])
    except Exception as e:
        raise to_http_exception(e)


@router.post("/reset")
async def reset_priorities(user: user_dependency, db: db_dependency):
    try:
        configs = PriorityService(db, user).reset_to_defaults()
        return ok([PriorityConfig.model_validate(c) for c in configs])
    except Exception as e:
        raise to_http_exception(e)


@router.patch("/{config_id}")
async def update_priority(config_id: str, config_data: PriorityConfigUpdate, user: user_dependency, db: db_dependency):
    try:
        config = PriorityService(db, user).update_config(config_id, config_data)

        if not config:
            raise HTTPException(status_code=404, detail="Priority config not found")

        return ok(PriorityConfig.model_validate(config))
    except Exception as e:
        raise to_http_exception(e)


@router.put("/{config_id}/reminders")
async def sync_reminders(config_id: str, request: ReminderSyncRequest, user: user_dependency, db: db_dependency):
    try:
        config = PriorityService(db, user).sync_reminders(config_id, request.reminders)

        if not config:
            raise HTTPException(status_code=404, detail="Priority config not found")

        return ok(PriorityConfig.model_validate(config))
    except Exception as e:
        raise to_http_exception(e)
