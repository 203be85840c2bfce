from fastapi import APIRouter, HTTPException, status
from ...services.board_service import BoardService
from ...services.storage import storage_dependency
from ...services.auth import user_dependency
from ...db.base import db_dependency
from ...schemas.board import BoardCreate, BoardUpdate, BoardGuest, GuestInvite, GuestRoleUpdate
from ..errors import ok, to_http_exception

router = APIRouter(prefix='/boards', tags=['boards'])


@router.get("")
async def list_boards(user: user_dependency, db: db_dependency, storage: storage_dependency):
    return ok(BoardService(db, user, storage).list_boards())


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_board(board_data: BoardCreate, user: user_dependency, db: db_dependency, storage: storage_dependency):
    try:
        return ok(BoardService(db, user, storage).create_board(board_data))
    except Exception as e:
        raise to_http_exception(e)


@router.get("/{board_id}")
async def get_board(board_id: str, user: user_dependency, db: db_dependency, storage: storage_dependency):
    try:
        board = BoardService(db, user, storage).get_board_by_id(board_id)

        if not board:
            raise HTTPException(status_code=404, detail="Board not found")

        return ok(board)
    except Exception as e:
        raise to_http_exception(e)


@router.patch("/{board_id}")
async def update_board(board_id: str, board_data: BoardUpdate, user: user_dependency, db: db_dependency, storage: storage_dependency):
    try:
        board = BoardService(db, user, storage).update_board(board_id, board_data)

        if not board:
            raise HTTPException(status_code=404, detail="Board not found")

        return ok(board)
    except Exception as e:
        raise to_http_exception(e)


@router.delete("/{board_id}")
async def delete_board(board_id: str, user: user_dependency, db: db_dependency, storage: storage_dependency):
    try:
        if not BoardService(db, user, storage).delete_board(board_id):
            raise HTTPException(status_code=404, detail="Board not found")

        return ok()
    except Exception as e:
        raise to_http_exception(e)


@router.get("/{board_id}/guests")
async def list_guests(board_id: str, user: user_dependency, db: db_dependency, storage: storage_dependency):
    try:
        guests = BoardService(db, user, storage).list_guests(board_id)

        if guests is None:
            raise HTTPException(status_code=404, detail="Board not found")

        return ok([BoardGuest.model_validate(g) for g in guests])
    except Exception as e:
        raise to_http_exception(e)


@router.post("/{board_id}/guests", status_code=status.HTTP_201_CREATED)
async def invite_guest(board_id: str, invite: GuestInvite, user: user_dependency, db: db_dependency, storage: storage_dependency):
    try:
        guest = BoardService(db, user, storage).invite_guest(board_id, invite.email, invite.role)

        if not guest:
            raise HTTPException(status_code=404, detail="Board not found")

        return ok(BoardGuest.model_validate(guest))
    except Exception as e:
        raise to_http_exception(e)


@router.patch("/{board_id}/guests/{user_id}")
async def update_guest_role(
    board_id: str,
    user_id: str,
    role_update: GuestRoleUpdate,
    user: user_dependency,
    db: db_dependency,
    storage: storage_dependency
):
    try:
        guest = BoardService(db, user, storage).update_guest_role(board_id, user_id, role_update.role)

        if not guest:
            raise HTTPException(status_code=404, detail="Guest not found")

        return ok(BoardGuest.model_validate(guest))
    except Exception as e:
        raise to_http_exception(e)


@router.delete("/{board_id}/guests/{user_id}")
async def remove_guest(board_id: str, user_id: str, user: user_dependency, db: db_dependency, storage: storage_dependency):
    try:
        if not BoardService(db, user, storage).remove_guest(board_id, user_id):
            raise HTTPException(status_code=404, detail="Guest not found")

        return ok()
    except Exception as e:
        raise to_http_exception(e)
