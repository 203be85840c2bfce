from fastapi import APIRouter, HTTPException, status, UploadFile, File
from ...services.task_service import TaskService
from ...services.storage import storage_dependency
from ...services.auth import user_dependency
from ...db.base import db_dependency
from ...schemas.task import TaskCreate, TaskUpdate, TaskColumnUpdate
from ...schemas.comment import Comment, CommentCreate
from ..errors import ok, to_http_exception

router = APIRouter(tags=['tasks'])


@router.get("/boards/{board_id}/tasks")
async def get_board_tasks(board_id: str, user: user_dependency, db: db_dependency, storage: storage_dependency):
    try:
        tasks = TaskService(db, user, storage).get_tasks_by_board(board_id)

        if tasks is None:
            raise HTTPException(status_code=404, detail="Board not found")

        return ok(tasks)
    except Exception as e:
        raise to_http_exception(e)


@router.post("/boards/{board_id}/tasks", status_code=status.HTTP_201_CREATED)
async def create_task(
    board_id: str,
    task_data: TaskCreate,
    user: user_dependency,
    db: db_dependency,
    storage: storage_dependency
):
    try:
        task = TaskService(db, user, storage).create_task(board_id, task_data)

        if not task:
            raise HTTPException(status_code=404, detail="Board not found")

        return ok(task)
    except Exception as e:
        raise to_http_exception(e)


@router.get("/tasks/{task_id}")
async def get_task(task_id: str, user: user_dependency, db: db_dependency, storage: storage_dependency):
    try:
        task = TaskService(db, user, storage).get_task(task_id)

        if not task:
            raise HTTPException(status_code=404, detail="Task not found")

        return ok(task)
    except Exception as e:
        raise to_http_exception(e)


@router.patch("/tasks/{task_id}")
async def update_task(
    task_id: str,
    task_data: TaskUpdate,
    user: user_dependency,
    db: db_dependency,
    storage: storage_dependency
):
    try:
        task = TaskService(db, user, storage).update_task(task_id, task_data)

        if not task:
            raise HTTPException(status_code=404, detail="Task not found")

        return ok(task)
    except Exception as e:
        raise to_http_exception(e)


@router.patch("/tasks/{task_id}/column")
async def update_task_column(
    task_id: str,
    column_update: TaskColumnUpdate,
    user: user_dependency,
    db: db_dependency,
    storage: storage_dependency
):
    try:
        task = TaskService(db, user, storage).update_task_column(task_id, column_update.column_id)

        if not task:
            raise HTTPException(status_code=404, detail="Task not found")

        return ok(task)
    except Exception as e:
        raise to_http_exception(e)


@router.delete("/tasks/{task_id}")
async def delete_task(task_id: str, user: user_dependency, db: db_dependency, storage: storage_dependency):
    try:
        if not TaskService(db, user, storage).delete_task(task_id):
            raise HTTPException(status_code=404, detail="Task not found")

        return ok()
    except Exception as e:
        raise to_http_exception(e)


@router.get("/tasks/{task_id}/comments")
async def get_comments(task_id: str, user: user_dependency, db: db_dependency, storage: storage_dependency):
    try:
        comments = TaskService(db, user, storage).get_comments(task_id)

        if comments is None:
            raise HTTPException(status_code=404, detail="Task not found")

        return ok([Comment.model_validate(c) for c in comments])
    except Exception as e:
        raise to_http_exception(e)


@router.post("/tasks/{task_id}/comments", status_code=status.HTTP_201_CREATED)
async def add_comment(
    task_id: str,
    comment_data: CommentCreate,
    user: user_dependency,
    db: db_dependency,
    storage: storage_dependency
):
    try:
        comment = TaskService(db, user, storage).add_comment(task_id, comment_data.text)

        if not comment:
            raise HTTPException(status_code=404, detail="Task not found")

        return ok(Comment.model_validate(comment))
    except Exception as e:
        raise to_http_exception(e)


@router.get("/tasks/{task_id}/attachments")
async def get_attachments(task_id: str, user: user_dependency, db: db_dependency, storage: storage_dependency):
    try:
        attachments = TaskService(db, user, storage).get_attachments(task_id)

        if attachments is None:
            raise HTTPException(status_code=404, detail="Task not found")

        return ok(attachments)
    except Exception as e:
        raise to_http_exception(e)


@router.post("/tasks/{task_id}/attachments", status_code=status.HTTP_201_CREATED)
async def upload_attachment(
    task_id: str,
    user: user_dependency,
    db: db_dependency,
    storage: storage_dependency,
    file: UploadFile = File(...)
):
    try:
        content = await file.read()
        attachment = TaskService(db, user, storage).upload_attachment(
            task_id,
            file.filename,
            content,
            file.content_type
        )

        if not attachment:
            raise HTTPException(status_code=404, detail="Task not found")

        return ok(attachment)
    except Exception as e:
        raise to_http_exception(e)


@router.delete("/attachments/{attachment_id}")
async def delete_attachment(attachment_id: str, user: user_dependency, db: db_dependency, storage: storage_dependency):
    try:
        if not TaskService(db, user, storage).delete_attachment(attachment_id):
            raise HTTPException(status_code=404, detail="Attachment not found")

        return ok()
    except Exception as e:
        raise to_http_exception(e)
