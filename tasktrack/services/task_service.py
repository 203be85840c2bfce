from sqlalchemy.orm import Session
from datetime import datetime
from pathlib import PurePath
from typing import List, Optional
import time
from ..db.models.task import Task, TaskCategory, TaskAssignee
from ..db.models.category import Category
from ..db.models.comment import Comment
from ..db.models.attachment import Attachment
from ..db.models.user import User
from ..schemas.task import Task as TaskSchema, TaskCreate, TaskUpdate
from ..schemas.attachment import Attachment as AttachmentSchema
from ..schemas.category import Category as CategorySchema
from ..schemas.user import UserSummary
from ..core.constants import ColumnId
from ..utils.logger import get_logger
from .board_service import BoardService, parse_id
from .storage import LocalStorage, StorageError, get_storage

logger = get_logger(__name__)

SCALAR_FIELDS = ("title", "description", "priority", "column_id", "due_date")


class TaskService:
    def __init__(self, db: Session, user: User, storage: Optional[LocalStorage] = None):
        self.db = db
        self.user = user
        self.storage = storage or get_storage()
        self.boards = BoardService(db, user, self.storage)

    # Lookups

    def get_task_by_id(self, task_id) -> Optional[Task]:
        task = self.db.query(Task).filter(Task.id == parse_id(task_id)).first()
        if not task:
            logger.warning(f"Task {task_id} not found")
            return None

        board, _ = self.boards.get_accessible_board(task.board_id)
        if not board:
            return None
        return task

    def _get_writable_task(self, task_id) -> Optional[Task]:
        task = self.get_task_by_id(task_id)
        if not task or not self.boards.get_writable_board(task.board_id):
            return None
        return task

    # Tasks

    def get_tasks_by_board(self, board_id) -> Optional[List[TaskSchema]]:
        board, _ = self.boards.get_accessible_board(board_id)
        if not board:
            return None

        tasks = self.db.query(Task).filter(
            Task.board_id == board.id
        ).order_by(Task.due_date.asc(), Task.id.asc()).all()

        logger.info(f"Retrieved {len(tasks)} tasks for board {board.id}")
        return [self.to_schema(task) for task in tasks]

    def get_task(self, task_id) -> Optional[TaskSchema]:
        task = self.get_task_by_id(task_id)
        return self.to_schema(task) if task else None

    def create_task(self, board_id, task_data: TaskCreate) -> Optional[TaskSchema]:
        board = self.boards.get_writable_board(board_id)
        if not board:
            return None

        category_ids = self._validate_category_ids(board.id, task_data.category_ids)
        # The creator is assigned when nobody else is
        assignee_ids = self._validate_assignee_ids(task_data.assignee_ids) or [self.user.id]

        try:
            task = Task(
                board_id=board.id,
                title=task_data.title,
                description=task_data.description,
                priority=task_data.priority.value,
                column_id=task_data.column_id.value,
                due_date=task_data.due_date,
                created_by=self.user.id
            )
            self.db.add(task)
            self.db.flush()

            self._insert_relations(task.id, category_ids, assignee_ids)

            self.db.commit()
            self.db.refresh(task)

            logger.info(f"Task created: {task.id} - {task.title}")
            return self.to_schema(task)

        except Exception as e:
            self.db.rollback()
            logger.error(f"Error creating task: {e}")
            raise

    def update_task(self, task_id, task_data: TaskUpdate) -> Optional[TaskSchema]:
        task = self._get_writable_task(task_id)
        if not task:
            return None

        update_data = task_data.model_dump(exclude_unset=True)
        category_ids = update_data.pop("category_ids", None)
        assignee_ids = update_data.pop("assignee_ids", None)

        if category_ids is not None:
            category_ids = self._validate_category_ids(task.board_id, category_ids)
        if assignee_ids is not None:
            assignee_ids = self._validate_assignee_ids(assignee_ids)

        try:
            scalar_changed = False
            for field, value in update_data.items():
                if field not in SCALAR_FIELDS or value is None:
                    continue
                setattr(task, field, value.value if hasattr(value, "value") else value)
                scalar_changed = True

            if scalar_changed:
                task.updated_at = datetime.utcnow()

            # Relations are replaced wholesale, never diffed
            if category_ids is not None:
                self.db.query(TaskCategory).filter(TaskCategory.task_id == task.id).delete(synchronize_session=False)
                self.db.expire(task, ["task_categories"])
                self._insert_relations(task.id, category_ids, [])
            if assignee_ids is not None:
                self.db.query(TaskAssignee).filter(TaskAssignee.task_id == task.id).delete(synchronize_session=False)
                self.db.expire(task, ["task_assignees"])
                self._insert_relations(task.id, [], assignee_ids)

            self.db.commit()
            self.db.expire(task)
            self.db.refresh(task)

            logger.info(f"Task updated: {task.id}")
            return self.to_schema(task)

        except Exception as e:
            self.db.rollback()
            logger.error(f"Error updating task {task_id}: {e}")
            raise

    def update_task_column(self, task_id, column_id: ColumnId) -> Optional[TaskSchema]:
        task = self._get_writable_task(task_id)
        if not task:
            return None

        try:
            task.column_id = ColumnId(column_id).value
            task.updated_at = datetime.utcnow()
            self.db.commit()
            self.db.refresh(task)

            logger.info(f"Task {task.id} moved to {task.column_id}")
            return self.to_schema(task)

        except Exception as e:
            self.db.rollback()
            logger.error(f"Error moving task {task_id}: {e}")
            raise

    def delete_task(self, task_id) -> bool:
        task = self._get_writable_task(task_id)
        if not task:
            return False

        try:
            paths = [attachment.file_path for attachment in task.attachments]
            if paths:
                self.storage.remove(paths)

            self.db.delete(task)
            self.db.commit()

            logger.info(f"Task deleted: {task_id}")
            return True

        except Exception as e:
            self.db.rollback()
            logger.error(f"Error deleting task {task_id}: {e}")
            raise

    # Comments

    def get_comments(self, task_id) -> Optional[List[Comment]]:
        task = self.get_task_by_id(task_id)
        if not task:
            return None

        return self.db.query(Comment).filter(
            Comment.task_id == task.id
        ).order_by(Comment.created_at.asc(), Comment.id.asc()).all()

    def add_comment(self, task_id, text: str) -> Optional[Comment]:
        task = self._get_writable_task(task_id)
        if not task:
            return None

        try:
            comment = Comment(task_id=task.id, author_id=self.user.id, text=text)
            self.db.add(comment)
            self.db.commit()
            self.db.refresh(comment)

            logger.info(f"Comment {comment.id} added to task {task.id}")
            return comment

        except Exception as e:
            self.db.rollback()
            logger.error(f"Error adding comment to task {task_id}: {e}")
            raise

    # Attachments

    def get_attachments(self, task_id) -> Optional[List[AttachmentSchema]]:
        task = self.get_task_by_id(task_id)
        if not task:
            return None

        attachments = self.db.query(Attachment).filter(
            Attachment.task_id == task.id
        ).order_by(Attachment.created_at.asc(), Attachment.id.asc()).all()
        return [self.attachment_to_schema(a) for a in attachments]

    def upload_attachment(
        self,
        task_id,
        filename: str,
        content: bytes,
        content_type: Optional[str] = None
    ) -> Optional[AttachmentSchema]:
        task = self._get_writable_task(task_id)
        if not task:
            return None

        name = PurePath(filename or "file").name
        path = f"{task.id}/{int(time.time() * 1000)}_{name}"
        self.storage.upload(path, content)

        try:
            attachment = Attachment(
                task_id=task.id,
                name=name,
                file_path=path,
                file_size=len(content),
                file_type=content_type or "unknown",
                uploaded_by=self.user.id
            )
            self.db.add(attachment)
            self.db.commit()
            self.db.refresh(attachment)

            logger.info(f"Attachment {attachment.id} uploaded to task {task.id}")
            return self.attachment_to_schema(attachment)

        except Exception as e:
            self.db.rollback()
            self.storage.remove([path])
            logger.error(f"Error saving attachment for task {task_id}, blob removed: {e}")
            raise

    def get_attachment_by_id(self, attachment_id) -> Optional[Attachment]:
        attachment = self.db.query(Attachment).filter(Attachment.id == parse_id(attachment_id)).first()
        if not attachment:
            logger.warning(f"Attachment {attachment_id} not found")
            return None
        if not self.get_task_by_id(attachment.task_id):
            return None
        return attachment

    def delete_attachment(self, attachment_id) -> bool:
        attachment = self.get_attachment_by_id(attachment_id)
        if not attachment or not self._get_writable_task(attachment.task_id):
            return False

        try:
            self.storage.remove([attachment.file_path])
        except (OSError, StorageError) as e:
            # The record is removed even when the blob could not be
            logger.error(f"Error removing blob {attachment.file_path}: {e}")

        try:
            self.db.delete(attachment)
            self.db.commit()

            logger.info(f"Attachment deleted: {attachment_id}")
            return True

        except Exception as e:
            self.db.rollback()
            logger.error(f"Error deleting attachment {attachment_id}: {e}")
            raise

    # Helpers

    def _validate_category_ids(self, board_id: int, category_ids: List[str]) -> List[int]:
        ids = []
        for raw_id in category_ids:
            category_id = parse_id(raw_id)
            if category_id is None:
                raise ValueError(f"Invalid category id: {raw_id}")
            if category_id not in ids:
                ids.append(category_id)

        if ids:
            found = {
                cid for (cid,) in self.db.query(Category.id).filter(
                    Category.board_id == board_id,
                    Category.id.in_(ids)
                ).all()
            }
            missing = [cid for cid in ids if cid not in found]
            if missing:
                raise ValueError(f"Categories not found on this board: {missing}")
        return ids

    def _validate_assignee_ids(self, assignee_ids: List[str]) -> List[int]:
        ids = []
        for raw_id in assignee_ids:
            user_id = parse_id(raw_id)
            if user_id is None:
                raise ValueError(f"Invalid user id: {raw_id}")
            if user_id not in ids:
                ids.append(user_id)

        if ids:
            found = {uid for (uid,) in self.db.query(User.id).filter(User.id.in_(ids)).all()}
            missing = [uid for uid in ids if uid not in found]
            if missing:
                raise ValueError(f"Users not found: {missing}")
        return ids

    def _insert_relations(self, task_id: int, category_ids: List[int], assignee_ids: List[int]):
        for category_id in category_ids:
            self.db.add(TaskCategory(task_id=task_id, category_id=category_id))
        for user_id in assignee_ids:
            self.db.add(TaskAssignee(task_id=task_id, user_id=user_id))
        self.db.flush()

    def attachment_to_schema(self, attachment: Attachment) -> AttachmentSchema:
        schema = AttachmentSchema.model_validate(attachment)
        schema.url = self.storage.create_signed_url(attachment.file_path)
        return schema

    def to_schema(self, task: Task) -> TaskSchema:
        return TaskSchema(
            id=task.id,
            title=task.title,
            description=task.description or "",
            priority=task.priority,
            column_id=task.column_id,
            due_date=task.due_date,
            board_id=task.board_id,
            assignees=[UserSummary.model_validate(ta.user) for ta in task.task_assignees if ta.user],
            categories=[CategorySchema.model_validate(tc.category) for tc in task.task_categories if tc.category],
            comments=len(task.comments),
            attachments=len(task.attachments)
        )
