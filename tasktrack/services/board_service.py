from sqlalchemy.orm import Session
from datetime import date, datetime
from typing import List, Optional, Tuple, Union
from ..db.models.board import Board, BoardGuest
from ..db.models.category import Category
from ..db.models.task import Task
from ..db.models.attachment import Attachment
from ..db.models.user import User
from ..schemas.board import Board as BoardSchema, BoardCreate, BoardUpdate
from ..schemas.category import Category as CategorySchema
from ..core.constants import DEFAULT_CATEGORIES, GuestRole
from ..core.exceptions import AuthenticationError, AccessDeniedError, ConflictError
from ..utils.logger import get_logger
from .aggregation import compute_board_stats, deduplicate_boards
from .storage import LocalStorage, get_storage

logger = get_logger(__name__)

OWNER = "owner"


def parse_id(value) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class BoardService:
    def __init__(self, db: Session, user: Optional[User], storage: Optional[LocalStorage] = None):
        self.db = db
        self.user = user
        self.storage = storage

    def _require_user(self) -> User:
        if self.user is None:
            raise AuthenticationError("User not authenticated")
        return self.user

    # Reads

    def list_boards(self, today: Optional[Union[date, datetime]] = None) -> List[BoardSchema]:
        """Owned boards first (newest first), then boards shared with the user."""
        if self.user is None:
            return []

        try:
            owned = self.db.query(Board).filter(
                Board.owner_id == self.user.id
            ).order_by(Board.created_at.desc(), Board.id.desc()).all()

            shared = self.db.query(Board).join(
                BoardGuest, BoardGuest.board_id == Board.id
            ).filter(BoardGuest.user_id == self.user.id).all()

            boards = deduplicate_boards(owned + shared, key=lambda b: b.id)
            logger.info(f"Retrieved {len(boards)} boards for user {self.user.id}")
            return [self.to_schema(board, today) for board in boards]

        except Exception as e:
            # An empty list covers both "no boards" and "fetch failed"
            logger.error(f"Error fetching boards for user {self.user.id}: {e}")
            return []

    def get_board_by_id(self, board_id, today: Optional[Union[date, datetime]] = None) -> Optional[BoardSchema]:
        board, _ = self.get_accessible_board(board_id)
        if not board:
            return None
        return self.to_schema(board, today)

    def get_accessible_board(self, board_id) -> Tuple[Optional[Board], Optional[str]]:
        board_pk = parse_id(board_id)
        if board_pk is None or self.user is None:
            return None, None

        board = self.db.query(Board).filter(Board.id == board_pk).first()
        if not board:
            logger.warning(f"Board {board_id} not found")
            return None, None

        has_access, role = self.has_access(board, self.user.id)
        if not has_access:
            logger.warning(f"User {self.user.id} has no access to board {board_id}")
            return None, None

        return board, role

    def has_access(self, board: Board, user_id: int) -> Tuple[bool, Optional[str]]:
        if board.owner_id == user_id:
            return True, OWNER

        guest = self.db.query(BoardGuest).filter(
            BoardGuest.board_id == board.id,
            BoardGuest.user_id == user_id
        ).first()
        if guest:
            return True, guest.role

        return False, None

    def get_writable_board(self, board_id) -> Optional[Board]:
        board, role = self.get_accessible_board(board_id)
        if not board:
            return None
        if role == GuestRole.VIEWER:
            raise AccessDeniedError("Viewers cannot modify this board")
        return board

    # Writes

    def create_board(self, board_data: BoardCreate) -> BoardSchema:
        user = self._require_user()

        try:
            board = Board(
                title=board_data.title,
                description=board_data.description or "",
                theme=board_data.theme.value,
                icon=board_data.icon.value,
                owner_id=user.id
            )
            self.db.add(board)
            self.db.flush()

            for category in DEFAULT_CATEGORIES:
                self.db.add(Category(board_id=board.id, **category))

            self.db.commit()
            self.db.refresh(board)

            logger.info(f"Board created: {board.id} - {board.title}")
            return self.to_schema(board)

        except Exception as e:
            self.db.rollback()
            logger.error(f"Error creating board: {e}")
            raise

    def update_board(self, board_id, board_data: BoardUpdate) -> Optional[BoardSchema]:
        board = self.get_writable_board(board_id)
        if not board:
            return None

        try:
            for field, value in board_data.model_dump(exclude_unset=True).items():
                if value is None:
                    continue
                setattr(board, field, value.value if hasattr(value, "value") else value)

            self.db.commit()
            self.db.refresh(board)

            logger.info(f"Board updated: {board.id}")
            return self.to_schema(board)

        except Exception as e:
            self.db.rollback()
            logger.error(f"Error updating board {board_id}: {e}")
            raise

    def delete_board(self, board_id) -> bool:
        board, role = self.get_accessible_board(board_id)
        if not board:
            return False
        if role != OWNER:
            raise AccessDeniedError("Only the owner can delete a board")

        try:
            paths = [
                path for (path,) in self.db.query(Attachment.file_path).join(
                    Task, Task.id == Attachment.task_id
                ).filter(Task.board_id == board.id).all()
            ]
            if paths:
                (self.storage or get_storage()).remove(paths)

            self.db.delete(board)
            self.db.commit()

            logger.info(f"Board deleted: {board_id}")
            return True

        except Exception as e:
            self.db.rollback()
            logger.error(f"Error deleting board {board_id}: {e}")
            raise

    # Guests

    def list_guests(self, board_id) -> Optional[List[BoardGuest]]:
        board, _ = self.get_accessible_board(board_id)
        if not board:
            return None
        return list(board.guests)

    def invite_guest(self, board_id, email: str, role: GuestRole = GuestRole.VIEWER) -> Optional[BoardGuest]:
        board, board_role = self.get_accessible_board(board_id)
        if not board:
            return None
        if board_role != OWNER:
            raise AccessDeniedError("Only the owner can invite guests")

        invited = self.db.query(User).filter(User.email == email.strip().lower()).first()
        if not invited:
            raise ValueError("User not found with this email")
        if invited.id == board.owner_id:
            raise ConflictError("The owner cannot be a guest of their own board")

        existing = self.db.query(BoardGuest).filter(
            BoardGuest.board_id == board.id,
            BoardGuest.user_id == invited.id
        ).first()
        if existing:
            raise ConflictError("User is already a guest of this board")

        try:
            guest = BoardGuest(board_id=board.id, user_id=invited.id, role=GuestRole(role).value)
            self.db.add(guest)
            self.db.commit()
            self.db.refresh(guest)

            logger.info(f"User {invited.id} invited to board {board.id} as {guest.role}")
            return guest

        except Exception as e:
            self.db.rollback()
            logger.error(f"Error inviting {email} to board {board_id}: {e}")
            raise

    def update_guest_role(self, board_id, user_id, role: GuestRole) -> Optional[BoardGuest]:
        guest = self._get_owned_guest(board_id, user_id)
        if not guest:
            return None

        try:
            guest.role = GuestRole(role).value
            self.db.commit()
            self.db.refresh(guest)
            logger.info(f"Guest {user_id} on board {board_id} is now {guest.role}")
            return guest

        except Exception as e:
            self.db.rollback()
            logger.error(f"Error updating guest {user_id} on board {board_id}: {e}")
            raise

    def remove_guest(self, board_id, user_id) -> bool:
        guest = self._get_owned_guest(board_id, user_id)
        if not guest:
            return False

        try:
            self.db.delete(guest)
            self.db.commit()
            logger.info(f"Guest {user_id} removed from board {board_id}")
            return True

        except Exception as e:
            self.db.rollback()
            logger.error(f"Error removing guest {user_id} from board {board_id}: {e}")
            raise

    def _get_owned_guest(self, board_id, user_id) -> Optional[BoardGuest]:
        board, role = self.get_accessible_board(board_id)
        if not board:
            return None
        if role != OWNER:
            raise AccessDeniedError("Only the owner can manage guests")

        return self.db.query(BoardGuest).filter(
            BoardGuest.board_id == board.id,
            BoardGuest.user_id == parse_id(user_id)
        ).first()

    # Mapping

    def to_schema(self, board: Board, today: Optional[Union[date, datetime]] = None) -> BoardSchema:
        return BoardSchema(
            id=board.id,
            title=board.title,
            description=board.description or "",
            icon=board.icon,
            theme=board.theme,
            owner_id=board.owner_id,
            categories=[CategorySchema.model_validate(c) for c in board.categories],
            stats=compute_board_stats(board.tasks, today),
            guests=[g.user_id for g in board.guests]
        )
