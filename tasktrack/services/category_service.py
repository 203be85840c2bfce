from sqlalchemy.orm import Session
from typing import List, Optional
from ..db.models.category import Category
from ..db.models.user import User
from ..schemas.category import CategoryCreate, CategoryUpdate
from ..utils.logger import get_logger
from .board_service import BoardService, parse_id

logger = get_logger(__name__)


class CategoryService:
    def __init__(self, db: Session, user: User):
        self.db = db
        self.user = user
        self.boards = BoardService(db, user)

    def get_categories(self, board_id) -> Optional[List[Category]]:
        board, _ = self.boards.get_accessible_board(board_id)
        if not board:
            return None
        return list(board.categories)

    def get_category(self, category_id) -> Optional[Category]:
        category = self.db.query(Category).filter(Category.id == parse_id(category_id)).first()
        if not category:
            logger.warning(f"Category {category_id} not found")
            return None

        board, _ = self.boards.get_accessible_board(category.board_id)
        if not board:
            return None
        return category

    def create_category(self, board_id, category_data: CategoryCreate) -> Optional[Category]:
        board = self.boards.get_writable_board(board_id)
        if not board:
            return None

        try:
            category = Category(
                board_id=board.id,
                name=category_data.name,
                color=category_data.color
            )
            self.db.add(category)
            self.db.commit()
            self.db.refresh(category)

            logger.info(f"Category created: {category.id} - {category.name} on board {board.id}")
            return category

        except Exception as e:
            self.db.rollback()
            logger.error(f"Error creating category on board {board_id}: {e}")
            raise

    def update_category(self, category_id, category_data: CategoryUpdate) -> Optional[Category]:
        category = self.get_category(category_id)
        if not category or not self.boards.get_writable_board(category.board_id):
            return None

        try:
            for field, value in category_data.model_dump(exclude_unset=True).items():
                if value is not None:
                    setattr(category, field, value)

            self.db.commit()
            self.db.refresh(category)

            logger.info(f"Category updated: {category.id}")
            return category

        except Exception as e:
            self.db.rollback()
            logger.error(f"Error updating category {category_id}: {e}")
            raise

    def delete_category(self, category_id) -> bool:
        category = self.get_category(category_id)
        if not category or not self.boards.get_writable_board(category.board_id):
            return False

        try:
            # task_categories rows go with it through ON DELETE CASCADE
            self.db.delete(category)
            self.db.commit()

            logger.info(f"Category deleted: {category_id}")
            return True

        except Exception as e:
            self.db.rollback()
            logger.error(f"Error deleting category {category_id}: {e}")
            raise
