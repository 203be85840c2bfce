from fastapi import APIRouter, HTTPException, status
from ...services.category_service import CategoryService
from ...services.auth import user_dependency
from ...db.base import db_dependency
from ...schemas.category import Category, CategoryCreate, CategoryUpdate
from ..errors import ok, to_http_exception

router = APIRouter(tags=['categories'])


@router.get("/boards/{board_id}/categories")
async def list_categories(board_id: str, user: user_dependency, db: db_dependency):
    try:
        categories = CategoryService(db, user).get_categories(board_id)

        if categories is None:
            raise HTTPException(status_code=404, detail="Board not found")

        return ok([Category.model_validate(c) for c in categories])
    except Exception as e:
        raise to_http_exception(e)


@router.post("/boards/{board_id}/categories", status_code=status.HTTP_201_CREATED)
async def create_category(board_id: str, category_data: CategoryCreate, user: user_dependency, db: db_dependency):
    try:
        category = CategoryService(db, user).create_category(board_id, category_data)

        if not category:
            raise HTTPException(status_code=404, detail="Board not found")

        return ok(Category.model_validate(category))
    except Exception as e:
        raise to_http_exception(e)


@router.patch("/categories/{category_id}")
async def update_category(category_id: str, category_data: CategoryUpdate, user: user_dependency, db: db_dependency):
    try:
        category = CategoryService(db, user).update_category(category_id, category_data)

        if not category:
            raise HTTPException(status_code=404, detail="Category not found")

        return ok(Category.model_validate(category))
    except Exception as e:
        raise to_http_exception(e)


@router.delete("/categories/{category_id}")
async def delete_category(category_id: str, user: user_dependency, db: db_dependency):
    try:
        if not CategoryService(db, user).delete_category(category_id):
            raise HTTPException(status_code=404, detail="Category not found")

        return ok()
    except Exception as e:
        raise to_http_exception(e)
