from typing import Annotated
from fastapi import Depends
from sqlalchemy.orm import Session, declarative_base
from .session import engine, SessionLocal

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


db_dependency = Annotated[Session, Depends(get_db)]

__all__ = ["Base", "engine", "SessionLocal", "get_db", "db_dependency"]
