from starlette.middleware.sessions import SessionMiddleware
from fastapi import FastAPI, status
from tasktrack.db.base import engine, Base
from tasktrack.services.auth import user_dependency
from tasktrack.api.errors import register_exception_handlers, ok
from tasktrack.api.v1.auth import router as auth_router
from tasktrack.api.v1.users import router as users_router
from tasktrack.api.v1.boards import router as boards_router
from tasktrack.api.v1.categories import router as categories_router
from tasktrack.api.v1.tasks import router as tasks_router
from tasktrack.api.v1.storage import router as storage_router
from tasktrack.api.v1.priorities import router as priorities_router
from tasktrack.services.scheduler import start_scheduler, shutdown_scheduler, scheduler
from tasktrack.core.config import SECRET_KEY, CORS_ORIGINS, SCHEDULER_ENABLED
from tasktrack.schemas.user import UserProfile
from fastapi.middleware.cors import CORSMiddleware
import logging
import atexit

# Import all models to register them with SQLAlchemy
from tasktrack.db.models import (  # noqa: F401
    User, Board, BoardGuest, Category, Task, TaskCategory, TaskAssignee,
    Comment, Attachment, PriorityConfig, Reminder, ReminderDelivery
)

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")

app = FastAPI(title="TaskTrack API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(SessionMiddleware, secret_key=SECRET_KEY)

register_exception_handlers(app)

# Include routers
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(boards_router)
app.include_router(categories_router)
app.include_router(tasks_router)
app.include_router(storage_router)
app.include_router(priorities_router)

# Create tables
Base.metadata.create_all(bind=engine)


@app.on_event("startup")
async def startup_event():
    if SCHEDULER_ENABLED:
        start_scheduler()
        logging.info("Application started - Reminder scheduler running")


@app.on_event("shutdown")
async def shutdown_event():
    shutdown_scheduler()
    logging.info("Application shutdown - Scheduler stopped")


atexit.register(shutdown_scheduler)


@app.get("/", status_code=status.HTTP_200_OK)
async def root(user: user_dependency):
    return ok({"user": UserProfile.model_validate(user), "message": "Welcome to TaskTrack API"})


@app.get("/health", status_code=status.HTTP_200_OK)
async def health_check():
    return {"status": "healthy", "scheduler": "running" if scheduler.running else "stopped"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app="main:app", host="0.0.0.0", port=8000, reload=True)
