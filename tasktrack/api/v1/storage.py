from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse
from ...services.storage import storage_dependency
from ...db.base import db_dependency
from ...db.models.attachment import Attachment

router = APIRouter(prefix='/storage', tags=['storage'])


@router.get("/signed/{token}")
async def download_signed(token: str, db: db_dependency, storage: storage_dependency):
    """The token is the credential; no bearer header is needed."""
    path = storage.verify_signed_token(token)
    if not path or not storage.exists(path):
        raise HTTPException(status_code=404, detail="File not found")

    attachment = db.query(Attachment).filter(Attachment.file_path == path).first()
    filename = attachment.name if attachment else path.rsplit("/", 1)[-1]
    media_type = attachment.file_type if attachment and attachment.file_type != "unknown" else None

    return FileResponse(storage.resolve(path), filename=filename, media_type=media_type)
