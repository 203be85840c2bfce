"""
Object storage for task attachments.

Files live under <STORAGE_ROOT>/<bucket>/<path>. The bucket is private:
downloads go through signed URLs that carry a short-lived JWT instead of the
path so they can be handed out without exposing the bucket layout.
"""
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Annotated, List, Optional
from fastapi import Depends
import jwt
from ..core.config import STORAGE_ROOT, PUBLIC_BASE_URL, SECRET_KEY, JWT_ALGORITHM, SIGNED_URL_EXPIRES_IN
from ..core.constants import ATTACHMENTS_BUCKET
from ..utils.logger import get_logger

logger = get_logger(__name__)


class StorageError(Exception):
    pass


class LocalStorage:
    def __init__(self, root: str = STORAGE_ROOT, bucket: str = ATTACHMENTS_BUCKET, base_url: str = PUBLIC_BASE_URL):
        self.root = Path(root)
        self.bucket = bucket
        self.base_url = base_url.rstrip("/")
        self.bucket_dir = self.root / bucket
        self.bucket_dir.mkdir(parents=True, exist_ok=True)

    def resolve(self, path: str) -> Path:
        full_path = (self.bucket_dir / path).resolve()
        if self.bucket_dir.resolve() not in full_path.parents:
            raise StorageError(f"Path escapes bucket: {path}")
        return full_path

    def upload(self, path: str, content: bytes) -> str:
        target = self.resolve(path)
        if target.exists():
            raise StorageError(f"Object already exists: {path}")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)
        logger.info(f"Stored {len(content)} bytes at {self.bucket}/{path}")
        return path

    def remove(self, paths: List[str]) -> List[str]:
        """Remove objects by path. Missing objects are skipped."""
        removed = []
        for path in paths:
            target = self.resolve(path)
            if target.exists():
                target.unlink()
                removed.append(path)
            else:
                logger.warning(f"Object not found while removing: {self.bucket}/{path}")
        return removed

    def exists(self, path: str) -> bool:
        return self.resolve(path).exists()

    def create_signed_url(self, path: str, expires_in: int = SIGNED_URL_EXPIRES_IN) -> str:
        payload = {
            "bucket": self.bucket,
            "path": path,
            "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
        }
        token = jwt.encode(payload, SECRET_KEY, algorithm=JWT_ALGORITHM)
        return f"{self.base_url}/storage/signed/{token}"

    def verify_signed_token(self, token: str) -> Optional[str]:
        try:
            payload = jwt.decode(token, SECRET_KEY, algorithms=[JWT_ALGORITHM])
        except jwt.PyJWTError as e:
            logger.warning(f"Rejected signed url: {e}")
            return None
        if payload.get("bucket") != self.bucket:
            return None
        return payload.get("path")


_storage: Optional[LocalStorage] = None


def get_storage() -> LocalStorage:
    global _storage
    if _storage is None:
        _storage = LocalStorage()
    return _storage


storage_dependency = Annotated[LocalStorage, Depends(get_storage)]
