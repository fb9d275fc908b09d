"""Assistant avatar storage backed by a Supabase Storage bucket."""
from asyncio import to_thread
from typing import Optional
from urllib.parse import urlparse
from uuid import UUID, uuid4
from supabase import Client
from config.settings import settings
import logging

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}


def validate_image_url(image_url: str) -> str:
    """Return the trimmed URL if it is an absolute http(s) URL, else raise ValueError."""
    candidate = image_url.strip()
    parsed = urlparse(candidate)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError("Invalid image URL format")
    return candidate


class AvatarService:
    """Validate and upload assistant avatar images."""

    def __init__(self, supabase: Client, bucket: Optional[str] = None):
        self.supabase = supabase
        self.bucket = bucket or settings.SUPABASE_AVATAR_BUCKET

    async def upload(self, user_id: UUID, content: bytes, content_type: str) -> str:
        """Upload an image and return its public URL."""
        extension = ALLOWED_IMAGE_TYPES.get((content_type or "").lower())
        if extension is None:
            raise ValueError("Invalid file type. Please upload JPEG, PNG, or WebP images only.")
        if len(content) > settings.AVATAR_MAX_BYTES:
            raise ValueError("File size too large. Please upload images smaller than 5MB.")
        if not content:
            raise ValueError("Uploaded image is empty")

        path = f"{user_id}/{uuid4().hex}.{extension}"
        storage = self.supabase.storage.from_(self.bucket)
        await to_thread(
            lambda: storage.upload(path, content, {"content-type": content_type})
        )
        public_url = storage.get_public_url(path)
        logger.info(f"Uploaded assistant avatar for user {user_id} to {self.bucket}/{path}")
        return public_url
