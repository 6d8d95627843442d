"""
Storage Service
Supabase Storage integration for organization, turf and review images
"""

import asyncio
import logging
import uuid
from typing import List, Optional
import httpx
from fastapi import HTTPException, UploadFile, status
from app.config import settings
from app.services.image_optimizer import image_optimizer

logger = logging.getLogger(__name__)


class StorageService:
    """Supabase Storage helper"""

    @staticmethod
    def _ensure_config():
        if not settings.SUPABASE_URL or not settings.SUPABASE_KEY:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Image storage is not configured"
            )

    @staticmethod
    def _public_prefix() -> Optional[str]:
        if not settings.SUPABASE_URL:
            return None
        base = settings.SUPABASE_URL.rstrip("/")
        return f"{base}/storage/v1/object/public/{settings.STORAGE_BUCKET}/"

    @staticmethod
    def public_id_from_url(file_url: str) -> Optional[str]:
        """Storage path of a hosted image, None for URLs we do not host"""
        prefix = StorageService._public_prefix()
        if prefix and file_url.startswith(prefix):
            return file_url[len(prefix):]
        return None

    @staticmethod
    async def upload_bytes(path: str, content: bytes, content_type: str) -> str:
        StorageService._ensure_config()

        base = settings.SUPABASE_URL.rstrip("/")
        bucket = settings.STORAGE_BUCKET
        url = f"{base}/storage/v1/object/{bucket}/{path}"

        headers = {
            "Authorization": f"Bearer {settings.SUPABASE_KEY}",
            "apikey": settings.SUPABASE_KEY,
            "Content-Type": content_type or "application/octet-stream",
            "x-upsert": "true"
        }

        try:
            async with httpx.AsyncClient(timeout=30) as client:
                resp = await client.post(url, headers=headers, content=content)
        except httpx.HTTPError as e:
            logger.error("Image upload to %s failed: %s", path, e)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Image upload failed"
            )

        if resp.status_code not in (200, 201):
            logger.error("Image upload to %s rejected (%s): %s", path, resp.status_code, resp.text)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Image upload failed"
            )

        return f"{base}/storage/v1/object/public/{bucket}/{path}"

    @staticmethod
    async def upload_image(image: UploadFile, folder: str) -> str:
        """Validate, optimize and upload one image, returning its public URL"""
        content_type = image.content_type or ""
        if content_type not in settings.allowed_image_types:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Unsupported image type '{content_type}' for {image.filename}"
            )

        content = await image.read()
        if len(content) > settings.MAX_UPLOAD_SIZE:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Image {image.filename} exceeds {settings.MAX_UPLOAD_SIZE} bytes"
            )

        optimized, optimized_type, extension = image_optimizer.optimize(content, content_type)
        path = f"{folder}/{uuid.uuid4().hex}{extension}"
        return await StorageService.upload_bytes(path, optimized, optimized_type)

    @staticmethod
    async def upload_images(images: Optional[List[UploadFile]], folder: str) -> List[str]:
        """Upload all images concurrently; any failure fails the whole call"""
        if not images:
            return []
        if len(images) > settings.MAX_IMAGES_PER_UPLOAD:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"At most {settings.MAX_IMAGES_PER_UPLOAD} images can be uploaded at once"
            )
        return list(await asyncio.gather(
            *(StorageService.upload_image(image, folder) for image in images)
        ))

    @staticmethod
    async def delete_path(path: str) -> None:
        StorageService._ensure_config()

        base = settings.SUPABASE_URL.rstrip("/")
        bucket = settings.STORAGE_BUCKET
        url = f"{base}/storage/v1/object/{bucket}/{path}"

        headers = {
            "Authorization": f"Bearer {settings.SUPABASE_KEY}",
            "apikey": settings.SUPABASE_KEY
        }

        try:
            async with httpx.AsyncClient(timeout=30) as client:
                resp = await client.delete(url, headers=headers)
        except httpx.HTTPError as e:
            logger.error("Image delete of %s failed: %s", path, e)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Image delete failed"
            )

        if resp.status_code not in (200, 204, 404):
            logger.error("Image delete of %s rejected (%s): %s", path, resp.status_code, resp.text)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Image delete failed"
            )

    @staticmethod
    async def delete_by_url(file_url: str) -> None:
        path = StorageService.public_id_from_url(file_url)
        if path is None:
            # Not one of ours (external URL), nothing to release
            return
        await StorageService.delete_path(path)

    @staticmethod
    async def delete_images(urls: List[str]) -> None:
        """Release hosted images concurrently"""
        if not urls:
            return
        await asyncio.gather(*(StorageService.delete_by_url(url) for url in urls))
