"""
Image Optimization Service
Resize venue photos and strip metadata before they are hosted
"""

import logging
from io import BytesIO
from PIL import Image
from typing import Tuple

logger = logging.getLogger(__name__)


class ImageOptimizer:
    """Resize + re-encode: JPEG for photos, PNG when there is transparency"""

    MAX_DIMENSION = 1920  # Max width or height
    JPEG_QUALITY = 85

    @staticmethod
    def optimize(image_bytes: bytes, content_type: str = "image/jpeg") -> Tuple[bytes, str, str]:
        """
        Optimize an uploaded image.

        Returns:
            Tuple of (optimized_bytes, content_type, file_extension)
        """
        try:
            img = Image.open(BytesIO(image_bytes))
            has_transparency = img.mode in ('RGBA', 'LA') or (img.mode == 'P' and 'transparency' in img.info)

            # thumbnail keeps the aspect ratio and never upscales
            img.thumbnail((ImageOptimizer.MAX_DIMENSION, ImageOptimizer.MAX_DIMENSION), Image.Resampling.LANCZOS)

            output = BytesIO()
            if has_transparency:
                img.save(output, format='PNG', optimize=True)
                return output.getvalue(), "image/png", ".png"

            if img.mode != 'RGB':
                img = img.convert('RGB')
            img.save(output, format='JPEG', quality=ImageOptimizer.JPEG_QUALITY, optimize=True)
            return output.getvalue(), "image/jpeg", ".jpg"

        except Exception as e:
            logger.warning("Image optimization failed, uploading original: %s", e)
            extension = "." + (content_type.split("/")[-1] if "/" in content_type else "bin")
            return image_bytes, content_type, extension


# Singleton
image_optimizer = ImageOptimizer()
