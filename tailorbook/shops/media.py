"""Image upload checks and best-effort file cleanup for shop logos and style references"""
import logging

from rest_framework import serializers

logger = logging.getLogger('tailorbook.media')


def validate_image_size(image, max_bytes):
    if image and image.size > max_bytes:
        limit_mb = max_bytes // (1024 * 1024)
        raise serializers.ValidationError(f"Image must be {limit_mb}MB or smaller.")
    return image


def delete_file(field_file):
    """Remove a stored file. Failures are logged, never raised."""
    if not field_file or not field_file.name:
        return False
    name = field_file.name
    try:
        field_file.storage.delete(name)
        logger.info(f"Deleted media file {name}")
        return True
    except Exception as e:
        logger.warning(f"Could not delete media file {name}: {str(e)}")
        return False
