#app/services/cover_storage.py


import boto3
from botocore.exceptions import ClientError
import logging
import os
import re
import uuid
from app.core.config import settings

logger = logging.getLogger(__name__)

COVERS_FOLDER = "covers"

IMAGE_CONTENT_TYPES = {
    'jpg': 'image/jpeg',
    'jpeg': 'image/jpeg',
    'png': 'image/png',
    'gif': 'image/gif',
    'webp': 'image/webp',
    'svg': 'image/svg+xml',
    'heic': 'image/heic',
}


def secure_filename(filename: str) -> str:
    """Secure a filename by removing/replacing unsafe characters"""
    filename = os.path.basename(filename)
    filename = re.sub(r'[^\w\s.-]', '', filename)
    filename = filename.strip('. ')
    return filename[:255] if filename else 'unnamed'


def image_content_type(filename: str):
    """Content type for an allowed image filename, else None"""
    if '.' not in filename:
        return None
    return IMAGE_CONTENT_TYPES.get(filename.rsplit('.', 1)[1].lower())


def cover_object_key(filename: str) -> str:
    return f"{COVERS_FOLDER}/{uuid.uuid4()}_{secure_filename(filename)}"


def upload_cover(content: bytes, filename: str):
    """
    Upload a cover image to Spaces with public-read ACL.

    Returns (success, public_url_or_error, object_key).
    """
    content_type = image_content_type(filename)
    if content_type is None:
        return False, "Invalid file type. Allowed: " + ", ".join(sorted(IMAGE_CONTENT_TYPES)), None

    object_key = cover_object_key(filename)

    try:
        client = boto3.client(
            's3',
            endpoint_url=settings.DO_SPACES_ENDPOINT,
            aws_access_key_id=settings.DO_SPACES_ACCESS_KEY_ID,
            aws_secret_access_key=settings.DO_SPACES_SECRET_KEY,
        )
        client.put_object(
            Bucket=settings.DO_SPACES_BUCKET_NAME,
            Key=object_key,
            Body=content,
            ContentType=content_type,
            ACL='public-read',
        )
    except ClientError as e:
        logger.error(f"Cover upload failed for {filename}: {e}")
        return False, str(e), None
    except Exception as e:
        logger.error(f"Unexpected error uploading cover {filename}: {e}")
        return False, f"Unexpected error: {str(e)}", None

    public_url = f"{settings.DO_SPACES_CDN_URL}/{settings.DO_SPACES_BUCKET_NAME}/{object_key}"
    logger.info(f"Cover uploaded: {object_key}")
    return True, public_url, object_key
