"""
Object storage for uploaded resume files.
S3 when AWS credentials are configured, local disk under upload_dir otherwise.
Objects live at resumes/{user_id}/{uuid}.{ext}; the same path is the S3 key.
"""
from pathlib import Path

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from resumedesk.app.core.config import settings
from resumedesk.app.core.logging_config import get_logger

logger = get_logger("services.storage")


class StorageError(RuntimeError):
    """Raised when a storage write or read fails."""


def _get_s3_client():
    """Get configured S3 client."""
    if not settings.storage_uses_s3:
        raise ValueError("AWS credentials not configured (AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY)")
    return boto3.client(
        "s3",
        aws_access_key_id=settings.aws_access_key_id,
        aws_secret_access_key=settings.aws_secret_access_key,
        region_name=settings.aws_region,
    )


def _local_path(storage_path: str) -> Path:
    base = Path(settings.upload_dir).resolve()
    path = (base / storage_path).resolve()
    if base not in path.parents:
        raise StorageError(f"Storage path escapes upload dir: {storage_path}")
    return path


def build_storage_path(user_id: int, file_name: str) -> str:
    """Owner-scoped object path, e.g. resumes/7/0b5e...pdf"""
    return f"{settings.s3_key_prefix}/{user_id}/{file_name}"


def public_url(storage_path: str) -> str:
    if settings.storage_uses_s3:
        return f"https://{settings.aws_bucket_name}.s3.{settings.aws_region}.amazonaws.com/{storage_path}"
    return f"{settings.public_base_url.rstrip('/')}/{settings.upload_dir.strip('/')}/{storage_path}"


def upload_file(file_buffer: bytes, storage_path: str, mime_type: str = "application/octet-stream") -> dict:
    """
    Write file_buffer at storage_path. Never overwrites an existing object.

    Returns:
        dict with key, url
    Raises:
        StorageError on any backend failure
    """
    logger.info(
        "Storage upload started backend=%s key=%s size_bytes=%d",
        "s3" if settings.storage_uses_s3 else "local",
        storage_path,
        len(file_buffer),
    )
    if settings.storage_uses_s3:
        try:
            s3 = _get_s3_client()
            s3.put_object(
                Bucket=settings.aws_bucket_name,
                Key=storage_path,
                Body=file_buffer,
                ContentType=mime_type,
            )
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "")
            msg = e.response.get("Error", {}).get("Message", str(e))
            logger.error(
                "S3 upload failed bucket=%s key=%s error_code=%s error_message=%s",
                settings.aws_bucket_name,
                storage_path,
                code,
                msg,
            )
            raise StorageError(f"S3 upload failed - {code}: {msg}") from e
        except BotoCoreError as e:
            logger.error("S3 upload failed bucket=%s key=%s error=%s", settings.aws_bucket_name, storage_path, e)
            raise StorageError(f"S3 upload failed - {e}") from e
    else:
        path = _local_path(storage_path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("xb") as fh:
                fh.write(file_buffer)
        except OSError as e:
            logger.error("Local upload failed path=%s error=%s", path, e)
            raise StorageError(f"Local upload failed - {e}") from e

    url = public_url(storage_path)
    logger.info("Storage upload success key=%s url=%s", storage_path, url)
    return {"key": storage_path, "url": url}


def read_file(storage_path: str) -> bytes:
    """Read an object's bytes. Raises FileNotFoundError when absent, StorageError on backend failure."""
    if settings.storage_uses_s3:
        try:
            s3 = _get_s3_client()
            obj = s3.get_object(Bucket=settings.aws_bucket_name, Key=storage_path)
            return obj["Body"].read()
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "")
            if code in ("NoSuchKey", "404"):
                raise FileNotFoundError(storage_path) from e
            logger.error("S3 read failed key=%s error_code=%s", storage_path, code)
            raise StorageError(f"S3 read failed - {code}") from e
        except BotoCoreError as e:
            raise StorageError(f"S3 read failed - {e}") from e
    path = _local_path(storage_path)
    if not path.exists():
        raise FileNotFoundError(storage_path)
    return path.read_bytes()


def delete_file(storage_path: str) -> bool:
    """Delete object by path. Returns True on success or when already absent."""
    if settings.storage_uses_s3:
        try:
            s3 = _get_s3_client()
            s3.delete_object(Bucket=settings.aws_bucket_name, Key=storage_path)
            logger.info("S3 delete success bucket=%s key=%s", settings.aws_bucket_name, storage_path)
            return True
        except (ClientError, BotoCoreError) as e:
            logger.error("S3 delete failed key=%s error=%s", storage_path, e)
            return False
    path = _local_path(storage_path)
    try:
        path.unlink(missing_ok=True)
        logger.info("Deleted local file path=%s", path)
        return True
    except OSError as e:
        logger.error("Failed to delete local file %s: %s", path, e)
        return False
