"""
Signed URL Service

Issues time-limited download URLs for protected program assets (videos,
workbook PDFs and page images, printables, bonus downloads) stored in an
S3 compatible bucket. Objects are never public; the portal hands out a
signed URL only after the entitlement check succeeded.

Features:
- One boto3 client per process, built at start-up
- Key normalization (URL decoding, leading slashes, duplicate bucket prefix)
- Page-image URLs for workbooks stored as ``{folder}/{n}.png``

Author: Portal Development Team
Version: 1.0.0
"""

import logging
import urllib.parse
from typing import List, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from django.conf import settings

from core.exceptions import ConfigurationException, UpstreamServiceException

logger = logging.getLogger(__name__)


class SignedUrlService:
    """
    Presigned GET URLs for objects in the content bucket.

    Example:
        >>> service = SignedUrlService.from_settings()
        >>> service.issue_signed_url("programs/ofb/videos/week-1.mp4")
        'https://...X-Amz-Signature=...'
    """

    def __init__(
        self,
        bucket: str,
        region: Optional[str] = None,
        access_key: Optional[str] = None,
        secret_key: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        default_ttl: int = 3600,
        client=None,
    ) -> None:
        self.bucket = bucket
        self.default_ttl = default_ttl
        self.client = client or boto3.client(
            "s3",
            endpoint_url=endpoint_url,
            region_name=region,
            aws_access_key_id=access_key or None,
            aws_secret_access_key=secret_key or None,
            config=Config(signature_version="s3v4", s3={"addressing_style": "virtual"}),
        )

    @classmethod
    def from_settings(cls) -> "SignedUrlService":
        return cls(
            bucket=settings.AWS_S3_BUCKET,
            region=settings.AWS_REGION,
            access_key=settings.AWS_ACCESS_KEY_ID,
            secret_key=settings.AWS_SECRET_ACCESS_KEY,
            endpoint_url=settings.AWS_S3_ENDPOINT_URL,
            default_ttl=settings.SIGNED_URL_TTL_SECONDS,
        )

    def _normalize_key(self, key: str) -> str:
        """
        Normalize an object key.

        - URL decoding (e.g. %20 -> space)
        - strip leading slashes
        - drop a duplicated "<bucket>/" prefix
        """
        decoded = urllib.parse.unquote(key)
        trimmed = decoded.lstrip("/")
        bucket_prefix = f"{self.bucket}/"
        if trimmed.startswith(bucket_prefix):
            trimmed = trimmed[len(bucket_prefix):]
        return trimmed

    def issue_signed_url(self, key: str, ttl: Optional[int] = None) -> str:
        """
        Generate a presigned GET URL for ``key``.

        Args:
            key: Object key, e.g. "programs/ofb/workbooks/week-1.pdf"
            ttl: Validity in seconds (defaults to SIGNED_URL_TTL_SECONDS)

        Raises:
            ConfigurationException: no bucket or empty key
            UpstreamServiceException: the signing call failed
        """
        if not self.bucket:
            raise ConfigurationException("AWS_S3_BUCKET is not configured")
        if not key:
            raise ConfigurationException("Asset has no object key")

        normalized_key = self._normalize_key(key)
        try:
            return self.client.generate_presigned_url(
                ClientMethod="get_object",
                Params={"Bucket": self.bucket, "Key": normalized_key},
                ExpiresIn=ttl or self.default_ttl,
            )
        except (BotoCoreError, ClientError) as exc:
            logger.error("Failed to sign object key %s: %s", normalized_key, exc)
            raise UpstreamServiceException("s3", str(exc)) from exc

    def issue_page_urls(self, folder_key: str, total_pages: int, ttl: Optional[int] = None) -> List[str]:
        """Signed URLs for ``{folder}/1.png`` .. ``{folder}/{total_pages}.png``."""
        folder = folder_key.rstrip("/")
        return [
            self.issue_signed_url(f"{folder}/{page}.png", ttl=ttl)
            for page in range(1, total_pages + 1)
        ]
