"""
Cloud Storage Services Package

Signed URL issuance for protected program assets in the S3 compatible
content bucket.

Author: Portal Development Team
Version: 1.0.0
"""

from .signed_url_service import SignedUrlService

__all__ = ["SignedUrlService"]
