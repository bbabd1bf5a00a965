"""
Portal Services Package

This package contains the domain services of the membership portal:
- Entitlement resolution (who may see which program content)
- Progress tracking for videos and workbooks
- Cloud storage signed URLs for protected assets
- Transactional email and CRM contact sync through Brevo

Structure:
├── entitlements.py          # Entitlement resolver and access predicate
├── progress_service.py      # Video/workbook progress upserts
├── cloud_storage/           # Signed URL issuance (S3 compatible)
└── notifications/           # Brevo email and contact client

Author: Portal Development Team
Version: 1.0.0
"""

from .entitlements import Entitlement, Tier, resolve_entitlement, require_access
from .progress_service import (
    VIDEO_COMPLETION_THRESHOLD,
    ProgressResult,
    record_video_progress,
    record_workbook_progress,
)

__all__ = [
    # Entitlements
    "Entitlement",
    "Tier",
    "resolve_entitlement",
    "require_access",
    # Progress
    "VIDEO_COMPLETION_THRESHOLD",
    "ProgressResult",
    "record_video_progress",
    "record_workbook_progress",
]
