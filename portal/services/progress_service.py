"""
Progress Tracker

Records how far a user got in a video or workbook. Records are upserted per
(user, item); the last write wins. Completion is always derived from the
stored position, never taken from the client.
"""

import logging
from dataclasses import dataclass

from django.conf import settings
from django.utils import timezone

from portal.programs.models import Video, VideoProgress, Workbook, WorkbookProgress

logger = logging.getLogger(__name__)

VIDEO_COMPLETION_THRESHOLD = getattr(settings, "VIDEO_COMPLETION_THRESHOLD", 90)


@dataclass(frozen=True)
class ProgressResult:
    progress: int
    completed: bool


def clamp(value: int, lower: int, upper=None) -> int:
    value = max(lower, value)
    if upper is not None:
        value = min(upper, value)
    return value


def record_video_progress(user, video: Video, percent) -> ProgressResult:
    """
    Upsert the playback position of ``user`` in ``video``.

    ``percent`` is clamped to [0, 100]; the video counts as completed at
    ``VIDEO_COMPLETION_THRESHOLD`` percent or more.
    """
    progress = clamp(int(round(float(percent))), 0, 100)
    completed = progress >= VIDEO_COMPLETION_THRESHOLD

    VideoProgress.objects.update_or_create(
        user=user,
        video=video,
        defaults={
            "progress_percent": progress,
            "completed": completed,
            "last_watched_at": timezone.now(),
        },
    )
    logger.debug("Video progress user=%s video=%s progress=%s", user.pk, video.pk, progress)
    return ProgressResult(progress=progress, completed=completed)


def record_workbook_progress(user, workbook: Workbook, page) -> ProgressResult:
    """
    Upsert the reading position of ``user`` in ``workbook``.

    ``page`` is clamped to [1, total_pages]. Workbooks without a known page
    count (single PDFs) are only clamped from below and never complete.
    """
    total_pages = workbook.total_pages or None
    page = clamp(int(page), 1, total_pages)
    completed = total_pages is not None and page >= total_pages

    WorkbookProgress.objects.update_or_create(
        user=user,
        workbook=workbook,
        defaults={
            "last_viewed_page": page,
            "completed": completed,
            "last_viewed_at": timezone.now(),
        },
    )
    logger.debug("Workbook progress user=%s workbook=%s page=%s", user.pk, workbook.pk, page)
    return ProgressResult(progress=page, completed=completed)
