"""
Portal Programs Views Package

Catalogue, free claims, purchases, progress tracking and signed URLs for
protected program content.

Author: Portal Development Team
Version: 1.0.0
"""

from .claim_views import ClaimProductView
from .content_url_views import (
    VideoUrlView,
    WorkbookPagesView,
    WorkbookPdfView,
    WorkbookVideoUrlView,
    WorkbookVideoLookupView,
    PrintableDownloadView,
    BonusDownloadView,
    ProgramGuideView,
)
from .progress_views import VideoProgressView, WorkbookProgressView, ProductProgressView
from .purchase_views import ProductListView, PurchaseListView
