"""
Protected Content URL Views

Every endpoint here serves one kind of program asset and follows the same
sequence: look the item up (404), check the entitlement through
``require_access`` (403 with the sales page as redirect hint), check that
the item has an object key (404), then issue a time-limited signed URL.

Views:
- VideoUrlView: signed URL of a video
- WorkbookPagesView: signed URLs of all page images of a workbook
- WorkbookPdfView: signed URL of a workbook PDF
- WorkbookVideoUrlView: signed URL of a video embedded in a workbook
- WorkbookVideoLookupView: workbook video metadata by object key
- PrintableDownloadView: redirect to a printable PDF (or to the sales page)
- BonusDownloadView: signed URL of a product's bonus asset (full tier only)
- ProgramGuideView: public program guide PDF (lead magnet)

Author: Portal Development Team
Version: 1.0.0
"""

import logging

from django.http import HttpResponseRedirect
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import AccessDeniedException, BadRequestException, ResourceNotFoundException
from core.http import resolve_request_origin
from portal.services.clients import get_storage
from portal.services.entitlements import require_access

from ..models import Printable, Product, Video, Workbook, WorkbookVideo

logger = logging.getLogger(__name__)


def _get_or_404(queryset, resource: str, **lookup):
    obj = queryset.filter(**lookup).first()
    if obj is None:
        raise ResourceNotFoundException(resource)
    return obj


class VideoUrlView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request: Request, video_id: int) -> Response:
        video = _get_or_404(Video.objects.select_related("product"), "Video", pk=video_id)
        require_access(request.user, video.product)

        if not video.object_key:
            raise ResourceNotFoundException("Video", "Video not available. URL is missing.")

        url = get_storage().issue_signed_url(video.object_key)
        return Response({"url": url})


class WorkbookPagesView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request: Request, workbook_id: int) -> Response:
        workbook = _get_or_404(Workbook.objects.select_related("product"), "Workbook", pk=workbook_id)
        require_access(request.user, workbook.product, bonus=workbook.bonus_only)

        if not workbook.page_folder_key or not workbook.total_pages:
            raise ResourceNotFoundException("Workbook", "Workbook content not available")

        pages = get_storage().issue_page_urls(workbook.page_folder_key, workbook.total_pages)
        return Response(
            {
                "workbook": {
                    "id": workbook.pk,
                    "title": workbook.title,
                    "totalPages": workbook.total_pages,
                },
                "pages": pages,
            }
        )


class WorkbookPdfView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request: Request, workbook_id: int) -> Response:
        workbook = _get_or_404(Workbook.objects.select_related("product"), "Workbook", pk=workbook_id)
        require_access(request.user, workbook.product, bonus=workbook.bonus_only)

        if not workbook.pdf_key:
            raise ResourceNotFoundException("Workbook", "Workbook PDF not available")

        url = get_storage().issue_signed_url(workbook.pdf_key)
        return Response({"url": url, "workbook": {"id": workbook.pk, "title": workbook.title}})


class WorkbookVideoUrlView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request: Request, video_id: int) -> Response:
        video = _get_or_404(
            WorkbookVideo.objects.select_related("workbook__product"),
            "Video",
            pk=video_id,
        )
        require_access(request.user, video.workbook.product, bonus=video.workbook.bonus_only)

        if not video.object_key:
            raise ResourceNotFoundException("Video", "Video not available. URL is missing.")

        url = get_storage().issue_signed_url(video.object_key)
        return Response({"url": url})


class WorkbookVideoLookupView(APIView):
    """
    Resolve a workbook video from its object key, as embedded in workbook
    pages: ``GET /api/workbook-videos/lookup/?objectKey=...``.
    """

    permission_classes = [IsAuthenticated]

    def get(self, request: Request) -> Response:
        object_key = request.query_params.get("objectKey")
        if not object_key:
            raise BadRequestException("Missing objectKey parameter")

        video = (
            WorkbookVideo.objects.select_related("workbook__product")
            .filter(object_key=object_key)
            .order_by("id")
            .first()
        )
        if video is None:
            raise ResourceNotFoundException("Video", "Video not found for this object key")

        workbook = video.workbook
        require_access(request.user, workbook.product, bonus=workbook.bonus_only)

        return Response(
            {
                "id": video.pk,
                "title": video.title,
                "workbookId": workbook.pk,
                "workbookSlug": workbook.slug,
            }
        )


class PrintableDownloadView(APIView):
    """
    Browser download link: always answers with a redirect.

    - not logged in: login page
    - not entitled: the product's sales page
    - otherwise: the signed URL of the PDF
    """

    permission_classes = [AllowAny]

    def post(self, request: Request, printable_id: int):
        origin = resolve_request_origin(request)
        if not request.user.is_authenticated:
            return HttpResponseRedirect(f"{origin}/auth/login")

        printable = _get_or_404(Printable.objects.select_related("product"), "Printable", pk=printable_id)
        try:
            require_access(request.user, printable.product)
        except AccessDeniedException as e:
            return HttpResponseRedirect(f"{origin}{e.redirect_to}")

        logger.info("Printable %s downloaded by user %s", printable.pk, request.user.pk)
        return HttpResponseRedirect(get_storage().issue_signed_url(printable.object_key))

    def get(self, request: Request, printable_id: int):
        return self.post(request, printable_id)


class BonusDownloadView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request: Request, slug: str) -> Response:
        product = _get_or_404(Product.objects.all(), "Product", slug=slug)
        require_access(request.user, product, bonus=True)

        if not product.bonus_asset_key:
            raise ResourceNotFoundException("Bonus", "Bonus content not available")

        return Response({"url": get_storage().issue_signed_url(product.bonus_asset_key)})


class ProgramGuideView(APIView):
    """Public program guide; redirects to a signed URL of ``Product.guide_pdf_key``."""

    authentication_classes = []
    permission_classes = [AllowAny]

    def get(self, request: Request, slug: str):
        product = Product.objects.filter(slug=slug).first()
        if product is None or not product.guide_pdf_key:
            raise ResourceNotFoundException("Guide", "Program guide not found for this product")

        return HttpResponseRedirect(get_storage().issue_signed_url(product.guide_pdf_key))
