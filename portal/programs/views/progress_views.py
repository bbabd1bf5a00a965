"""
Progress Views

- VideoProgressView: POST {progressPercent} -> {success, progress, completed}
- WorkbookProgressView: POST {lastViewedPage} -> {success, progress, completed}
- ProductProgressView: GET the user's progress records of one product

The player fires progress updates every few seconds and on unload, so the
write endpoints are cheap upserts without an entitlement check.
"""

import logging

from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import ResourceNotFoundException
from portal.services.progress_service import record_video_progress, record_workbook_progress

from ..models import Product, Video, VideoProgress, Workbook, WorkbookProgress
from ..serializers import (
    VideoProgressInputSerializer,
    VideoProgressSerializer,
    WorkbookProgressInputSerializer,
    WorkbookProgressSerializer,
)

logger = logging.getLogger(__name__)


class VideoProgressView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request: Request, video_id: int) -> Response:
        serializer = VideoProgressInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        video = Video.objects.filter(pk=video_id).first()
        if video is None:
            raise ResourceNotFoundException("Video")

        result = record_video_progress(request.user, video, serializer.validated_data["progressPercent"])
        return Response({"success": True, "progress": result.progress, "completed": result.completed})


class WorkbookProgressView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request: Request, workbook_id: int) -> Response:
        serializer = WorkbookProgressInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        workbook = Workbook.objects.filter(pk=workbook_id).first()
        if workbook is None:
            raise ResourceNotFoundException("Workbook")

        result = record_workbook_progress(request.user, workbook, serializer.validated_data["lastViewedPage"])
        return Response({"success": True, "progress": result.progress, "completed": result.completed})


class ProductProgressView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request: Request, slug: str) -> Response:
        product = Product.objects.filter(slug=slug).first()
        if product is None:
            raise ResourceNotFoundException("Product")

        videos = VideoProgress.objects.filter(user=request.user, video__product=product).order_by("video__order")
        workbooks = WorkbookProgress.objects.filter(user=request.user, workbook__product=product).order_by(
            "workbook__order"
        )
        return Response(
            {
                "product": product.slug,
                "videos": VideoProgressSerializer(videos, many=True).data,
                "workbooks": WorkbookProgressSerializer(workbooks, many=True).data,
            }
        )
