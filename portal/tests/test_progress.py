"""
Progress Tracking Tests

Service level clamping / completion rules and the progress endpoints.
"""

from django.test import TestCase
from rest_framework import status
from rest_framework.test import APITestCase

from portal.programs.models import Video, VideoProgress, Workbook, WorkbookProgress
from portal.services.progress_service import record_video_progress, record_workbook_progress

from .helpers import make_product, make_user


class ProgressServiceTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.user = make_user()
        cls.product = make_product()
        cls.video = Video.objects.create(product=cls.product, title="Week 1", object_key="videos/week-1.mp4")
        cls.workbook = Workbook.objects.create(
            product=cls.product,
            title="Week 1: Lungs",
            slug="week-1-lungs",
            page_folder_key="workbooks/ofb/week-1-lungs",
            total_pages=8,
        )

    def test_video_progress_is_clamped_to_100(self):
        result = record_video_progress(self.user, self.video, 150)
        self.assertEqual(result.progress, 100)
        self.assertTrue(result.completed)

    def test_negative_video_progress_is_clamped_to_0(self):
        result = record_video_progress(self.user, self.video, -5)
        self.assertEqual(result.progress, 0)
        self.assertFalse(result.completed)

    def test_video_completes_at_threshold(self):
        self.assertFalse(record_video_progress(self.user, self.video, 89).completed)
        self.assertTrue(record_video_progress(self.user, self.video, 91).completed)

    def test_video_progress_is_upserted(self):
        record_video_progress(self.user, self.video, 10)
        record_video_progress(self.user, self.video, 45.6)

        records = VideoProgress.objects.filter(user=self.user, video=self.video)
        self.assertEqual(records.count(), 1)
        self.assertEqual(records.get().progress_percent, 46)

    def test_last_write_wins(self):
        record_video_progress(self.user, self.video, 95)
        record_video_progress(self.user, self.video, 20)

        record = VideoProgress.objects.get(user=self.user, video=self.video)
        self.assertEqual(record.progress_percent, 20)
        self.assertFalse(record.completed)

    def test_workbook_page_is_clamped_to_total_pages(self):
        result = record_workbook_progress(self.user, self.workbook, 42)
        self.assertEqual(result.progress, 8)
        self.assertTrue(result.completed)

    def test_workbook_page_is_at_least_one(self):
        result = record_workbook_progress(self.user, self.workbook, 0)
        self.assertEqual(result.progress, 1)
        self.assertFalse(result.completed)

    def test_workbook_without_page_count_never_completes(self):
        pdf_workbook = Workbook.objects.create(
            product=self.product,
            title="Guide",
            slug="guide",
            pdf_key="workbooks/ofb/guide.pdf",
        )
        result = record_workbook_progress(self.user, pdf_workbook, 300)
        self.assertEqual(result.progress, 300)
        self.assertFalse(result.completed)


class ProgressViewTests(APITestCase):
    @classmethod
    def setUpTestData(cls):
        cls.user = make_user()
        cls.product = make_product()
        cls.video = Video.objects.create(product=cls.product, title="Week 1", object_key="videos/week-1.mp4")
        cls.workbook = Workbook.objects.create(
            product=cls.product,
            title="Week 1: Lungs",
            slug="week-1-lungs",
            page_folder_key="workbooks/ofb/week-1-lungs",
            total_pages=8,
        )

    def setUp(self):
        self.client.force_authenticate(self.user)

    def test_video_progress_requires_login(self):
        self.client.force_authenticate(None)
        response = self.client.post(f"/api/videos/{self.video.pk}/progress/", {"progressPercent": 50}, format="json")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_video_progress_is_recorded(self):
        response = self.client.post(f"/api/videos/{self.video.pk}/progress/", {"progressPercent": 150}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json(), {"success": True, "progress": 100, "completed": True})

    def test_invalid_video_progress_is_rejected(self):
        response = self.client.post(
            f"/api/videos/{self.video.pk}/progress/", {"progressPercent": "half"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(
            response.json()["message"],
            "Invalid progress percent. Must be a number between 0 and 100.",
        )
        self.assertFalse(VideoProgress.objects.exists())

    def test_unknown_video_is_404(self):
        response = self.client.post("/api/videos/999/progress/", {"progressPercent": 10}, format="json")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_client_completed_flag_is_ignored(self):
        response = self.client.post(
            f"/api/workbooks/{self.workbook.pk}/progress/",
            {"lastViewedPage": 3, "completed": True},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json(), {"success": True, "progress": 3, "completed": False})
        self.assertFalse(WorkbookProgress.objects.get(user=self.user).completed)

    def test_invalid_workbook_page_is_rejected(self):
        response = self.client.post(
            f"/api/workbooks/{self.workbook.pk}/progress/", {"lastViewedPage": "x"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()["message"], "Invalid lastViewedPage")

    def test_product_progress_lists_own_records(self):
        other = make_user(email="other@example.com")
        record_video_progress(other, self.video, 80)
        record_video_progress(self.user, self.video, 30)
        record_workbook_progress(self.user, self.workbook, 8)

        response = self.client.get(f"/api/products/{self.product.slug}/progress/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        body = response.json()
        self.assertEqual(body["product"], self.product.slug)
        self.assertEqual(len(body["videos"]), 1)
        self.assertEqual(body["videos"][0]["progressPercent"], 30)
        self.assertEqual(body["workbooks"][0]["lastViewedPage"], 8)
        self.assertTrue(body["workbooks"][0]["completed"])
