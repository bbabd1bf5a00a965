import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("portal", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="WorkbookVideo",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=255, verbose_name="Title")),
                ("description", models.TextField(blank=True, verbose_name="Description")),
                (
                    "object_key",
                    models.CharField(
                        blank=True,
                        db_index=True,
                        default="",
                        help_text="Object-store key of the video file",
                        max_length=500,
                        verbose_name="Object Key",
                    ),
                ),
                (
                    "page_number",
                    models.PositiveIntegerField(
                        blank=True,
                        help_text="Workbook page the video belongs to",
                        null=True,
                        verbose_name="Page Number",
                    ),
                ),
                ("order", models.PositiveIntegerField(default=0, verbose_name="Display Order")),
                (
                    "workbook",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="videos",
                        to="portal.workbook",
                        verbose_name="Workbook",
                    ),
                ),
            ],
            options={
                "verbose_name": "Workbook Video",
                "verbose_name_plural": "Workbook Videos",
                "ordering": ["workbook", "order", "id"],
                "db_table": "portal_workbook_video",
            },
        ),
    ]
