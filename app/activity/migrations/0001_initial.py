# Generated manually - activity log table

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Activity",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "action",
                    models.CharField(
                        db_index=True, help_text="Dotted action name", max_length=100
                    ),
                ),
                (
                    "subject_kind",
                    models.CharField(help_text="Registered subject kind", max_length=50),
                ),
                (
                    "subject_id",
                    models.BigIntegerField(help_text="Primary key of the subject"),
                ),
                (
                    "properties",
                    models.JSONField(
                        blank=True,
                        default=dict,
                        help_text="Additional context for the action",
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="When the action was recorded",
                    ),
                ),
                (
                    "actor",
                    models.ForeignKey(
                        blank=True,
                        help_text="User who performed the action",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="activities",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name_plural": "activities",
                "db_table": "activities",
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(
                        fields=["subject_kind", "subject_id", "-created_at"],
                        name="activity_subject_idx",
                    )
                ],
            },
        ),
    ]
