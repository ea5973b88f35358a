import apps.orders.models
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("orders", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.AddField(
            model_name="order",
            name="has_complaint",
            field=models.BooleanField(default=False),
        ),
        migrations.CreateModel(
            name="OrderMessage",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("sender_name", models.CharField(max_length=200)),
                ("sender_role", models.CharField(max_length=20)),
                ("body", models.TextField(blank=True, default="")),
                (
                    "attachment",
                    models.FileField(blank=True, max_length=500, upload_to=apps.orders.models.order_message_upload_to),
                ),
                ("attachment_name", models.CharField(blank=True, default="", max_length=255)),
                ("attachment_content_type", models.CharField(blank=True, default="", max_length=120)),
                ("attachment_size", models.PositiveBigIntegerField(default=0)),
                ("is_read", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now, editable=False)),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="messages", to="orders.order"
                    ),
                ),
                (
                    "sender",
                    models.ForeignKey(
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="order_messages",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["created_at", "id"],
                "indexes": [models.Index(fields=["order", "is_read"], name="orders_message_unread_idx")],
            },
        ),
        migrations.CreateModel(
            name="OrderComplaint",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "complaint_type",
                    models.CharField(
                        choices=[
                            ("wrong-work", "Wrong work"),
                            ("delayed", "Delayed"),
                            ("poor-quality", "Poor quality"),
                            ("billing-issue", "Billing issue"),
                            ("other", "Other"),
                        ],
                        max_length=20,
                    ),
                ),
                ("description", models.TextField()),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("submitted", "Submitted"),
                            ("under-review", "Under review"),
                            ("resolved", "Resolved"),
                            ("rejected", "Rejected"),
                        ],
                        default="submitted",
                        max_length=20,
                    ),
                ),
                ("resolution", models.TextField(blank=True, default="")),
                (
                    "attachment",
                    models.FileField(blank=True, max_length=500, upload_to=apps.orders.models.complaint_upload_to),
                ),
                ("attachment_name", models.CharField(blank=True, default="", max_length=255)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now, editable=False)),
                ("updated_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="complaints", to="orders.order"
                    ),
                ),
                (
                    "submitted_by",
                    models.ForeignKey(
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="order_complaints",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at", "-id"],
            },
        ),
    ]
