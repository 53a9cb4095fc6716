from django.db import models

from apps.common.models import BaseModel


class WebhookSource(models.TextChoices):
    STRIPE = "stripe", "Stripe"


class WebhookStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    PROCESSING = "processing", "Processing"
    COMPLETED = "completed", "Completed"
    FAILED = "failed", "Failed"


class WebhookEvent(BaseModel):
    """Processor event log. ``event_id`` is unique so a redelivered event is applied once."""

    event_id = models.CharField(max_length=255, unique=True)
    event_type = models.CharField(max_length=100)
    source = models.CharField(max_length=20, choices=WebhookSource.choices, default=WebhookSource.STRIPE)
    payload = models.JSONField()
    status = models.CharField(max_length=20, choices=WebhookStatus.choices, default=WebhookStatus.PENDING)
    error_message = models.TextField(blank=True, null=True)
    processed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "webhook_events"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["event_type", "status"]),
        ]

    def __str__(self):
        return f"{self.event_type} ({self.event_id}) • {self.status}"
