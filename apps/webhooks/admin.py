from django.contrib import admin
from unfold.admin import ModelAdmin

from apps.webhooks.models import WebhookEvent


@admin.register(WebhookEvent)
class WebhookEventAdmin(ModelAdmin):
    list_display = ["event_type", "event_id", "status", "processed_at", "created_at"]
    list_filter = ["status", "event_type"]
    search_fields = ["event_id", "event_type", "error_message"]
    readonly_fields = [
        "event_id",
        "event_type",
        "source",
        "payload",
        "status",
        "error_message",
        "processed_at",
        "created_at",
    ]

    def has_add_permission(self, request):
        return False
