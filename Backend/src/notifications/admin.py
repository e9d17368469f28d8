from django.contrib import admin

from .models import Notification, NotificationRecipient, NotificationType


@admin.register(NotificationType)
class NotificationTypeAdmin(admin.ModelAdmin):
    list_display = ("name", "description")
    search_fields = ("name",)


class RecipientInline(admin.TabularInline):
    model = NotificationRecipient
    extra = 0


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("title", "context", "type", "is_active", "created_at")
    list_filter = ("is_active", "type", "context")
    search_fields = ("title", "message")
    inlines = [RecipientInline]
