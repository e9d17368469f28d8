from django.urls import path

from .views import (
    NotificationListCreateView,
    NotificationDetailView,
    UnreadCountView,
    NotificationTypeListView,
    MarkReadView,
    MarkAllReadView,
)

urlpatterns = [
    path("", NotificationListCreateView.as_view(), name="notification_list"),
    path("unread-count", UnreadCountView.as_view(), name="notification_unread_count"),
    path("types", NotificationTypeListView.as_view(), name="notification_types"),
    path("mark-all-read", MarkAllReadView.as_view(), name="notification_mark_all_read"),
    path("<uuid:pk>/read", MarkReadView.as_view(), name="notification_mark_read"),
    path("<uuid:pk>", NotificationDetailView.as_view(), name="notification_detail"),
]
