from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path("admin/", admin.site.urls),

    # APIs
    path("api/common/", include("common.urls")),
    path("api/auth/", include("users.auth_urls")),
    path("api/users/", include("users.urls")),
    path("api/", include("rbac.urls")),
    path("api/", include("organization.urls")),
    path("api/menus/", include("menus.urls")),
    path("api/settings/", include("preferences.urls")),
    path("api/", include("catalog.urls")),
    path("api/notifications/", include("notifications.urls")),
]
