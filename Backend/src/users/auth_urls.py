from django.urls import path

from .views import LoginView, RefreshView, LogoutView, ChangePasswordView

urlpatterns = [
    path("login", LoginView.as_view(), name="auth_login"),
    path("refresh", RefreshView.as_view(), name="auth_refresh"),
    path("logout", LogoutView.as_view(), name="auth_logout"),
    path("change-password", ChangePasswordView.as_view(), name="change_password"),
]
