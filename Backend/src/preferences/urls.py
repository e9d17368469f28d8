from django.urls import path

from .views import (
    SettingListCreateView,
    SettingDetailView,
    SettingByKeyView,
    SettingValueView,
    AppSettingsView,
    AppNameView,
    ThemeView,
    ThemeColorView,
    ThemeModeView,
)

urlpatterns = [
    path("", SettingListCreateView.as_view(), name="setting_list"),
    path("app", AppSettingsView.as_view(), name="setting_app"),
    path("app-name", AppNameView.as_view(), name="setting_app_name"),
    path("theme", ThemeView.as_view(), name="setting_theme"),
    path("theme/color", ThemeColorView.as_view(), name="setting_theme_color"),
    path("theme/mode", ThemeModeView.as_view(), name="setting_theme_mode"),
    path("by-key/<str:key>", SettingByKeyView.as_view(), name="setting_by_key"),
    path("value/<str:key>", SettingValueView.as_view(), name="setting_value"),
    path("<uuid:pk>", SettingDetailView.as_view(), name="setting_detail"),
]
