from django.contrib import admin

from .models import Menu


@admin.register(Menu)
class MenuAdmin(admin.ModelAdmin):
    list_display = ("name", "path", "parent", "order", "is_active")
    list_filter = ("is_active", "roles")
    search_fields = ("name", "path")
    filter_horizontal = ("roles",)
