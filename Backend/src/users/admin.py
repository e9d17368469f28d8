from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin
from .models import User


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    """Admin pour le modèle utilisateur (connexion par email)."""

    list_display = ("email", "first_name", "last_name", "role", "office", "is_active", "last_login")
    list_filter = ("is_active", "is_superuser", "role", "office")
    search_fields = ("email", "first_name", "last_name")
    ordering = ("email",)

    fieldsets = (
        (None, {"fields": ("email", "password")}),
        ("Infos personnelles", {"fields": ("first_name", "last_name")}),
        ("Organisation", {"fields": ("role", "office", "department", "job_position")}),
        ("Permissions", {"fields": ("is_active", "is_staff", "is_superuser")}),
        ("Importants", {"fields": ("last_login", "date_joined")}),
    )

    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": ("email", "password1", "password2", "first_name", "last_name", "role", "office"),
            },
        ),
    )
