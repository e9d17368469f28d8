from django.contrib import admin

from .models import Office, Department, JobPosition, MasterApproval, MasterApprovalItem


@admin.register(Office)
class OfficeAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "parent", "is_active")
    list_filter = ("is_active",)
    search_fields = ("name", "code")


@admin.register(Department)
class DepartmentAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "is_active")
    search_fields = ("name", "code")


@admin.register(JobPosition)
class JobPositionAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "level", "is_active")
    search_fields = ("name", "code")


class MasterApprovalItemInline(admin.TabularInline):
    model = MasterApprovalItem
    extra = 0
    fields = ("order", "job_position", "department", "created_by")


@admin.register(MasterApproval)
class MasterApprovalAdmin(admin.ModelAdmin):
    list_display = ("entity", "is_active", "updated_at")
    list_filter = ("is_active",)
    search_fields = ("entity",)
    inlines = [MasterApprovalItemInline]
