from django.urls import path

from .views import (
    OfficeListCreateView,
    OfficeDetailView,
    OfficeHierarchyView,
    DepartmentListCreateView,
    DepartmentDetailView,
    DepartmentByCodeView,
    JobPositionListCreateView,
    JobPositionDetailView,
    MasterApprovalListCreateView,
    MasterApprovalDetailView,
)

urlpatterns = [
    path("offices", OfficeListCreateView.as_view(), name="office_list"),
    path("offices/hierarchy", OfficeHierarchyView.as_view(), name="office_hierarchy"),
    path("offices/<uuid:pk>", OfficeDetailView.as_view(), name="office_detail"),

    path("departments", DepartmentListCreateView.as_view(), name="department_list"),
    path("departments/code/<str:code>", DepartmentByCodeView.as_view(), name="department_by_code"),
    path("departments/<uuid:pk>", DepartmentDetailView.as_view(), name="department_detail"),

    path("job-positions", JobPositionListCreateView.as_view(), name="job_position_list"),
    path("job-positions/<uuid:pk>", JobPositionDetailView.as_view(), name="job_position_detail"),

    path("master-approvals", MasterApprovalListCreateView.as_view(), name="master_approval_list"),
    path("master-approvals/<uuid:pk>", MasterApprovalDetailView.as_view(), name="master_approval_detail"),
]
