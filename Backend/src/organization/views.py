from django.shortcuts import get_object_or_404
from rest_framework import generics, permissions
from rest_framework.response import Response
from rest_framework.views import APIView

from common.filters import LIST_FILTERS
from common.tree import build_tree
from notifications.activity import ActivityLogMixin
from rbac.constants import ADMINS, STAFF, MEMBERS
from rbac.permissions import RoleAccess
from .models import Office, Department, JobPosition, MasterApproval
from .serializers import (
    OfficeSerializer,
    OfficeDetailSerializer,
    DepartmentSerializer,
    JobPositionSerializer,
    MasterApprovalSerializer,
)

_ACCESS = [permissions.IsAuthenticated, RoleAccess]


# ---------------------------------------------------------------------------
# Bureaux
# ---------------------------------------------------------------------------
class OfficeListCreateView(ActivityLogMixin, generics.ListCreateAPIView):
    """GET /api/offices?search=&is_active=&page=&limit= ; POST /api/offices"""

    queryset = Office.objects.all()
    serializer_class = OfficeSerializer
    permission_classes = _ACCESS
    role_access = {"GET": MEMBERS, "POST": ADMINS}
    filter_backends = LIST_FILTERS
    search_fields = ["name", "code"]
    filter_params = {"parent_id": "parent_id"}
    ordering_fields = ["name", "code", "created_at", "updated_at"]
    activity_context = "offices"


class OfficeDetailView(ActivityLogMixin, generics.RetrieveUpdateDestroyAPIView):
    queryset = Office.objects.select_related("parent").prefetch_related("children")
    permission_classes = _ACCESS
    role_access = {"GET": MEMBERS, "*": ADMINS}
    activity_context = "offices"

    def get_serializer_class(self):
        if self.request.method == "GET":
            return OfficeDetailSerializer
        return OfficeSerializer


class OfficeHierarchyView(APIView):
    """GET /api/offices/hierarchy -> arbre complet des bureaux"""

    permission_classes = _ACCESS
    role_access = {"GET": MEMBERS}

    def get(self, request):
        offices = Office.objects.all()
        return Response(build_tree(
            offices,
            lambda o: OfficeSerializer(o).data,
            sort_key=lambda o: o.name.lower(),
        ))


# ---------------------------------------------------------------------------
# Départements
# ---------------------------------------------------------------------------
class DepartmentListCreateView(ActivityLogMixin, generics.ListCreateAPIView):
    queryset = Department.objects.all()
    serializer_class = DepartmentSerializer
    permission_classes = _ACCESS
    role_access = {"GET": MEMBERS, "POST": ADMINS}
    filter_backends = LIST_FILTERS
    search_fields = ["name", "code", "description"]
    ordering_fields = ["name", "code", "created_at", "updated_at"]
    default_sort = ("name", "asc")
    activity_context = "departments"


class DepartmentDetailView(ActivityLogMixin, generics.RetrieveUpdateDestroyAPIView):
    queryset = Department.objects.all()
    serializer_class = DepartmentSerializer
    permission_classes = _ACCESS
    role_access = {"GET": MEMBERS, "*": ADMINS}
    activity_context = "departments"


class DepartmentByCodeView(APIView):
    """GET /api/departments/code/<code>"""

    permission_classes = _ACCESS
    role_access = {"GET": MEMBERS}

    def get(self, request, code: str):
        department = get_object_or_404(Department, code=code)
        return Response(DepartmentSerializer(department).data)


# ---------------------------------------------------------------------------
# Postes
# ---------------------------------------------------------------------------
class JobPositionListCreateView(ActivityLogMixin, generics.ListCreateAPIView):
    queryset = JobPosition.objects.all()
    serializer_class = JobPositionSerializer
    permission_classes = _ACCESS
    role_access = {"GET": STAFF, "POST": ADMINS}
    filter_backends = LIST_FILTERS
    search_fields = ["name", "code"]
    filter_params = {"level": "level"}
    ordering_fields = ["name", "code", "level", "created_at", "updated_at"]
    activity_context = "job_positions"


class JobPositionDetailView(ActivityLogMixin, generics.RetrieveUpdateDestroyAPIView):
    queryset = JobPosition.objects.all()
    serializer_class = JobPositionSerializer
    permission_classes = _ACCESS
    role_access = {"GET": STAFF, "*": ADMINS}
    activity_context = "job_positions"


# ---------------------------------------------------------------------------
# Circuits de validation
# ---------------------------------------------------------------------------
def _approvals():
    return MasterApproval.objects.prefetch_related(
        "items__job_position", "items__department", "items__created_by"
    )


class MasterApprovalListCreateView(ActivityLogMixin, generics.ListCreateAPIView):
    """GET /api/master-approvals?search=&is_active=&sort_by=&page=&limit= ; POST /api/master-approvals"""

    serializer_class = MasterApprovalSerializer
    permission_classes = _ACCESS
    role_access = {"GET": STAFF, "POST": ADMINS}
    filter_backends = LIST_FILTERS
    search_fields = ["entity"]
    ordering_fields = ["entity", "is_active", "created_at", "updated_at"]
    default_sort = ("entity", "asc")
    activity_context = "master_approvals"

    def get_queryset(self):
        return _approvals()


class MasterApprovalDetailView(ActivityLogMixin, generics.RetrieveUpdateDestroyAPIView):
    serializer_class = MasterApprovalSerializer
    permission_classes = _ACCESS
    role_access = {"GET": STAFF, "*": ADMINS}
    activity_context = "master_approvals"

    def get_queryset(self):
        return _approvals()
