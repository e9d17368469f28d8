import logging

from django.contrib.auth import authenticate, get_user_model
from django.contrib.auth.models import update_last_login
from rest_framework import generics, permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken

from common.exceptions import Unauthorized
from common.filters import LIST_FILTERS
from notifications.activity import ActivityLogMixin
from rbac.constants import ADMINS, STAFF
from rbac.permissions import RoleAccess
from .serializers import (
    UserSerializer,
    MeSerializer,
    LoginSerializer,
    RefreshSerializer,
    ChangePasswordSerializer,
)
from .tokens import auth_payload, revoke_all

User = get_user_model()
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Authentification
# ---------------------------------------------------------------------------
class LoginView(APIView):
    """POST /api/auth/login {email, password} -> jetons + profil court"""

    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        email = serializer.validated_data["email"]

        # ModelBackend refuse aussi les comptes inactifs
        user = authenticate(request, email=email, password=serializer.validated_data["password"])
        if user is None:
            logger.warning(f"Échec de connexion pour {email}")
            raise Unauthorized("Invalid credentials")

        update_last_login(None, user)
        logger.debug(f"Connexion réussie: {email}")
        return Response(auth_payload(user), status=status.HTTP_200_OK)


class RefreshView(APIView):
    """
    POST /api/auth/refresh {refresh_token}
    Rotation: le jeton présenté est blacklisté, une nouvelle paire est émise.
    """

    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def post(self, request):
        serializer = RefreshSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        raw = serializer.validated_data.get("refresh_token")
        if not raw:
            raise Unauthorized("No refresh token provided")

        try:
            token = RefreshToken(raw)
        except TokenError as e:
            logger.debug(f"Refresh refusé: {e}")
            raise Unauthorized("Invalid refresh token")

        user = User.objects.select_related("role").filter(pk=token.get("user_id"), is_active=True).first()
        if user is None:
            raise Unauthorized("Invalid refresh token")

        token.blacklist()
        return Response(auth_payload(user), status=status.HTTP_200_OK)


class LogoutView(APIView):
    """POST /api/auth/logout -> révoque tous les refresh tokens de l'appelant"""

    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):
        revoked = revoke_all(request.user)
        logger.info(f"Déconnexion de {request.user.email}: {revoked} jeton(s) révoqué(s)")
        return Response({"detail": "Logged out"}, status=status.HTTP_200_OK)


class ChangePasswordView(APIView):
    """Permet à l'utilisateur connecté de changer son mot de passe."""

    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):
        serializer = ChangePasswordSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response({"detail": "Password changed"}, status=status.HTTP_200_OK)


# ---------------------------------------------------------------------------
# Utilisateurs
# ---------------------------------------------------------------------------
class MeView(APIView):
    """Retourne le profil de l'utilisateur courant."""

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        return Response(UserSerializer(request.user).data)

    def patch(self, request):
        serializer = MeSerializer(instance=request.user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data)


class _UserActivity(ActivityLogMixin):
    activity_context = "users"

    def activity_subject(self, instance) -> str:
        return f"{instance.first_name} {instance.last_name} ({instance.email})"


class UserListCreateView(_UserActivity, generics.ListCreateAPIView):
    """
    GET /api/users?search=&role_id=&office_id=&department_id=&job_position_id=&is_active=
    La recherche est un préfixe insensible à la casse sur prénom, nom, email.
    """

    queryset = User.objects.select_related("role", "office", "department", "job_position")
    serializer_class = UserSerializer
    permission_classes = [permissions.IsAuthenticated, RoleAccess]
    role_access = {"GET": ADMINS, "POST": ADMINS}
    filter_backends = LIST_FILTERS
    search_fields = ["^first_name", "^last_name", "^email"]
    filter_params = {
        "role_id": "role_id",
        "office_id": "office_id",
        "department_id": "department_id",
        "job_position_id": "job_position_id",
    }
    ordering_fields = ["email", "first_name", "last_name", "last_login", "created_at", "updated_at"]


class UserDetailView(_UserActivity, generics.RetrieveUpdateDestroyAPIView):
    queryset = User.objects.select_related("role", "office", "department", "job_position")
    serializer_class = UserSerializer
    permission_classes = [permissions.IsAuthenticated, RoleAccess]
    role_access = {"GET": STAFF, "*": ADMINS}
