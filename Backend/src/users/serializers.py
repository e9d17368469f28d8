from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

from common.exceptions import ConflictError
from organization.models import Office, Department, JobPosition
from organization.serializers import OfficeSummarySerializer
from rbac.models import Role
from rbac.serializers import RoleSummarySerializer

User = get_user_model()


class _NamedSerializer(serializers.Serializer):
    id = serializers.UUIDField(read_only=True)
    name = serializers.CharField(read_only=True)


def _check_email_free(email: str, instance=None) -> str:
    qs = User.objects.filter(email__iexact=email)
    if instance is not None:
        qs = qs.exclude(pk=instance.pk)
    if qs.exists():
        raise ConflictError("User with this email already exists")
    return email


class UserSerializer(serializers.ModelSerializer):
    """
    Lecture: rôle, bureau, département et poste embarqués.
    Écriture: *_id + password (hashé, jamais renvoyé).
    """

    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, required=False, trim_whitespace=False, min_length=6)

    role = RoleSummarySerializer(read_only=True)
    office = OfficeSummarySerializer(read_only=True)
    department = _NamedSerializer(read_only=True)
    job_position = _NamedSerializer(read_only=True)

    role_id = serializers.PrimaryKeyRelatedField(source="role", queryset=Role.objects.all(), write_only=True)
    office_id = serializers.PrimaryKeyRelatedField(source="office", queryset=Office.objects.all(), write_only=True)
    department_id = serializers.PrimaryKeyRelatedField(
        source="department", queryset=Department.objects.all(), write_only=True, required=False, allow_null=True,
    )
    job_position_id = serializers.PrimaryKeyRelatedField(
        source="job_position", queryset=JobPosition.objects.all(), write_only=True, required=False, allow_null=True,
    )

    class Meta:
        model = User
        fields = [
            "id", "email", "password", "first_name", "last_name", "is_active",
            "role", "office", "department", "job_position",
            "role_id", "office_id", "department_id", "job_position_id",
            "last_login", "created_at", "updated_at",
        ]
        read_only_fields = ["id", "last_login", "created_at", "updated_at"]

    def validate_email(self, value: str) -> str:
        return _check_email_free(value, self.instance)

    def validate_password(self, value: str) -> str:
        validate_password(value, self.instance)
        return value

    def validate(self, attrs):
        if self.instance is None and not attrs.get("password"):
            raise serializers.ValidationError({"password": "This field is required."})
        return attrs

    def create(self, validated_data):
        password = validated_data.pop("password")
        user = User(**validated_data)
        user.set_password(password)
        user.save()
        return user

    def update(self, instance, validated_data):
        password = validated_data.pop("password", None)
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        if password:
            instance.set_password(password)
        instance.save()
        return instance


class MeSerializer(serializers.ModelSerializer):
    """Profil courant: seules les informations personnelles sont modifiables."""

    email = serializers.EmailField(required=False)

    class Meta:
        model = User
        fields = ["email", "first_name", "last_name"]

    def validate_email(self, value: str) -> str:
        return _check_email_free(value, self.instance)

    def to_representation(self, instance):
        return UserSerializer(instance).data


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(trim_whitespace=False)


class RefreshSerializer(serializers.Serializer):
    refresh_token = serializers.CharField(required=False, allow_blank=True)


class ChangePasswordSerializer(serializers.Serializer):
    """Serializer pour changer le mot de passe de l'utilisateur connecté."""

    old_password = serializers.CharField(write_only=True, required=True, trim_whitespace=False)
    new_password = serializers.CharField(write_only=True, required=True, trim_whitespace=False)

    def validate(self, attrs):
        user = self.context["request"].user
        if not user.check_password(attrs["old_password"]):
            raise serializers.ValidationError({"old_password": "Current password is incorrect."})
        validate_password(attrs["new_password"], user)
        return attrs

    def save(self, **kwargs):
        user = self.context["request"].user
        user.set_password(self.validated_data["new_password"])
        user.save()
        return user
