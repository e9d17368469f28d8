from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.db import models

from common.models import TimeStampedModel


class UserManager(BaseUserManager):
    """Manager pour un utilisateur identifié par son email (pas de username)."""

    use_in_migrations = True

    def _create_user(self, email, password, **extra_fields):
        if not email:
            raise ValueError("L'email est obligatoire")
        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        if extra_fields.get("is_staff") is not True or extra_fields.get("is_superuser") is not True:
            raise ValueError("Un superutilisateur doit avoir is_staff=True et is_superuser=True")
        return self._create_user(email, password, **extra_fields)


class User(TimeStampedModel, AbstractUser):
    """
    Utilisateur de l'application.

    - Connexion par email (USERNAME_FIELD), pas de username
    - Rattaché à un rôle (droits) et à un bureau; département et poste facultatifs
    - role/office sont nullables en base pour `createsuperuser`, l'API les exige
    """

    username = None
    email = models.EmailField(unique=True)

    role = models.ForeignKey("rbac.Role", on_delete=models.PROTECT, null=True, blank=True, related_name="users")
    office = models.ForeignKey(
        "organization.Office", on_delete=models.PROTECT, null=True, blank=True, related_name="users"
    )
    department = models.ForeignKey(
        "organization.Department", on_delete=models.SET_NULL, null=True, blank=True, related_name="users"
    )
    job_position = models.ForeignKey(
        "organization.JobPosition", on_delete=models.SET_NULL, null=True, blank=True, related_name="users"
    )

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["first_name", "last_name"]

    objects = UserManager()

    def __str__(self) -> str:
        return self.email

    @property
    def role_name(self):
        return self.role.name if self.role_id else None

    class Meta:
        verbose_name = "Utilisateur"
        verbose_name_plural = "Utilisateurs"
        ordering = ["email"]
