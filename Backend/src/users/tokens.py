"""Émission et rotation des paires access/refresh (simplejwt + blacklist)."""
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken, OutstandingToken
from rest_framework_simplejwt.tokens import RefreshToken


def issue_tokens(user) -> dict:
    """
    Crée une paire de jetons. Les claims ajoutés au refresh (email, role)
    sont recopiés dans l'access token.
    """
    refresh = RefreshToken.for_user(user)
    refresh["email"] = user.email
    refresh["role"] = user.role_name
    return {
        "access_token": str(refresh.access_token),
        "refresh_token": str(refresh),
    }


def auth_payload(user) -> dict:
    """Réponse commune de /auth/login et /auth/refresh."""
    return {
        **issue_tokens(user),
        "user": {
            "id": str(user.pk),
            "email": user.email,
            "first_name": user.first_name,
            "last_name": user.last_name,
            "role": user.role_name,
        },
    }


def revoke_all(user) -> int:
    """Blackliste tous les refresh tokens encore valides de l'utilisateur."""
    count = 0
    for outstanding in OutstandingToken.objects.filter(user=user):
        _, created = BlacklistedToken.objects.get_or_create(token=outstanding)
        count += int(created)
    return count
