from rest_framework import serializers

from common.exceptions import ConflictError
from .models import Setting
from .services import THEME_MODES


class SettingSerializer(serializers.ModelSerializer):
    # Déclaré à la main: un doublon de clé doit donner 409, pas l'erreur 400 du UniqueValidator
    key = serializers.CharField(max_length=255)

    class Meta:
        model = Setting
        fields = ["id", "key", "value", "is_active", "created_at", "updated_at"]
        read_only_fields = ["id", "created_at", "updated_at"]

    def validate_key(self, value: str) -> str:
        qs = Setting.objects.filter(key=value)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise ConflictError(f"Setting with key '{value}' already exists")
        return value


class SettingValueSerializer(serializers.Serializer):
    value = serializers.CharField(required=False, allow_blank=True)
    is_active = serializers.BooleanField(required=False)


class AppNameSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)


class ThemeColorSerializer(serializers.Serializer):
    color = serializers.CharField(max_length=50)


class ThemeModeSerializer(serializers.Serializer):
    mode = serializers.ChoiceField(choices=THEME_MODES)
