"""
Filtres de liste partagés par toutes les ressources:
- ?is_active=true|false
- ?<param>=<valeur> pour les champs déclarés dans `filter_params` de la vue
- ?sort_by=<champ>&sort_order=asc|desc (liste blanche `ordering_fields`)
La recherche texte (?search=) passe par le SearchFilter de DRF.
"""
from rest_framework.filters import BaseFilterBackend, SearchFilter

from .utils import parse_bool, to_snake_case


class FieldFilter(BaseFilterBackend):
    def filter_queryset(self, request, queryset, view):
        params = request.query_params

        is_active = parse_bool(params.get("is_active", params.get("isActive")))
        if is_active is not None and hasattr(queryset.model, "is_active"):
            queryset = queryset.filter(is_active=is_active)

        for param, field in getattr(view, "filter_params", {}).items():
            value = params.get(param)
            if value not in (None, ""):
                queryset = queryset.filter(**{field: value})
        return queryset


class SortFilter(BaseFilterBackend):
    def filter_queryset(self, request, queryset, view):
        allowed = set(getattr(view, "ordering_fields", ()))
        default_field, default_order = getattr(view, "default_sort", ("created_at", "desc"))

        field = to_snake_case(request.query_params.get("sort_by", request.query_params.get("sortBy", "")))
        order = (request.query_params.get("sort_order", request.query_params.get("sortOrder")) or "").lower()

        if field not in allowed:
            field = default_field
        if order not in ("asc", "desc"):
            order = default_order if field == default_field else "asc"

        prefix = "-" if order == "desc" else ""
        # "id" en second critère pour une pagination stable
        return queryset.order_by(f"{prefix}{field}", "id")


# Ordre appliqué par les vues de liste paginées
LIST_FILTERS = [SearchFilter, FieldFilter, SortFilter]
