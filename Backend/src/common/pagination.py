import math

from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class StandardPagination(PageNumberPagination):
    """
    ?page=1&limit=10 -> {"data": [...], "meta": {total, page, limit, total_pages}}
    Format attendu par les tableaux du front.

    Une page au-delà de la dernière renvoie une liste vide (pas de 404):
    le front relit la page courante après une suppression.
    """

    page_query_param = "page"
    page_size_query_param = "limit"
    page_size = 10
    max_page_size = 100

    def paginate_queryset(self, queryset, request, view=None):
        self.request = request
        limit = self.get_page_size(request)
        if not limit:
            return None

        try:
            number = int(request.query_params.get(self.page_query_param, 1))
        except (TypeError, ValueError):
            number = 1
        number = max(number, 1)

        paginator = self.django_paginator_class(queryset, limit)
        self.total, self.limit, self.page_number = paginator.count, limit, number
        if number > paginator.num_pages:
            self.page = None
            return []
        self.page = paginator.page(number)
        return list(self.page)

    def get_paginated_response(self, data):
        return Response({
            "data": data,
            "meta": {
                "total": self.total,
                "page": self.page_number,
                "limit": self.limit,
                "total_pages": math.ceil(self.total / self.limit),
            },
        })

    def get_paginated_response_schema(self, schema):
        return {
            "type": "object",
            "properties": {
                "data": schema,
                "meta": {
                    "type": "object",
                    "properties": {
                        "total": {"type": "integer"},
                        "page": {"type": "integer"},
                        "limit": {"type": "integer"},
                        "total_pages": {"type": "integer"},
                    },
                },
            },
        }
