import math

from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class StandardPagination(PageNumberPagination):
    """
    Page/limit pagination rendered as ``{"data": [...], "meta": {...}}``.

    Views that need to attach extra top-level keys (summaries) pass them
    through ``extra``.
    """

    page_size = 10
    page_query_param = "page"
    page_size_query_param = "limit"
    max_page_size = 100

    def get_paginated_response(self, data, extra=None):
        total = self.page.paginator.count
        limit = self.page.paginator.per_page
        body = {
            "data": data,
            "meta": {
                "total": total,
                "page": self.page.number,
                "limit": limit,
                "total_pages": math.ceil(total / limit) if limit else 0,
            },
        }
        if extra:
            body.update(extra)
        return Response(body)

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
