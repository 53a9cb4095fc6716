from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class OrderPagination(PageNumberPagination):
    """
    ``?page=&limit=`` paging for order listings. Responds with ``{"orders": [...], "pagination": {...}}``,
    the envelope the web client reads.
    """

    page_size = 20
    page_size_query_param = "limit"
    max_page_size = 100

    def get_pagination_meta(self) -> dict:
        page = self.page
        paginator = page.paginator
        return {
            "page": page.number,
            "limit": paginator.per_page,
            "total": paginator.count,
            "total_pages": paginator.num_pages,
            "has_more": page.has_next(),
            "has_previous": page.has_previous(),
            "next_page": page.next_page_number() if page.has_next() else None,
            "previous_page": page.previous_page_number() if page.has_previous() else None,
        }

    def get_paginated_response(self, data):
        return Response({"orders": data, "pagination": self.get_pagination_meta()})

    def get_paginated_response_schema(self, schema):
        nullable_int = {"type": "integer", "nullable": True}
        return {
            "type": "object",
            "required": ["orders", "pagination"],
            "properties": {
                "orders": schema,
                "pagination": {
                    "type": "object",
                    "properties": {
                        "page": {"type": "integer"},
                        "limit": {"type": "integer"},
                        "total": {"type": "integer"},
                        "total_pages": {"type": "integer"},
                        "has_more": {"type": "boolean"},
                        "has_previous": {"type": "boolean"},
                        "next_page": nullable_int,
                        "previous_page": nullable_int,
                    },
                },
            },
        }
