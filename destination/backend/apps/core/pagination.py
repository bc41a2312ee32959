import math

from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class StandardPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = 'limit'
    max_page_size = 100

    def pagination_data(self):
        total = self.page.paginator.count
        limit = self.get_page_size(self.request) or self.page_size
        page = self.page.number
        total_pages = max(math.ceil(total / limit), 1) if limit else 1
        return {
            'page': page,
            'limit': limit,
            'total': total,
            'total_pages': total_pages,
            'has_next': self.page.has_next(),
            'has_prev': self.page.has_previous(),
        }

    def get_paginated_response(self, data, **extra):
        payload = {'results': data, 'pagination': self.pagination_data()}
        payload.update(extra)
        return Response(payload)


def paginate(view, queryset, serializer_class, **extra):
    """Paginate inside a plain APIView using StandardPagination."""
    paginator = StandardPagination()
    page = paginator.paginate_queryset(queryset, view.request, view=view)
    context = {'request': view.request}
    data = serializer_class(page, many=True, context=context).data
    return paginator.get_paginated_response(data, **extra)
