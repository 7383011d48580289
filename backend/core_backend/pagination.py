from rest_framework.pagination import PageNumberPagination


class StandardPagination(PageNumberPagination):
    """Default pagination for list endpoints. Clients may ask for up to 100 rows."""

    page_size = 10
    page_size_query_param = "page_size"
    max_page_size = 100
