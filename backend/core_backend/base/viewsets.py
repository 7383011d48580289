from rest_framework import viewsets, filters
from django_filters.rest_framework import DjangoFilterBackend
from ..pagination import StandardPagination


class BaseViewSet(viewsets.ModelViewSet):
    """
    Base ViewSet that provides standard configuration for all ModelViewSets.

    Features:
    - Standard pagination, filtering, and ordering
    - Fresh queryset per request (class-level querysets are evaluated at import)

    Usage:
        class TableViewSet(RestaurantScopedQuerysetMixin, BaseViewSet):
            queryset = Table.objects.all()
            serializer_class = TableSerializer
    """

    pagination_class = StandardPagination

    filter_backends = [
        DjangoFilterBackend,
        filters.OrderingFilter,
    ]

    ordering = ['-id']

    def get_queryset(self):
        if getattr(self, 'queryset', None) is not None:
            return self.queryset.model.objects.all()
        return super().get_queryset()


class ReadOnlyBaseViewSet(viewsets.ReadOnlyModelViewSet):
    """Read-only counterpart of BaseViewSet."""

    pagination_class = StandardPagination
    filter_backends = [
        DjangoFilterBackend,
        filters.OrderingFilter,
    ]
    ordering = ['-id']

    def get_queryset(self):
        if getattr(self, 'queryset', None) is not None:
            return self.queryset.model.objects.all()
        return super().get_queryset()
