from rest_framework import serializers


class BaseModelSerializer(serializers.ModelSerializer):
    """
    Base serializer that provides common functionality.

    Subclasses declare `select_related_fields` / `prefetch_related_fields`
    on Meta; viewsets use `optimize_queryset` to apply them.
    """

    class Meta:
        select_related_fields = []
        prefetch_related_fields = []

    @classmethod
    def optimize_queryset(cls, queryset):
        meta = getattr(cls, 'Meta', None)
        select_fields = getattr(meta, 'select_related_fields', None) or []
        prefetch_fields = getattr(meta, 'prefetch_related_fields', None) or []
        if select_fields:
            queryset = queryset.select_related(*select_fields)
        if prefetch_fields:
            queryset = queryset.prefetch_related(*prefetch_fields)
        return queryset
