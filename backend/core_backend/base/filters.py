import django_filters
from django.utils import timezone
from datetime import datetime, time


def normalize_datetime_value(value, *, is_end=False):
    """
    Normalize a date or datetime to a timezone-aware datetime.

    Args:
        value: date or datetime
        is_end: If True and value is date-only, returns end of day (23:59:59.999999)
                If False, returns start of day (00:00:00)

    Examples:
        normalize_datetime_value(date(2025, 11, 11), is_end=True)   # 2025-11-11 23:59:59.999999
    """
    if not value:
        return value

    if isinstance(value, datetime):
        if timezone.is_naive(value):
            return timezone.make_aware(value)
        return value

    combined = datetime.combine(value, time.max if is_end else time.min)
    return timezone.make_aware(combined)


class BaseFilterSet(django_filters.FilterSet):
    """
    Base FilterSet with inclusive day-range helpers.

    Subclasses can point DateFilters at `filter_created_from` /
    `filter_created_to` to filter `created_at` by whole days.
    """

    def filter_created_from(self, queryset, name, value):
        return queryset.filter(created_at__gte=normalize_datetime_value(value))

    def filter_created_to(self, queryset, name, value):
        return queryset.filter(created_at__lte=normalize_datetime_value(value, is_end=True))
