"""
Core backend base components.

This package provides foundational classes that the ordering apps build on
for consistency: restaurant-scoped viewsets, serializers and filters.
"""

from .viewsets import BaseViewSet, ReadOnlyBaseViewSet
from .serializers import BaseModelSerializer
from .mixins import RestaurantScopedQuerysetMixin, RestaurantRequired
from .filters import BaseFilterSet

__all__ = [
    # ViewSets
    'BaseViewSet',
    'ReadOnlyBaseViewSet',

    # Serializers
    'BaseModelSerializer',

    # Mixins
    'RestaurantScopedQuerysetMixin',
    'RestaurantRequired',

    # Filters
    'BaseFilterSet',
]
