from django.urls import re_path
from . import consumers

websocket_urlpatterns = [
    re_path(r'ws/restaurants/(?P<restaurant_id>[^/]+)/orders/$', consumers.RestaurantOrdersConsumer.as_asgi()),
]
