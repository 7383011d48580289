import json
import logging
from channels.generic.websocket import AsyncWebsocketConsumer
from datetime import datetime

from .dispatcher import restaurant_orders_group

logger = logging.getLogger(__name__)


class RestaurantOrdersConsumer(AsyncWebsocketConsumer):
    """
    Live order events for a restaurant's staff dashboards.

    Relays `order_status_update` and `table_closed` events published on the
    restaurant's group.
    """

    async def connect(self):
        self.restaurant_id = self.scope["url_route"]["kwargs"]["restaurant_id"]
        self.group_name = restaurant_orders_group(self.restaurant_id)

        await self.channel_layer.group_add(self.group_name, self.channel_name)
        await self.accept()

        logger.info(f"Dashboard connected to {self.group_name}")

        await self.send(
            text_data=json.dumps(
                {
                    "type": "connection_established",
                    "restaurant_id": self.restaurant_id,
                    "timestamp": datetime.now().isoformat(),
                }
            )
        )

    async def disconnect(self, close_code):
        if hasattr(self, "group_name"):
            await self.channel_layer.group_discard(self.group_name, self.channel_name)
            logger.info(f"Dashboard disconnected from {self.group_name}")

    async def receive(self, text_data=None, bytes_data=None):
        try:
            data = json.loads(text_data or "{}")
        except json.JSONDecodeError:
            logger.error(f"Invalid JSON received on {self.group_name}")
            return

        if data.get("type") == "ping":
            await self.send(text_data=json.dumps({"type": "pong", "timestamp": datetime.now().isoformat()}))
        else:
            logger.warning(f"Unknown message type on {self.group_name}: {data.get('type')}")

    # Channel layer event handlers

    async def order_status_update(self, event):
        await self.send(text_data=json.dumps({"type": "order_status_update", "data": event["data"]}))

    async def table_closed(self, event):
        await self.send(text_data=json.dumps({"type": "table_closed", "data": event["data"]}))
