from django.conf import settings
import logging
import re
import requests

logger = logging.getLogger(__name__)


# Customer-facing messages, keyed by the status the order just entered.
STATUS_MESSAGE_TEMPLATES = {
    "confirmed": (
        "🍽️ *Pedido Confirmado!*\n\nOlá {customer_name}!\n\n"
        "Seu pedido #{order_number} foi confirmado e está sendo preparado.\n\n"
        "Obrigado pela preferência! 😊"
    ),
    "preparing": (
        "👨‍🍳 *Preparando seu Pedido*\n\nOlá {customer_name}!\n\n"
        "Seu pedido #{order_number} está sendo preparado pela nossa equipe.\n\n"
        "Em breve estará pronto! 🔥"
    ),
    "ready": (
        "✅ *Pedido Pronto!*\n\nOlá {customer_name}!\n\n"
        "Seu pedido #{order_number} está pronto para retirada/entrega.\n\n"
        "Aguardamos você! 📦"
    ),
    "out_for_delivery": (
        "🚚 *Saiu para Entrega*\n\nOlá {customer_name}!\n\n"
        "Seu pedido #{order_number} saiu para entrega e chegará em breve.\n\n"
        "Fique atento! 🏃‍♂️💨"
    ),
    "delivered": (
        "🎉 *Pedido Entregue!*\n\nOlá {customer_name}!\n\n"
        "Seu pedido #{order_number} foi entregue com sucesso.\n\n"
        "Esperamos que tenha gostado! Avalie nossa comida! ⭐"
    ),
    "cancelled": (
        "❌ *Pedido Cancelado*\n\nOlá {customer_name}!\n\n"
        "Infelizmente seu pedido #{order_number} foi cancelado.\n\n"
        "Para mais informações, entre em contato conosco. 📞"
    ),
}

GENERIC_STATUS_TEMPLATE = (
    "📋 *Atualização do Pedido*\n\nOlá {customer_name}!\n\n"
    "Seu pedido #{order_number} teve o status atualizado para: {status}\n\n"
    "Obrigado! 😊"
)


def build_status_message(customer_name, order_number, status):
    template = STATUS_MESSAGE_TEMPLATES.get(str(status), GENERIC_STATUS_TEMPLATE)
    return template.format(customer_name=customer_name, order_number=order_number, status=status)


def normalize_phone(phone, country_code=None):
    """
    Strip everything but digits and prefix the country code when missing.

    Returns "" when nothing is left.
    """
    if country_code is None:
        country_code = getattr(settings, "WHATSAPP_DEFAULT_COUNTRY_CODE", "55")
    digits = re.sub(r"\D", "", phone or "")
    if not digits:
        return ""
    if digits.startswith(country_code):
        return digits
    return f"{country_code}{digits}"


class WhatsAppService:
    """
    Sends WhatsApp messages through an Evolution API instance.

    Never raises on delivery problems: failures are logged and reported
    as a False/None return.
    """

    def __init__(self, api_url=None, api_key=None, instance_name=None, timeout=None):
        self.api_url = (api_url if api_url is not None else settings.EVOLUTION_API_URL).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.EVOLUTION_API_KEY
        self.instance_name = instance_name or settings.EVOLUTION_INSTANCE_NAME
        self.timeout = timeout or getattr(settings, "WHATSAPP_TIMEOUT_SECONDS", 10)

    @property
    def is_configured(self):
        return bool(self.api_url and self.api_key)

    def _post(self, endpoint, payload):
        if not self.is_configured:
            logger.warning("Evolution API credentials not configured; WhatsApp message skipped")
            return None

        url = f"{self.api_url}/{endpoint.lstrip('/')}"
        try:
            response = requests.post(
                url,
                json=payload,
                headers={"Content-Type": "application/json", "apikey": self.api_key},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"WhatsApp request to {url} failed: {e}")
            return None

        if not response.ok:
            logger.error(
                f"WhatsApp API error: {response.status_code} {response.reason}; body: {response.text[:500]}"
            )
            return None

        try:
            return response.json()
        except ValueError:
            return {}

    def send_message(self, number, text):
        return self._post(f"message/sendText/{self.instance_name}", {"number": number, "text": text})

    def send_order_status_notification(
        self, restaurant, customer_phone, order_number, new_status, customer_name
    ) -> bool:
        """
        Tell a customer their order changed status.

        Returns:
            True if the API accepted the message, False if it was skipped or failed
        """
        if not self.is_configured:
            logger.warning(f"WhatsApp not configured; no notification for order #{order_number}")
            return False

        if not restaurant.notification_whatsapp:
            logger.warning(
                f"Restaurant {restaurant.slug} has no notification WhatsApp configured; "
                f"skipping order #{order_number}"
            )
            return False

        number = normalize_phone(customer_phone)
        if not number:
            logger.warning(f"Order #{order_number} has no customer phone; notification skipped")
            return False

        result = self.send_message(number, build_status_message(customer_name, order_number, new_status))
        if result is None:
            logger.error(f"Failed to send WhatsApp notification for order #{order_number}")
            return False

        logger.info(f"WhatsApp notification sent for order #{order_number} ({new_status})")
        return True
