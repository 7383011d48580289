from django.contrib import admin
from .models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ("product", "quantity", "unit_price", "total_price", "special_instructions")
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = (
        "order_number",
        "restaurant",
        "order_type",
        "status",
        "table",
        "customer_name",
        "total",
        "created_at",
    )
    list_filter = ("restaurant", "status", "order_type")
    search_fields = ("order_number", "customer_name", "customer_phone")
    # Status only changes through OrderStateMachine
    readonly_fields = (
        "order_number",
        "status",
        "subtotal",
        "delivery_fee",
        "coupon_discount",
        "total",
        "delivered_at",
        "created_at",
        "updated_at",
    )
    inlines = [OrderItemInline]

    def has_delete_permission(self, request, obj=None):
        return False
