from django.contrib import admin
from .models import Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("name", "restaurant", "price", "is_active")
    list_filter = ("restaurant", "is_active")
    search_fields = ("name",)
