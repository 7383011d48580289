from django.contrib import admin
from .models import Table


@admin.register(Table)
class TableAdmin(admin.ModelAdmin):
    list_display = ("number", "name", "restaurant", "capacity", "is_active")
    list_filter = ("restaurant", "is_active")
    search_fields = ("number", "name")
    readonly_fields = ("qr_code", "created_at", "updated_at")
