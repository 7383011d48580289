from django.contrib import admin
from .models import Restaurant, ServiceArea


class ServiceAreaInline(admin.TabularInline):
    model = ServiceArea
    extra = 0
    fields = ['neighborhood', 'city', 'state', 'delivery_fee', 'is_active']


@admin.register(Restaurant)
class RestaurantAdmin(admin.ModelAdmin):
    list_display = ['name', 'slug', 'is_active', 'delivery_fee', 'last_order_number', 'created_at']
    list_filter = ['is_active']
    search_fields = ['name', 'slug']
    readonly_fields = ['id', 'last_order_number', 'created_at', 'updated_at']
    prepopulated_fields = {'slug': ('name',)}
    inlines = [ServiceAreaInline]
