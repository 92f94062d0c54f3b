from django.contrib import admin
from .models import Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['name', 'category', 'price', 'formatted_price', 'qty', 'stock_status_message', 'created_at']
    list_filter = ['category', 'created_at']
    search_fields = ['name', 'category']
    ordering = ['name']
    readonly_fields = ['created_at', 'updated_at']

    @admin.display(description='Stock')
    def stock_status_message(self, obj):
        return obj.stock_status.message
