from rest_framework import serializers
from .models import Product


class ProductSerializer(serializers.ModelSerializer):
    stock_status = serializers.SerializerMethodField()
    formatted_price = serializers.CharField(read_only=True)

    class Meta:
        model = Product
        fields = ['id', 'name', 'price', 'category', 'qty', 'stock_status', 'formatted_price', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def get_stock_status(self, obj):
        """Stock status with display message and css class"""
        return obj.stock_status._asdict()
