from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from .utils import classify_stock, format_price


class Product(models.Model):
    """Sellable inventory item"""
    name = models.CharField(max_length=200, db_index=True)
    price = models.DecimalField(max_digits=14, decimal_places=2, validators=[MinValueValidator(Decimal('0'))])
    category = models.CharField(max_length=100, db_index=True)
    qty = models.PositiveIntegerField(default=0)  # quantity on hand
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} ({self.category})"

    @property
    def stock_status(self):
        return classify_stock(self.qty)

    @property
    def formatted_price(self):
        return format_price(self.price)

    class Meta:
        db_table = 'products'
        ordering = ['id']
        constraints = [
            models.CheckConstraint(condition=models.Q(price__gte=0), name='products_price_non_negative'),
        ]
