import uuid
from decimal import Decimal
from django.db import models
from django.utils import timezone
from bizpanel.core.models import User


class Order(models.Model):
    """Customer orders, with a snapshot of the customer taken when saved"""
    STATUS_CHOICES = [
        ('new', 'New'),
        ('processing', 'Processing'),
        ('completed', 'Completed'),
    ]
    # Largest value the total column holds
    MAX_TOTAL = Decimal('9999999999.99')

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='orders')
    customer_id = models.UUIDField()
    customer_name = models.CharField(max_length=200)
    customer_email = models.EmailField()
    customer_phone = models.CharField(max_length=20, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='new', db_index=True)
    # Stored redundantly; recomputed from the items on every save through the API
    total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    # Seeded orders are backdated, so this is not auto_now_add
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Order {str(self.id)[:8]} - {self.customer_name}"

    def calculate_total(self):
        """Sum of price x quantity over the line items"""
        return sum((item.get_line_total() for item in self.items.all()), Decimal('0.00'))

    class Meta:
        db_table = 'orders'
        ordering = ['created_at']
        indexes = [
            models.Index(fields=['user', 'created_at'], name='idx_order_user_created'),
        ]


class OrderItem(models.Model):
    """Line items: a snapshot of a product's id, name and price plus a quantity"""
    MAX_QUANTITY = 10000

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name='items')
    position = models.PositiveIntegerField(default=0)
    # Not a foreign key; deleting the product leaves the line untouched
    product_id = models.UUIDField()
    name = models.CharField(max_length=200)
    price = models.DecimalField(max_digits=10, decimal_places=2)
    quantity = models.PositiveIntegerField(default=1)

    def __str__(self):
        return f"{self.name} x {self.quantity}"

    def get_line_total(self):
        return self.price * self.quantity

    class Meta:
        db_table = 'order_items'
        ordering = ['position', 'id']
