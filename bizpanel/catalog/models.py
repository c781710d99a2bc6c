import uuid
from django.db import models
from django.utils import timezone
from bizpanel.core.models import User


class Product(models.Model):
    """Products owned by a single business user"""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='products')
    name = models.CharField(max_length=200, db_index=True)
    category = models.CharField(max_length=100, db_index=True)
    description = models.TextField(blank=True)
    price = models.DecimalField(max_digits=10, decimal_places=2)
    image = models.URLField(max_length=500, blank=True)
    # Seeded products are backdated, so this is not auto_now_add
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} ({self.category})"

    class Meta:
        db_table = 'products'
        ordering = ['created_at']
        indexes = [
            models.Index(fields=['user', 'created_at'], name='idx_product_user_created'),
        ]
