import uuid
from django.db import models


class Customer(models.Model):
    """Customers from the shared mock list; not editable through the API"""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200, unique=True)
    email = models.EmailField()
    phone = models.CharField(max_length=20, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'customers'
        ordering = ['created_at', 'name']
