from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """Extended user model carrying the business profile"""
    BUSINESS_TYPE_CHOICES = [
        ('franchise', 'Franchise'),
        ('restaurant', 'Restaurant'),
        ('autonomous', 'Autonomous'),
    ]

    phone = models.CharField(max_length=20, blank=True, null=True)
    business_name = models.CharField(max_length=200, blank=True)
    business_type = models.CharField(max_length=20, choices=BUSINESS_TYPE_CHOICES, blank=True, null=True)
    business_categories = models.JSONField(default=list, blank=True)
    business_description = models.TextField(blank=True)
    address = models.CharField(max_length=255, blank=True)
    onboarding_completed = models.BooleanField(default=False)
    # When mock products and orders were generated; each kind is seeded at most once
    products_seeded_at = models.DateTimeField(null=True, blank=True)
    orders_seeded_at = models.DateTimeField(null=True, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'users'
