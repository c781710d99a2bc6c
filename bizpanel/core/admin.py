from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ['username', 'email', 'business_name', 'business_type', 'onboarding_completed', 'is_active', 'created_at']
    list_filter = ['business_type', 'onboarding_completed', 'is_active', 'is_staff']
    search_fields = ['username', 'email', 'business_name']
    ordering = ['-created_at']
    fieldsets = BaseUserAdmin.fieldsets + (
        ('Business', {
            'fields': (
                'phone', 'business_name', 'business_type', 'business_categories',
                'business_description', 'address', 'onboarding_completed',
                'products_seeded_at', 'orders_seeded_at',
            )
        }),
    )
    readonly_fields = ['products_seeded_at', 'orders_seeded_at']
