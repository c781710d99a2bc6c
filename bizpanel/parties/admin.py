from django.contrib import admin
from .models import Customer


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ['name', 'email', 'phone', 'created_at']
    search_fields = ['name', 'email', 'phone']
    ordering = ['name']
    readonly_fields = ['id', 'name', 'email', 'phone', 'created_at']

    def has_add_permission(self, request):
        return False
