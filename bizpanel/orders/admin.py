from django.contrib import admin
from .models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    fields = ['position', 'product_id', 'name', 'price', 'quantity']
    readonly_fields = ['product_id', 'name', 'price']


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ['id', 'customer_name', 'status', 'total', 'user', 'created_at']
    list_filter = ['status', 'created_at']
    search_fields = ['customer_name', 'customer_email', 'items__name', 'user__username']
    readonly_fields = ['id', 'total', 'created_at', 'updated_at']
    ordering = ['-created_at']
    date_hierarchy = 'created_at'
    inlines = [OrderItemInline]

    def save_related(self, request, form, formsets, change):
        super().save_related(request, form, formsets, change)
        # Keep the stored total in line with the edited items
        order = form.instance
        order.total = order.calculate_total()
        order.save(update_fields=['total', 'updated_at'])
