from decimal import Decimal
from django.db import transaction
from rest_framework import serializers
from bizpanel.catalog.models import Product
from bizpanel.parties.models import Customer
from .models import Order, OrderItem


class OrderItemSerializer(serializers.ModelSerializer):
    line_total = serializers.SerializerMethodField()

    class Meta:
        model = OrderItem
        fields = ['product_id', 'name', 'price', 'quantity', 'line_total']

    def get_line_total(self, obj):
        return str(obj.get_line_total().quantize(Decimal('0.01')))


class OrderSerializer(serializers.ModelSerializer):
    """Read representation; the customer snapshot is nested the way it is stored on the order"""
    customer = serializers.SerializerMethodField()
    items = OrderItemSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = ['id', 'user', 'customer', 'items', 'status', 'total', 'created_at', 'updated_at']
        read_only_fields = fields

    def get_customer(self, obj):
        return {
            'id': str(obj.customer_id),
            'name': obj.customer_name,
            'email': obj.customer_email,
            'phone': obj.customer_phone,
        }


class OrderItemInputSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1, max_value=OrderItem.MAX_QUANTITY)


class OrderWriteSerializer(serializers.Serializer):
    """
    Creates and edits orders.

    Clients send a customer id and a list of {product_id, quantity}; names and
    prices are copied by the server. Lines already on the order keep the snapshot
    taken when they were added, new lines are copied from the user's current
    catalog. The same product sent twice is merged into one line. The total is
    always recomputed from the lines.
    """
    customer = serializers.UUIDField()
    items = OrderItemInputSerializer(many=True)
    status = serializers.ChoiceField(choices=Order.STATUS_CHOICES, required=False)

    def validate_customer(self, value):
        try:
            return Customer.objects.get(pk=value)
        except Customer.DoesNotExist:
            raise serializers.ValidationError('Customer not found.')

    def validate_items(self, value):
        if not value:
            raise serializers.ValidationError('Add at least one product to the order.')

        merged = {}
        for item in value:
            product_id = item['product_id']
            if product_id in merged:
                merged[product_id] += item['quantity']
            else:
                merged[product_id] = item['quantity']
        if any(quantity > OrderItem.MAX_QUANTITY for quantity in merged.values()):
            raise serializers.ValidationError(f'A product can be ordered at most {OrderItem.MAX_QUANTITY} times.')

        snapshots = self._existing_snapshots()
        missing = [pid for pid in merged if pid not in snapshots]
        if missing:
            user = self.context['user']
            products = {p.id: p for p in Product.objects.filter(user=user, pk__in=missing)}
            not_found = [str(pid) for pid in missing if pid not in products]
            if not_found:
                raise serializers.ValidationError(f"Product not found: {', '.join(not_found)}")
            for pid in missing:
                product = products[pid]
                snapshots[pid] = {'name': product.name, 'price': product.price}

        total = sum((snapshots[pid]['price'] * quantity for pid, quantity in merged.items()), Decimal('0.00'))
        if total > Order.MAX_TOTAL:
            raise serializers.ValidationError('Order total is too large.')

        return [
            {
                'product_id': pid,
                'name': snapshots[pid]['name'],
                'price': snapshots[pid]['price'],
                'quantity': quantity,
            }
            for pid, quantity in merged.items()
        ]

    def _existing_snapshots(self):
        if self.instance is None:
            return {}
        return {
            item.product_id: {'name': item.name, 'price': item.price}
            for item in self.instance.items.all()
        }

    def _apply_customer(self, order, customer):
        order.customer_id = customer.id
        order.customer_name = customer.name
        order.customer_email = customer.email
        order.customer_phone = customer.phone

    def _replace_items(self, order, items):
        order.items.all().delete()
        # Drop prefetched lines so calculate_total() sees the new ones
        getattr(order, '_prefetched_objects_cache', {}).pop('items', None)
        OrderItem.objects.bulk_create([
            OrderItem(order=order, position=position, **item)
            for position, item in enumerate(items)
        ])

    @transaction.atomic
    def create(self, validated_data):
        order = Order(user=self.context['user'], status=validated_data.get('status', 'new'))
        self._apply_customer(order, validated_data['customer'])
        order.save()
        self._replace_items(order, validated_data['items'])
        order.total = order.calculate_total()
        order.save(update_fields=['total', 'updated_at'])
        return order

    @transaction.atomic
    def update(self, instance, validated_data):
        if 'customer' in validated_data:
            self._apply_customer(instance, validated_data['customer'])
        if 'status' in validated_data:
            instance.status = validated_data['status']
        if 'items' in validated_data:
            self._replace_items(instance, validated_data['items'])
        instance.total = instance.calculate_total()
        instance.save()
        return instance

    def to_representation(self, instance):
        return OrderSerializer(instance, context=self.context).data


class OrderStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Order.STATUS_CHOICES)
