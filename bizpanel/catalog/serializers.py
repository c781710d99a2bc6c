from decimal import Decimal
from rest_framework import serializers
from .models import Product
from .utils import DEFAULT_IMAGE, parse_price


class PriceField(serializers.DecimalField):
    """Decimal field that also accepts a comma as the decimal separator"""

    def to_internal_value(self, data):
        price = parse_price(data)
        if price is None:
            self.fail('invalid')
        return super().to_internal_value(price)


class ProductSerializer(serializers.ModelSerializer):
    price = PriceField(max_digits=10, decimal_places=2, min_value=Decimal('0.00'))

    class Meta:
        model = Product
        fields = ['id', 'user', 'name', 'category', 'description', 'price', 'image', 'created_at', 'updated_at']
        read_only_fields = ['id', 'user', 'created_at', 'updated_at']

    def validate_image(self, value):
        # A cleared image falls back to the default sample image
        return value or DEFAULT_IMAGE

    def create(self, validated_data):
        if not validated_data.get('image'):
            validated_data['image'] = DEFAULT_IMAGE
        return super().create(validated_data)
