from rest_framework import serializers
from django.contrib.auth.password_validation import validate_password
from .models import User


def clean_categories(categories):
    """Trim category names, drop blanks and duplicates, keep the order given"""
    cleaned = []
    for category in categories or []:
        name = str(category).strip()
        if name and name not in cleaned:
            cleaned.append(name)
    return cleaned


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = [
            'id', 'username', 'email', 'first_name', 'last_name', 'phone',
            'business_name', 'business_type', 'business_categories', 'business_description', 'address',
            'onboarding_completed', 'is_active', 'created_at', 'updated_at'
        ]
        read_only_fields = fields


class UserCreateSerializer(serializers.ModelSerializer):
    """Registration: the email doubles as the username"""
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, validators=[validate_password])
    password_confirm = serializers.CharField(write_only=True)

    class Meta:
        model = User
        fields = ['email', 'password', 'password_confirm', 'first_name', 'last_name', 'phone']

    def validate_email(self, value):
        value = value.strip().lower()
        if User.objects.filter(username__iexact=value).exists() or User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError('An account with this email already exists.')
        return value

    def validate(self, attrs):
        if attrs['password'] != attrs['password_confirm']:
            raise serializers.ValidationError({"password": "Passwords don't match"})
        return attrs

    def create(self, validated_data):
        validated_data.pop('password_confirm')
        password = validated_data.pop('password')
        # Ensure user is active by default
        user = User.objects.create(username=validated_data['email'], **validated_data, is_active=True)
        user.set_password(password)
        user.save()
        return user


class OnboardingSerializer(serializers.Serializer):
    business_type = serializers.ChoiceField(
        choices=User.BUSINESS_TYPE_CHOICES,
        error_messages={'required': 'Select a business type.', 'invalid_choice': 'Select a valid business type.'}
    )
    business_name = serializers.CharField(
        max_length=200,
        error_messages={'required': 'Enter your business name.', 'blank': 'Enter your business name.'}
    )
    business_categories = serializers.ListField(child=serializers.CharField(allow_blank=True), allow_empty=True)

    def validate_business_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Enter your business name.')
        return value

    def validate_business_categories(self, value):
        categories = clean_categories(value)
        if not categories:
            raise serializers.ValidationError('Select at least one category.')
        return categories

    def save(self, user):
        user.business_type = self.validated_data['business_type']
        user.business_name = self.validated_data['business_name']
        user.business_categories = self.validated_data['business_categories']
        user.onboarding_completed = True
        user.save(update_fields=['business_type', 'business_name', 'business_categories', 'onboarding_completed', 'updated_at'])
        return user


class ProfileSerializer(serializers.ModelSerializer):
    """Business settings; business name and type are always required"""
    business_name = serializers.CharField(
        max_length=200,
        error_messages={'required': 'Enter your business name.', 'blank': 'Enter your business name.'}
    )
    business_type = serializers.ChoiceField(
        choices=User.BUSINESS_TYPE_CHOICES,
        error_messages={'required': 'Select a business type.', 'invalid_choice': 'Select a valid business type.'}
    )
    business_categories = serializers.ListField(child=serializers.CharField(allow_blank=True), required=False)

    class Meta:
        model = User
        fields = [
            'business_name', 'business_type', 'business_categories',
            'business_description', 'phone', 'address', 'onboarding_completed'
        ]
        read_only_fields = ['onboarding_completed']

    def validate_business_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Enter your business name.')
        return value

    def validate_business_categories(self, value):
        return clean_categories(value)
