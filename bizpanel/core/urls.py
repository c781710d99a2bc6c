from django.urls import path
from .views import (
    CustomTokenObtainPairView, CustomTokenRefreshView, register, user_me,
    onboarding, profile, health
)

urlpatterns = [
    path('health/', health, name='health'),

    # Auth endpoints
    path('auth/register/', register, name='register'),
    path('auth/login/', CustomTokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('auth/refresh/', CustomTokenRefreshView.as_view(), name='token_refresh'),
    path('auth/me/', user_me, name='user-me'),
    path('auth/onboarding/', onboarding, name='onboarding'),

    # Business profile
    path('profile/', profile, name='profile'),
]
