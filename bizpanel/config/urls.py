"""
URL configuration for the bizpanel project.

Every app mounts its routes under ``api/v1/``; the Django admin lives at ``admin/``.
"""
from django.contrib import admin
from django.urls import path, include

admin.site.site_header = "Bizpanel Admin"
admin.site.site_title = "Bizpanel Admin Portal"
admin.site.index_title = "Business catalog and orders"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('bizpanel.core.urls')),
    path('api/v1/', include('bizpanel.catalog.urls')),
    path('api/v1/', include('bizpanel.parties.urls')),
    path('api/v1/', include('bizpanel.orders.urls')),
    path('api/v1/', include('bizpanel.reports.urls')),
]
