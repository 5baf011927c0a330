"""URL configuration.

Routes the Django admin, the API schema and every app's DRF router under
the ``api/v1/`` prefix.
"""
from django.contrib import admin  # type: ignore
from django.urls import path, include  # type: ignore
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView  # type: ignore

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
    path('api/v1/auth/', include(('apps.users.auth_urls', 'auth'), namespace='auth')),
    path('api/v1/users/', include('apps.users.urls')),
    path('api/v1/accommodations/', include('apps.accommodations.urls')),
    path('api/v1/promotions/', include('apps.promotions.urls')),
    path('api/v1/orders/', include('apps.orders.urls')),
    path('api/v1/finances/', include('apps.finances.urls')),
    path('api/v1/rates/', include('apps.reviews.urls')),
]
