"""URL Configuration for API v1."""

from django.urls import path, include

urlpatterns = [
    path('', include('api.v1.events.urls')),
    path('', include('api.v1.registrations.urls')),
    path('payments/', include('payment_processor.urls')),
]
