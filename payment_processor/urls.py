"""
Payment URLs, mounted under /api/v1/payments/.
"""

from django.urls import path
from .views import InitiatePaymentView, PaymentWebhookView

app_name = 'payment_processor'

urlpatterns = [
    path('initiate/', InitiatePaymentView.as_view(), name='initiate'),
    path('webhook/', PaymentWebhookView.as_view(), name='webhook'),
]
