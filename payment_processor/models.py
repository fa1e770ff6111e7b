"""
Payment processor models: audit log of gateway calls and inbound callbacks.
"""

from django.db import models

from core.models import BaseModel


class PaymentTransaction(BaseModel):
    """
    Individual gateway call log for audit and debugging.
    """
    TRANSACTION_TYPES = [
        ('initiate', 'Initiate Payment'),
        ('webhook', 'Webhook Received'),
    ]

    registration = models.ForeignKey(
        'registrations.Registration',
        on_delete=models.CASCADE,
        related_name='payment_transactions',
        null=True,
        blank=True
    )
    transaction_type = models.CharField(max_length=20, choices=TRANSACTION_TYPES)

    # Request/Response data for debugging
    request_data = models.JSONField(default=dict)
    response_data = models.JSONField(default=dict)

    # Status
    is_successful = models.BooleanField(default=False)
    error_message = models.TextField(blank=True)

    # Timing
    duration_ms = models.IntegerField(null=True, help_text="Request duration in milliseconds")

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['registration', 'created_at'], name='payment_pro_registr_3c9e1f_idx'),
            models.Index(fields=['transaction_type', 'created_at'], name='payment_pro_transac_7a2d5b_idx'),
        ]

    def __str__(self):
        outcome = "ok" if self.is_successful else "failed"
        return f"{self.transaction_type} ({outcome}) - {self.registration_id}"


class PaymentWebhook(BaseModel):
    """
    Every payment callback received from the gateway, with what it resolved to.
    """
    OUTCOMES = [
        ('success', 'Success'),
        ('failure', 'Failure'),
        ('indeterminate', 'Indeterminate'),
    ]
    RESULTS = [
        ('applied', 'Applied'),
        ('duplicate', 'Duplicate'),
        ('stale', 'Stale'),
        ('indeterminate', 'Indeterminate'),
        ('not_found', 'Registration not found'),
        ('ambiguous', 'Ambiguous reference'),
        ('amount_mismatch', 'Amount mismatch'),
        ('invalid_payload', 'Invalid payload'),
    ]

    registration = models.ForeignKey(
        'registrations.Registration',
        on_delete=models.SET_NULL,
        related_name='payment_webhooks',
        null=True,
        blank=True
    )

    # Raw data
    headers = models.JSONField(default=dict)
    payload = models.JSONField(default=dict)

    # Extracted fields
    raw_status = models.CharField(max_length=100, blank=True)
    reference = models.CharField(max_length=255, blank=True)
    transaction_id = models.CharField(max_length=255, blank=True)

    # Processing
    outcome = models.CharField(max_length=20, choices=OUTCOMES, blank=True)
    result = models.CharField(max_length=20, choices=RESULTS, blank=True)
    processed_at = models.DateTimeField(null=True, blank=True)
    error_message = models.TextField(blank=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['result', 'created_at'], name='payment_pro_result_4e8b2c_idx'),
        ]

    def __str__(self):
        return f"Webhook {self.reference or self.transaction_id or self.id} - {self.result or 'received'}"
