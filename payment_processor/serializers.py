"""
Payment processor serializers.
"""

from rest_framework import serializers

from .models import PaymentTransaction, PaymentWebhook


class InitiatePaymentSerializer(serializers.Serializer):
    """
    Request a mobile money prompt for a pending registration
    """
    registration_id = serializers.UUIDField()
    description = serializers.CharField(max_length=255, required=False, allow_blank=True)


class InitiatePaymentResponseSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    message = serializers.CharField()
    reference = serializers.CharField(allow_null=True)
    registration_id = serializers.UUIDField()


class WebhookAckSerializer(serializers.Serializer):
    received = serializers.BooleanField()
    result = serializers.CharField()


class PaymentTransactionSerializer(serializers.ModelSerializer):
    class Meta:
        model = PaymentTransaction
        fields = [
            'id', 'registration', 'transaction_type', 'request_data', 'response_data',
            'is_successful', 'error_message', 'duration_ms', 'created_at'
        ]
        read_only_fields = fields


class PaymentWebhookSerializer(serializers.ModelSerializer):
    class Meta:
        model = PaymentWebhook
        fields = [
            'id', 'registration', 'raw_status', 'reference', 'transaction_id',
            'outcome', 'result', 'processed_at', 'error_message', 'created_at'
        ]
        read_only_fields = fields
