"""Serializers for registrations API."""

from rest_framework import serializers

from apps.registrations.models import Registration
from core.phone_utils import format_phone_display


class RegistrationCreateSerializer(serializers.Serializer):
    """
    Attendee details for a new registration. Field-level rules (phone
    format, custom fields, sales window) are enforced by the registration
    service.
    """
    event_id = serializers.UUIDField()
    ticket_type_id = serializers.UUIDField()
    name = serializers.CharField(max_length=255)
    email = serializers.CharField(max_length=254)
    phone = serializers.CharField(max_length=32)
    custom_field_values = serializers.DictField(required=False, default=dict)


class RegistrationSerializer(serializers.ModelSerializer):
    event_title = serializers.CharField(source='event.title', read_only=True)
    ticket_type_name = serializers.CharField(source='ticket_type.name', read_only=True)
    requires_payment = serializers.SerializerMethodField()
    phone_display = serializers.SerializerMethodField()

    class Meta:
        model = Registration
        fields = [
            'id', 'event', 'event_title', 'ticket_type', 'ticket_type_name',
            'name', 'email', 'phone', 'phone_display', 'ticket_id', 'amount', 'currency',
            'status', 'payment_status', 'requires_payment', 'custom_field_values',
            'checked_in_at', 'cancelled_at', 'created_at'
        ]
        read_only_fields = fields

    def get_requires_payment(self, obj) -> bool:
        return obj.payment_status == 'pending'

    def get_phone_display(self, obj) -> str:
        return format_phone_display(obj.phone)


class CheckInSerializer(serializers.Serializer):
    ticket_id = serializers.CharField(max_length=32)


class CancelRegistrationSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default='')
