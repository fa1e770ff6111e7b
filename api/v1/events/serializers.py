"""Serializers for events API."""

from typing import Optional

from rest_framework import serializers

from apps.events.models import Event, TicketType


class TicketTypeSerializer(serializers.ModelSerializer):
    """Ticket tier with live availability."""

    available = serializers.SerializerMethodField()
    is_sold_out = serializers.BooleanField(read_only=True)
    is_on_sale = serializers.SerializerMethodField()

    class Meta:
        model = TicketType
        fields = [
            'id', 'name', 'description', 'price', 'currency', 'quantity', 'sold',
            'available', 'is_sold_out', 'is_on_sale', 'starts_at', 'ends_at'
        ]
        read_only_fields = fields

    def get_available(self, obj) -> Optional[int]:
        return obj.available

    def get_is_on_sale(self, obj) -> bool:
        return obj.is_on_sale()


class EventListSerializer(serializers.ModelSerializer):
    """Serializer for event listings."""

    status = serializers.SerializerMethodField()
    spots_left = serializers.SerializerMethodField()
    min_price = serializers.SerializerMethodField()

    class Meta:
        model = Event
        fields = [
            'id', 'title', 'venue', 'starts_at', 'ends_at', 'status',
            'capacity', 'registered_count', 'spots_left', 'min_price'
        ]
        read_only_fields = fields

    def get_status(self, obj) -> str:
        return obj.get_status()

    def get_spots_left(self, obj) -> Optional[int]:
        return obj.spots_left

    def get_min_price(self, obj) -> Optional[str]:
        prices = [ticket_type.price for ticket_type in obj.ticket_types.all()]
        return str(min(prices)) if prices else None


class EventDetailSerializer(EventListSerializer):
    """Serializer for event detail, including tiers and the registration form."""

    ticket_types = TicketTypeSerializer(many=True, read_only=True)

    class Meta(EventListSerializer.Meta):
        fields = EventListSerializer.Meta.fields + ['description', 'custom_fields', 'ticket_types']
        read_only_fields = fields


class PendingSMSSerializer(serializers.Serializer):
    """Optional custom text for pending-payment reminders."""

    message_template = serializers.CharField(required=False, allow_blank=True, max_length=640)
