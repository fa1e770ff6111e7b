"""Views for events API."""

import logging

from drf_spectacular.utils import extend_schema
from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.events.models import Event
from apps.notifications.services import send_pending_payment_reminders
from core.permissions import IsEventManager
from .serializers import EventDetailSerializer, EventListSerializer, PendingSMSSerializer

logger = logging.getLogger(__name__)


class EventViewSet(viewsets.ReadOnlyModelViewSet):
    """Public event listing with derived status and tier availability."""

    serializer_class = EventListSerializer
    permission_classes = [permissions.AllowAny]

    def get_queryset(self):
        queryset = Event.objects.prefetch_related('ticket_types')
        if self.action == 'list':
            queryset = queryset.filter(is_archived=False)
        return queryset

    def get_serializer_class(self):
        """Return appropriate serializer based on action."""
        if self.action == 'retrieve':
            return EventDetailSerializer
        if self.action == 'pending_sms':
            return PendingSMSSerializer
        return EventListSerializer

    def get_permissions(self):
        if self.action == 'pending_sms':
            return [permissions.IsAuthenticated(), IsEventManager()]
        return super().get_permissions()

    @extend_schema(
        summary="Text attendees with pending payments",
        request=PendingSMSSerializer,
        responses={200: {"description": "Number of reminders queued"}},
    )
    @action(detail=True, methods=['post'], url_path='pending-sms')
    def pending_sms(self, request, pk=None):
        """Queue a reminder SMS to every attendee of this event whose payment is pending."""
        event = self.get_object()
        serializer = PendingSMSSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            queued = send_pending_payment_reminders(
                event,
                message_template=serializer.validated_data.get('message_template') or None,
            )
        except ValueError as e:
            return Response({
                'success': False,
                'error': 'invalid_template',
                'message': str(e)
            }, status=status.HTTP_400_BAD_REQUEST)

        logger.info(f"[EVENTS] {request.user} queued {queued} pending-payment reminders for {event.id}")
        return Response({
            'success': True,
            'queued': queued,
            'message': f'{queued} reminder(s) queued'
        })
