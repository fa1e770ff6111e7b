"""
Registration endpoints: public sign-up, ticket QR codes and door check-in.
"""

import logging

from django.http import HttpResponse
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema, OpenApiParameter
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from apps.registrations import services
from apps.registrations.models import Registration
from core.exceptions import BusinessError, business_error_response
from core.permissions import IsCheckInStaff, IsEventManager
from core.utils import generate_qr_code
from .serializers import (
    CancelRegistrationSerializer,
    CheckInSerializer,
    RegistrationCreateSerializer,
    RegistrationSerializer,
)

logger = logging.getLogger(__name__)


def _invalid(serializer):
    return Response({
        'success': False,
        'error': 'validation_error',
        'errors': serializer.errors
    }, status=status.HTTP_400_BAD_REQUEST)


@extend_schema(
    summary="Register for an event",
    description="Reserves one ticket of the chosen type. Free tickets are confirmed at once; "
                "paid tickets stay pending until the payment callback arrives.",
    request=RegistrationCreateSerializer,
    responses={201: RegistrationSerializer}
)
@api_view(['POST'])
@permission_classes([AllowAny])
def create_registration(request):
    serializer = RegistrationCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return _invalid(serializer)

    data = serializer.validated_data
    try:
        registration = services.create_registration(
            event_id=data['event_id'],
            ticket_type_id=data['ticket_type_id'],
            attendee={'name': data['name'], 'email': data['email'], 'phone': data['phone']},
            custom_field_values=data.get('custom_field_values'),
            user=request.user,
        )
    except BusinessError as e:
        return business_error_response(e, {'event_id': str(data['event_id'])})

    return Response({
        'success': True,
        'registration': RegistrationSerializer(registration).data,
    }, status=status.HTTP_201_CREATED)


@extend_schema(
    summary="Find registrations",
    description="Scanner lookup by ticket ID, email or phone number",
    parameters=[OpenApiParameter('q', OpenApiTypes.STR, OpenApiParameter.QUERY, required=True)],
    responses={200: RegistrationSerializer(many=True)}
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsCheckInStaff])
def search_registrations(request):
    results = services.find_registrations(request.query_params.get('q', ''))
    return Response({
        'success': True,
        'count': len(results),
        'results': RegistrationSerializer(results, many=True).data,
    })


@extend_schema(
    summary="Check in a ticket",
    request=CheckInSerializer,
    responses={200: RegistrationSerializer}
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsCheckInStaff])
def check_in(request):
    serializer = CheckInSerializer(data=request.data)
    if not serializer.is_valid():
        return _invalid(serializer)

    ticket_id = serializer.validated_data['ticket_id']
    try:
        registration = services.check_in(ticket_id, staff_user=request.user)
    except BusinessError as e:
        return business_error_response(e, {'ticket_id': ticket_id})

    return Response({
        'success': True,
        'message': f'{registration.name} checked in',
        'registration': RegistrationSerializer(registration).data,
    })


@extend_schema(
    summary="Cancel a registration",
    description="Pending payments are marked failed, free tickets cancelled and paid tickets refunded. "
                "The ticket goes back on sale.",
    request=CancelRegistrationSerializer,
    responses={200: RegistrationSerializer}
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsEventManager])
def cancel_registration(request, registration_id):
    serializer = CancelRegistrationSerializer(data=request.data)
    if not serializer.is_valid():
        return _invalid(serializer)

    try:
        registration = Registration.objects.select_related('event', 'ticket_type').get(pk=registration_id)
    except Registration.DoesNotExist:
        return Response({
            'success': False,
            'error': 'not_found',
            'message': 'Registration not found'
        }, status=status.HTTP_404_NOT_FOUND)

    try:
        services.cancel_registration(registration, reason=serializer.validated_data['reason'])
    except BusinessError as e:
        return business_error_response(e, {'registration_id': str(registration_id)})

    return Response({
        'success': True,
        'registration': RegistrationSerializer(registration).data,
    })


@extend_schema(
    summary="Ticket QR code",
    responses={(200, 'image/png'): OpenApiTypes.BINARY}
)
@api_view(['GET'])
@permission_classes([AllowAny])
def ticket_qr(request, ticket_id):
    try:
        registration = services.get_by_ticket_id(ticket_id)
    except BusinessError as e:
        return business_error_response(e, {'ticket_id': ticket_id})

    return HttpResponse(generate_qr_code(registration.ticket_id), content_type='image/png')
