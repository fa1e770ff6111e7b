"""
Payment endpoints: initiate a mobile money prompt and receive gateway callbacks.
"""

import json
import logging

from drf_spectacular.utils import extend_schema
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.registrations.models import Registration
from core.exceptions import BusinessError, business_error_response
from .reconciler import WebhookReconciler
from .serializers import InitiatePaymentResponseSerializer, InitiatePaymentSerializer, WebhookAckSerializer
from .services import MoolrePaymentService, PaymentServiceException
from .webhook_auth import SIGNATURE_HEADER, verify_webhook

logger = logging.getLogger(__name__)

LOGGED_HEADERS = ('Content-Type', 'User-Agent', 'X-Forwarded-For', SIGNATURE_HEADER)


class InitiatePaymentView(APIView):
    """
    Ask the gateway to push a USSD payment prompt to the attendee's phone.
    """
    permission_classes = [permissions.AllowAny]

    @extend_schema(
        summary="Initiate mobile money payment",
        request=InitiatePaymentSerializer,
        responses={200: InitiatePaymentResponseSerializer},
    )
    def post(self, request):
        serializer = InitiatePaymentSerializer(data=request.data)
        if not serializer.is_valid():
            logger.warning(f"[PAYMENT] Invalid initiation data: {serializer.errors}")
            return Response({
                'success': False,
                'error': 'validation_error',
                'errors': serializer.errors
            }, status=status.HTTP_400_BAD_REQUEST)

        registration_id = serializer.validated_data['registration_id']
        try:
            registration = Registration.objects.select_related('event').get(pk=registration_id)
        except Registration.DoesNotExist:
            return Response({
                'success': False,
                'error': 'not_found',
                'message': 'Registration not found'
            }, status=status.HTTP_404_NOT_FOUND)

        try:
            result = MoolrePaymentService().initiate_payment(
                registration,
                description=serializer.validated_data.get('description') or None,
            )
        except BusinessError as e:
            return business_error_response(e, {'registration_id': str(registration_id)})
        except PaymentServiceException as e:
            logger.error(f"[PAYMENT] Configuration error: {e}")
            return Response({
                'success': False,
                'error': 'configuration_error',
                'message': 'Payments are not available right now'
            }, status=status.HTTP_503_SERVICE_UNAVAILABLE)

        return Response({
            'success': True,
            'message': result['message'],
            'reference': result['reference'],
            'registration_id': str(registration.id),
        }, status=status.HTTP_200_OK)


class PaymentWebhookView(APIView):
    """
    Moolre payment callback. Authenticated by shared secret or HMAC signature;
    once authenticated every callback is acknowledged with 200.
    """
    permission_classes = [permissions.AllowAny]
    authentication_classes = []
    throttle_classes = []

    @extend_schema(
        summary="Moolre payment callback",
        request=None,
        responses={200: WebhookAckSerializer},
    )
    def post(self, request):
        body = request.body
        if not verify_webhook(body, request.headers):
            logger.warning(
                f"[WEBHOOK] Refused unauthenticated callback from {request.META.get('REMOTE_ADDR')}"
            )
            return Response({'received': False, 'error': 'unauthorized'}, status=status.HTTP_401_UNAUTHORIZED)

        try:
            payload = json.loads(body or b'null')
        except ValueError:
            payload = body.decode('utf-8', errors='replace')
        logger.info(f"[WEBHOOK] Moolre payload: {payload}")

        headers = {name: request.headers[name] for name in LOGGED_HEADERS if name in request.headers}

        try:
            result = WebhookReconciler().reconcile(payload, headers=headers)
        except Exception:
            logger.exception("[WEBHOOK] Error while reconciling callback")
            return Response({'received': True, 'result': 'error'}, status=status.HTTP_200_OK)

        return Response({'received': True, 'result': result.result}, status=status.HTTP_200_OK)
