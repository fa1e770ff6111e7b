from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.registrations import services
from apps.registrations.tests.helpers import attendee, make_event, make_ticket_type
from core.models import AppRole, UserRole


class EventListTests(APITestCase):
    def setUp(self):
        self.event = make_event(title='Baptist Youth Conference', capacity=2)
        self.ticket_type = make_ticket_type(self.event, price='50.00', quantity=1)
        make_event(title='Old Retreat', is_archived=True)

    def test_list_hides_archived_events(self):
        response = self.client.get(reverse('event-list'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        results = response.data['results'] if isinstance(response.data, dict) else response.data
        self.assertEqual([item['title'] for item in results], ['Baptist Youth Conference'])
        self.assertEqual(results[0]['status'], 'upcoming')
        self.assertEqual(results[0]['min_price'], '50.00')

    def test_detail_shows_tier_availability(self):
        services.create_registration(self.event.pk, self.ticket_type.pk, attendee())

        response = self.client.get(reverse('event-detail', args=[self.event.id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['registered_count'], 1)
        self.assertEqual(response.data['spots_left'], 1)
        tier = response.data['ticket_types'][0]
        self.assertEqual(tier['available'], 0)
        self.assertTrue(tier['is_sold_out'])


class PendingSmsTests(APITestCase):
    def setUp(self):
        User = get_user_model()
        self.finance = User.objects.create_user(username='finance', password='password123')
        UserRole.objects.create(user=self.finance, role=AppRole.FINANCE_OFFICER)
        self.door = User.objects.create_user(username='door', password='password123')
        UserRole.objects.create(user=self.door, role=AppRole.CHECKIN_STAFF)

        self.event = make_event()
        ticket_type = make_ticket_type(self.event, price='50.00')
        services.create_registration(self.event.pk, ticket_type.pk, attendee())
        self.url = reverse('event-pending-sms', args=[self.event.id])

    @patch('apps.notifications.services.send_sms_notification')
    def test_queues_reminders(self, mock_task):
        self.client.force_authenticate(user=self.finance)

        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.post(self.url, {}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['queued'], 1)
        mock_task.delay.assert_called_once()

    def test_invalid_template(self):
        self.client.force_authenticate(user=self.finance)

        response = self.client.post(self.url, {'message_template': 'Hi {nickname}'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_requires_manager_role(self):
        self.client.force_authenticate(user=self.door)

        response = self.client.post(self.url, {}, format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
