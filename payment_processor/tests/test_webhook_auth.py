from django.test import SimpleTestCase, override_settings

from payment_processor.webhook_auth import compute_signature, verify_webhook

BODY = b'{"status": 1, "data": {"externalref": "abc"}}'


class VerifyWebhookTests(SimpleTestCase):
    def test_valid_signature(self):
        signature = compute_signature(BODY, 'test-webhook-secret')
        self.assertTrue(verify_webhook(BODY, {'X-Moolre-Signature': signature}))

    def test_signature_of_other_body(self):
        signature = compute_signature(b'{}', 'test-webhook-secret')
        self.assertFalse(verify_webhook(BODY, {'X-Moolre-Signature': signature}))

    def test_shared_secret_header(self):
        self.assertTrue(verify_webhook(BODY, {'X-Webhook-Secret': 'test-webhook-secret'}))
        self.assertFalse(verify_webhook(BODY, {'X-Webhook-Secret': 'guess'}))

    def test_no_credentials(self):
        self.assertFalse(verify_webhook(BODY, {}))

    @override_settings(MOOLRE_WEBHOOK_SECRET='')
    def test_unconfigured_secret_refuses_everything(self):
        with self.assertLogs('payment_processor.webhook_auth', level='ERROR'):
            self.assertFalse(verify_webhook(BODY, {'X-Webhook-Secret': ''}))
