import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('registrations', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='PaymentTransaction',
            fields=[
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='Created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Updated at')),
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('transaction_type', models.CharField(choices=[('initiate', 'Initiate Payment'), ('webhook', 'Webhook Received')], max_length=20)),
                ('request_data', models.JSONField(default=dict)),
                ('response_data', models.JSONField(default=dict)),
                ('is_successful', models.BooleanField(default=False)),
                ('error_message', models.TextField(blank=True)),
                ('duration_ms', models.IntegerField(help_text='Request duration in milliseconds', null=True)),
                ('registration', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='payment_transactions', to='registrations.registration')),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['registration', 'created_at'], name='payment_pro_registr_3c9e1f_idx'),
                    models.Index(fields=['transaction_type', 'created_at'], name='payment_pro_transac_7a2d5b_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='PaymentWebhook',
            fields=[
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='Created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Updated at')),
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('headers', models.JSONField(default=dict)),
                ('payload', models.JSONField(default=dict)),
                ('raw_status', models.CharField(blank=True, max_length=100)),
                ('reference', models.CharField(blank=True, max_length=255)),
                ('transaction_id', models.CharField(blank=True, max_length=255)),
                ('outcome', models.CharField(blank=True, choices=[('success', 'Success'), ('failure', 'Failure'), ('indeterminate', 'Indeterminate')], max_length=20)),
                ('result', models.CharField(blank=True, choices=[('applied', 'Applied'), ('duplicate', 'Duplicate'), ('stale', 'Stale'), ('indeterminate', 'Indeterminate'), ('not_found', 'Registration not found'), ('ambiguous', 'Ambiguous reference'), ('amount_mismatch', 'Amount mismatch'), ('invalid_payload', 'Invalid payload')], max_length=20)),
                ('processed_at', models.DateTimeField(blank=True, null=True)),
                ('error_message', models.TextField(blank=True)),
                ('registration', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='payment_webhooks', to='registrations.registration')),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['result', 'created_at'], name='payment_pro_result_4e8b2c_idx'),
                ],
            },
        ),
    ]
