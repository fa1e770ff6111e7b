import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('events', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Registration',
            fields=[
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='Created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Updated at')),
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=255, verbose_name='name')),
                ('email', models.EmailField(max_length=254, verbose_name='email')),
                ('phone', models.CharField(blank=True, db_index=True, help_text='Normalized international format, 233XXXXXXXXX', max_length=20, verbose_name='phone')),
                ('ticket_id', models.CharField(max_length=32, unique=True, verbose_name='ticket ID')),
                ('amount', models.DecimalField(decimal_places=2, editable=False, max_digits=10, verbose_name='amount')),
                ('currency', models.CharField(default='GHS', max_length=3, verbose_name='currency')),
                ('status', models.CharField(choices=[('confirmed', 'Confirmed'), ('pending', 'Pending'), ('cancelled', 'Cancelled'), ('checked-in', 'Checked in')], max_length=20, verbose_name='status')),
                ('payment_status', models.CharField(choices=[('paid', 'Paid'), ('pending', 'Pending'), ('free', 'Free'), ('refunded', 'Refunded'), ('failed', 'Failed')], max_length=20, verbose_name='payment status')),
                ('payment_reference', models.CharField(blank=True, db_column='stripe_payment_intent_id', help_text='Gateway tracking token used to match payment callbacks', max_length=255, null=True, unique=True, verbose_name='payment reference')),
                ('custom_field_values', models.JSONField(blank=True, default=dict, verbose_name='custom field values')),
                ('checked_in_at', models.DateTimeField(blank=True, null=True, verbose_name='checked in at')),
                ('cancelled_at', models.DateTimeField(blank=True, null=True, verbose_name='cancelled at')),
                ('cancellation_reason', models.TextField(blank=True, verbose_name='cancellation reason')),
                ('checked_in_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='checked_in_registrations', to=settings.AUTH_USER_MODEL, verbose_name='checked in by')),
                ('event', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='registrations', to='events.event', verbose_name='event')),
                ('ticket_type', models.ForeignKey(on_delete=django.db.models.deletion.RESTRICT, related_name='registrations', to='events.tickettype', verbose_name='ticket type')),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='registrations', to=settings.AUTH_USER_MODEL, verbose_name='user')),
            ],
            options={
                'verbose_name': 'registration',
                'verbose_name_plural': 'registrations',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['event', 'payment_status'], name='registratio_event_i_5b1c3e_idx'),
                    models.Index(fields=['email'], name='registratio_email_8d2f4a_idx'),
                ],
            },
        ),
    ]
