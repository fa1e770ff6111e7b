import uuid
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Event',
            fields=[
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='Created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Updated at')),
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('title', models.CharField(max_length=255, verbose_name='title')),
                ('description', models.TextField(blank=True, verbose_name='description')),
                ('venue', models.CharField(blank=True, max_length=255, verbose_name='venue')),
                ('starts_at', models.DateTimeField(verbose_name='starts at')),
                ('ends_at', models.DateTimeField(blank=True, null=True, verbose_name='ends at')),
                ('capacity', models.PositiveIntegerField(blank=True, help_text='Leave empty for unlimited capacity', null=True, verbose_name='capacity')),
                ('registered_count', models.PositiveIntegerField(default=0, editable=False, verbose_name='registered count')),
                ('is_archived', models.BooleanField(default=False, verbose_name='archived')),
                ('custom_fields', models.JSONField(blank=True, default=list, help_text='Registration form fields: [{id, label, type, required, options, price_overrides}]', verbose_name='custom fields')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='created_events', to=settings.AUTH_USER_MODEL, verbose_name='created by')),
            ],
            options={
                'verbose_name': 'event',
                'verbose_name_plural': 'events',
                'ordering': ['starts_at'],
                'constraints': [models.CheckConstraint(condition=models.Q(('capacity__isnull', True), ('registered_count__lte', models.F('capacity')), _connector='OR'), name='events_event_registered_within_capacity')],
            },
        ),
        migrations.CreateModel(
            name='TicketType',
            fields=[
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='Created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Updated at')),
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=100, verbose_name='name')),
                ('description', models.TextField(blank=True, verbose_name='description')),
                ('price', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))], verbose_name='price')),
                ('currency', models.CharField(default='GHS', max_length=3, verbose_name='currency')),
                ('quantity', models.PositiveIntegerField(blank=True, help_text='Leave empty for unlimited quantity', null=True, verbose_name='quantity')),
                ('sold', models.PositiveIntegerField(default=0, editable=False, verbose_name='sold')),
                ('starts_at', models.DateTimeField(blank=True, help_text='Leave empty for immediate availability.', null=True, verbose_name='sales start')),
                ('ends_at', models.DateTimeField(blank=True, null=True, verbose_name='sales end')),
                ('event', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='ticket_types', to='events.event', verbose_name='event')),
            ],
            options={
                'verbose_name': 'ticket type',
                'verbose_name_plural': 'ticket types',
                'ordering': ['price', 'name'],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('quantity__isnull', True), ('sold__lte', models.F('quantity')), _connector='OR'), name='events_tickettype_sold_within_quantity'),
                    models.CheckConstraint(condition=models.Q(('price__gte', 0)), name='events_tickettype_price_not_negative'),
                ],
            },
        ),
    ]
