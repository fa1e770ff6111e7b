from django.contrib import admin
from .models import Registration


@admin.register(Registration)
class RegistrationAdmin(admin.ModelAdmin):
    list_display = (
        'ticket_id', 'name', 'event', 'ticket_type', 'amount', 'status', 'payment_status', 'created_at'
    )
    search_fields = ('ticket_id', 'name', 'email', 'phone', 'payment_reference')
    list_filter = ('status', 'payment_status', 'event')
    # Lifecycle columns only change through the state machine
    readonly_fields = (
        'ticket_id', 'amount', 'status', 'payment_status', 'payment_reference',
        'checked_in_at', 'checked_in_by', 'cancelled_at', 'created_at', 'updated_at'
    )
    ordering = ('-created_at',)

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('event', 'ticket_type')
