from django.contrib import admin
from .models import PaymentTransaction, PaymentWebhook


@admin.register(PaymentTransaction)
class PaymentTransactionAdmin(admin.ModelAdmin):
    list_display = ('transaction_type', 'registration', 'is_successful', 'duration_ms', 'created_at')
    list_filter = ('transaction_type', 'is_successful')
    search_fields = ('registration__ticket_id', 'error_message')
    readonly_fields = [f.name for f in PaymentTransaction._meta.fields]


@admin.register(PaymentWebhook)
class PaymentWebhookAdmin(admin.ModelAdmin):
    list_display = ('reference', 'transaction_id', 'raw_status', 'outcome', 'result', 'processed_at', 'created_at')
    list_filter = ('result', 'outcome')
    search_fields = ('reference', 'transaction_id', 'registration__ticket_id')
    readonly_fields = [f.name for f in PaymentWebhook._meta.fields]
