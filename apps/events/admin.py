from django.contrib import admin
from .models import Event, TicketType


class TicketTypeInline(admin.TabularInline):
    model = TicketType
    extra = 0
    fields = ('name', 'price', 'currency', 'quantity', 'sold', 'starts_at', 'ends_at')
    readonly_fields = ('sold',)


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = (
        'title', 'venue', 'starts_at', 'ends_at', 'capacity', 'registered_count', 'is_archived', 'created_at'
    )
    search_fields = ('title', 'venue', 'description')
    list_filter = ('is_archived', 'starts_at')
    readonly_fields = ('created_at', 'updated_at', 'registered_count')
    ordering = ('-starts_at',)
    inlines = [TicketTypeInline]


@admin.register(TicketType)
class TicketTypeAdmin(admin.ModelAdmin):
    list_display = ('name', 'event', 'price', 'quantity', 'sold', 'created_at')
    search_fields = ('name', 'event__title')
    list_filter = ('event',)
    readonly_fields = ('created_at', 'updated_at', 'sold')

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('event')
