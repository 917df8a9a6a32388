from django.contrib import admin

from ticketing.models import Event, Sale, Ticket


class SaleInline(admin.StackedInline):
    model = Sale
    extra = 0
    can_delete = False
    readonly_fields = ["cashier", "amount", "payment_mode", "sale_timestamp"]


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = [
        "name",
        "event_date",
        "range_start",
        "range_end",
        "bulk_range_start",
        "bulk_range_end",
        "bulk_buyer_name",
    ]
    search_fields = ["name", "bulk_buyer_name"]
    list_filter = ["event_date"]


@admin.register(Ticket)
class TicketAdmin(admin.ModelAdmin):
    list_display = ["code", "number", "event", "sale_type", "status", "buyer_name", "sold_at"]
    list_filter = ["event", "sale_type", "status"]
    search_fields = ["code", "qr_payload", "buyer_name"]
    inlines = [SaleInline]


@admin.register(Sale)
class SaleAdmin(admin.ModelAdmin):
    list_display = ["ticket", "cashier", "amount", "payment_mode", "sale_timestamp"]
    list_filter = ["payment_mode", "ticket__event"]
