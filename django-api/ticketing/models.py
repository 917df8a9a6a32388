"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/models.py.
"""

import uuid

from django.conf import settings
from django.db import models
from django.db.models import F, Q


class Event(models.Model):
    """Persistence model for events."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    event_date = models.DateField()
    range_start = models.PositiveIntegerField(default=0)
    range_end = models.PositiveIntegerField(default=0)
    bulk_range_start = models.PositiveIntegerField(blank=True, null=True)
    bulk_range_end = models.PositiveIntegerField(blank=True, null=True)
    bulk_buyer_name = models.CharField(max_length=255, blank=True, null=True)
    bulk_buyer_email = models.EmailField(blank=True, null=True)
    bulk_buyer_phone = models.CharField(max_length=50, blank=True, null=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name="created_events",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-event_date", "-created_at"]
        indexes = [
            models.Index(fields=["-event_date"], name="ticketing_event_date_idx"),
            models.Index(
                fields=["bulk_range_start", "bulk_range_end"], name="ticketing_event_bulk_idx"
            ),
        ]
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(bulk_range_start__isnull=True, bulk_range_end__isnull=True)
                    | Q(
                        bulk_range_start__isnull=False,
                        bulk_range_end__isnull=False,
                        bulk_range_start__lte=F("bulk_range_end"),
                    )
                ),
                name="ticketing_event_bulk_range_pair",
            ),
            models.CheckConstraint(
                condition=(
                    Q(bulk_range_start__isnull=True)
                    | Q(range_start=0, range_end=0)
                    | Q(
                        bulk_range_start__gte=F("range_start"),
                        bulk_range_end__lte=F("range_end"),
                    )
                ),
                name="ticketing_event_bulk_within_range",
            ),
        ]

    def __str__(self) -> str:
        return self.name


class Ticket(models.Model):
    """Persistence model for numbered tickets."""

    class SaleType(models.TextChoices):
        CASHIER = "cashier", "Cashier"
        BULK = "bulk", "Bulk"

    class Status(models.TextChoices):
        AVAILABLE = "available", "Available"
        SOLD = "sold", "Sold"
        USED = "used", "Used"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="tickets")
    number = models.PositiveIntegerField()
    code = models.CharField(max_length=100)
    qr_payload = models.CharField(max_length=500, unique=True)
    sale_type = models.CharField(
        max_length=10, choices=SaleType.choices, default=SaleType.CASHIER
    )
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.AVAILABLE)
    buyer_name = models.CharField(max_length=255, blank=True, null=True)
    buyer_email = models.EmailField(blank=True, null=True)
    buyer_phone = models.CharField(max_length=50, blank=True, null=True)
    sold_at = models.DateTimeField(blank=True, null=True)
    sold_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name="sold_tickets",
    )
    scanned_at = models.DateTimeField(blank=True, null=True)
    scanned_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name="scanned_tickets",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["event_id", "number"]
        indexes = [
            models.Index(fields=["event", "status"], name="ticketing_ticket_status_idx"),
            models.Index(fields=["sale_type"], name="ticketing_ticket_type_idx"),
        ]
        constraints = [
            models.UniqueConstraint(fields=["event", "number"], name="ticketing_ticket_event_number"),
            models.UniqueConstraint(fields=["event", "code"], name="ticketing_ticket_event_code"),
        ]

    def __str__(self) -> str:
        return f"{self.code} ({self.status})"


class Sale(models.Model):
    """Persistence model for cashier sales."""

    class PaymentMode(models.TextChoices):
        CASH = "cash", "Cash"
        CARD = "card", "Card"
        MOBILE = "mobile", "Mobile"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    ticket = models.OneToOneField(Ticket, on_delete=models.CASCADE, related_name="sale")
    cashier = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name="sales",
    )
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    payment_mode = models.CharField(
        max_length=10, choices=PaymentMode.choices, default=PaymentMode.CASH
    )
    sale_timestamp = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-sale_timestamp"]
        indexes = [
            models.Index(fields=["cashier", "-sale_timestamp"], name="ticketing_sale_cashier_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.ticket.code} - {self.amount}"
