import uuid

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
            name="Event",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("name", models.CharField(max_length=255)),
                ("event_date", models.DateField()),
                ("range_start", models.PositiveIntegerField(default=0)),
                ("range_end", models.PositiveIntegerField(default=0)),
                ("bulk_range_start", models.PositiveIntegerField(blank=True, null=True)),
                ("bulk_range_end", models.PositiveIntegerField(blank=True, null=True)),
                ("bulk_buyer_name", models.CharField(blank=True, max_length=255, null=True)),
                ("bulk_buyer_email", models.EmailField(blank=True, max_length=254, null=True)),
                ("bulk_buyer_phone", models.CharField(blank=True, max_length=50, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="created_events",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-event_date", "-created_at"],
                "indexes": [
                    models.Index(fields=["-event_date"], name="ticketing_event_date_idx"),
                    models.Index(
                        fields=["bulk_range_start", "bulk_range_end"],
                        name="ticketing_event_bulk_idx",
                    ),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(bulk_range_end__isnull=True, bulk_range_start__isnull=True),
                            models.Q(
                                bulk_range_end__isnull=False,
                                bulk_range_start__isnull=False,
                                bulk_range_start__lte=models.F("bulk_range_end"),
                            ),
                            _connector="OR",
                        ),
                        name="ticketing_event_bulk_range_pair",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            ("bulk_range_start__isnull", True),
                            models.Q(range_end=0, range_start=0),
                            models.Q(
                                bulk_range_end__lte=models.F("range_end"),
                                bulk_range_start__gte=models.F("range_start"),
                            ),
                            _connector="OR",
                        ),
                        name="ticketing_event_bulk_within_range",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Ticket",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("number", models.PositiveIntegerField()),
                ("code", models.CharField(max_length=100)),
                ("qr_payload", models.CharField(max_length=500, unique=True)),
                (
                    "sale_type",
                    models.CharField(
                        choices=[("cashier", "Cashier"), ("bulk", "Bulk")],
                        default="cashier",
                        max_length=10,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("available", "Available"), ("sold", "Sold"), ("used", "Used")],
                        default="available",
                        max_length=10,
                    ),
                ),
                ("buyer_name", models.CharField(blank=True, max_length=255, null=True)),
                ("buyer_email", models.EmailField(blank=True, max_length=254, null=True)),
                ("buyer_phone", models.CharField(blank=True, max_length=50, null=True)),
                ("sold_at", models.DateTimeField(blank=True, null=True)),
                ("scanned_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="tickets",
                        to="ticketing.event",
                    ),
                ),
                (
                    "scanned_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="scanned_tickets",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "sold_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="sold_tickets",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["event_id", "number"],
                "indexes": [
                    models.Index(fields=["event", "status"], name="ticketing_ticket_status_idx"),
                    models.Index(fields=["sale_type"], name="ticketing_ticket_type_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("event", "number"), name="ticketing_ticket_event_number"
                    ),
                    models.UniqueConstraint(
                        fields=("event", "code"), name="ticketing_ticket_event_code"
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Sale",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("amount", models.DecimalField(decimal_places=2, max_digits=10)),
                (
                    "payment_mode",
                    models.CharField(
                        choices=[("cash", "Cash"), ("card", "Card"), ("mobile", "Mobile")],
                        default="cash",
                        max_length=10,
                    ),
                ),
                ("sale_timestamp", models.DateTimeField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "cashier",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="sales",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "ticket",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="sale",
                        to="ticketing.ticket",
                    ),
                ),
            ],
            options={
                "ordering": ["-sale_timestamp"],
                "indexes": [
                    models.Index(
                        fields=["cashier", "-sale_timestamp"], name="ticketing_sale_cashier_idx"
                    ),
                ],
            },
        ),
    ]
