"""Serializers for request input and for rendering domain models."""

from decimal import Decimal

from rest_framework import serializers

from ticketing.domain import Buyer, PaymentMode, TicketRow
from ticketing.domain.allocation import available_range


class EnumValueField(serializers.Field):
    def to_representation(self, value):
        return value.value


class IntervalField(serializers.Field):
    def to_representation(self, value):
        return {"start": value.start, "end": value.end, "size": len(value)}


class BuyerSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    email = serializers.EmailField(required=False, allow_null=True, allow_blank=True)
    phone = serializers.CharField(max_length=50, required=False, allow_null=True, allow_blank=True)


def buyer_from(data: dict | None) -> Buyer | None:
    if not data:
        return None
    return Buyer.from_input(data["name"], data.get("email"), data.get("phone"))


def rows_from(data: list[dict]) -> list[TicketRow]:
    return [TicketRow(row["number"], row["code"], row["qr_payload"]) for row in data]


class EventSerializer(serializers.Serializer):
    """Serializer for Event domain model."""

    id = serializers.CharField()
    name = serializers.CharField()
    event_date = serializers.DateField()
    range_start = serializers.IntegerField()
    range_end = serializers.IntegerField()
    awaiting_ingestion = serializers.BooleanField()
    bulk_range = IntervalField(allow_null=True)
    bulk_buyer = BuyerSerializer(allow_null=True)
    available_range = serializers.SerializerMethodField()
    created_at = serializers.DateTimeField()
    updated_at = serializers.DateTimeField()

    def get_available_range(self, event):
        interval = available_range(event)
        if interval is None:
            return None
        return IntervalField().to_representation(interval)


class TicketSerializer(serializers.Serializer):
    """Serializer for Ticket domain model."""

    id = serializers.CharField()
    event_id = serializers.CharField()
    number = serializers.IntegerField()
    code = serializers.CharField()
    qr_payload = serializers.CharField()
    sale_type = EnumValueField()
    status = EnumValueField()
    buyer = BuyerSerializer(allow_null=True)
    sold_at = serializers.DateTimeField(allow_null=True)
    sold_by = serializers.IntegerField(allow_null=True)
    scanned_at = serializers.DateTimeField(allow_null=True)
    scanned_by = serializers.IntegerField(allow_null=True)


class ScanVerdictSerializer(serializers.Serializer):
    verdict = EnumValueField()
    reason = serializers.CharField()
    payload = serializers.CharField()
    ticket_number = serializers.IntegerField(allow_null=True)
    ticket_code = serializers.CharField(allow_null=True)
    buyer_name = serializers.CharField(allow_null=True)
    sale_type = EnumValueField(allow_null=True)
    event_name = serializers.CharField(allow_null=True)
    scanned_at = serializers.DateTimeField(allow_null=True)


class IngestionResultSerializer(serializers.Serializer):
    bulk_succeeded = serializers.IntegerField()
    cashier_succeeded = serializers.IntegerField()
    succeeded = serializers.IntegerField()
    failed = serializers.IntegerField()
    errors = serializers.ListField(child=serializers.CharField())


class TicketStatsSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    available = serializers.IntegerField()
    sold = serializers.IntegerField()
    used = serializers.IntegerField()
    bulk_sold = serializers.IntegerField()
    cashier_sold = serializers.IntegerField()
    revenue = serializers.DecimalField(max_digits=12, decimal_places=2, source="revenue.amount")
    user_count = serializers.IntegerField()


class EventCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    event_date = serializers.DateField()
    range_start = serializers.IntegerField(required=False, min_value=1)
    range_end = serializers.IntegerField(required=False, min_value=1)
    bulk_range_start = serializers.IntegerField(required=False)
    bulk_range_end = serializers.IntegerField(required=False)
    bulk_buyer = BuyerSerializer(required=False)

    def validate(self, attrs):
        for prefix in ("range", "bulk_range"):
            if (f"{prefix}_start" in attrs) != (f"{prefix}_end" in attrs):
                raise serializers.ValidationError(
                    f"{prefix}_start and {prefix}_end must be given together"
                )
        return attrs


class BulkAllocationSerializer(serializers.Serializer):
    start = serializers.IntegerField()
    end = serializers.IntegerField()
    buyer = BuyerSerializer()


class TicketRowSerializer(serializers.Serializer):
    number = serializers.IntegerField()
    code = serializers.CharField(max_length=100)
    qr_payload = serializers.CharField(max_length=500)


class IngestionSerializer(serializers.Serializer):
    rows = TicketRowSerializer(many=True)
    bulk_buyer = BuyerSerializer(required=False)
    bulk_range_start = serializers.IntegerField(required=False)
    bulk_range_end = serializers.IntegerField(required=False)

    def validate(self, attrs):
        if ("bulk_range_start" in attrs) != ("bulk_range_end" in attrs):
            raise serializers.ValidationError(
                "bulk_range_start and bulk_range_end must be given together"
            )
        return attrs


class SaleSerializer(serializers.Serializer):
    ticket_number = serializers.IntegerField()
    buyer = BuyerSerializer()
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal("0"))
    payment_mode = serializers.ChoiceField(
        choices=[mode.value for mode in PaymentMode], default=PaymentMode.CASH.value
    )


class ScanSerializer(serializers.Serializer):
    payload = serializers.CharField(max_length=500)
