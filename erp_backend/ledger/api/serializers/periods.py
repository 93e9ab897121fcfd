# ledger/api/serializers/periods.py

from rest_framework import serializers

from ledger.models import Period
from ledger.services.inputs import CreatePeriodInput


class PeriodSerializer(serializers.ModelSerializer):
    legacy_status = serializers.CharField(read_only=True)

    class Meta:
        model = Period
        fields = (
            "id",
            "company_id",
            "code",
            "name",
            "start_date",
            "end_date",
            "status",
            "legacy_status",
            "soft_closed_by",
            "soft_closed_at",
            "closed_by",
            "closed_at",
            "metadata",
            "created_at",
            "updated_at",
        )
        read_only_fields = fields


class PeriodCreateSerializer(serializers.Serializer):
    company_id = serializers.IntegerField(min_value=1)
    name = serializers.CharField(max_length=100)
    code = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    metadata = serializers.JSONField(required=False, default=dict)

    def validate(self, attrs):
        if attrs["start_date"] > attrs["end_date"]:
            raise serializers.ValidationError(
                {"end_date": "end_date must be >= start_date"}
            )
        return attrs

    def to_input(self, *, user) -> CreatePeriodInput:
        data = self.validated_data
        return CreatePeriodInput(
            company_id=data["company_id"],
            name=data["name"],
            code=data.get("code", ""),
            start_date=data["start_date"],
            end_date=data["end_date"],
            actor=user,
            metadata=data.get("metadata") or {},
        )
