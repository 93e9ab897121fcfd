# ledger/api/serializers/close_runs.py

"""
======================================================
PATH: ledger/api/serializers/close_runs.py
======================================================
CLOSE RUN + CHECKLIST SERIALIZERS

Status values are passed through as-is; the close service is the single
authority on which checklist statuses are valid.
"""

from django.contrib.auth import get_user_model
from rest_framework import serializers

from ledger.models import ChecklistItem, CloseRun
from ledger.services.inputs import ChecklistUpdateInput, StartCloseRunInput


class ChecklistItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = ChecklistItem
        fields = (
            "id",
            "run",
            "code",
            "label",
            "status",
            "assigned_to",
            "completed_at",
            "comment",
            "created_at",
            "updated_at",
        )
        read_only_fields = fields


class CloseRunSerializer(serializers.ModelSerializer):
    checklist = ChecklistItemSerializer(source="checklist_items", many=True, read_only=True)
    period_status = serializers.CharField(source="period.status", read_only=True)

    class Meta:
        model = CloseRun
        fields = (
            "id",
            "company_id",
            "period",
            "period_status",
            "status",
            "created_by",
            "created_at",
            "completed_at",
            "notes",
            "checklist",
        )
        read_only_fields = fields


class StartCloseRunSerializer(serializers.Serializer):
    company_id = serializers.IntegerField(min_value=1)
    period = serializers.IntegerField(min_value=1)
    notes = serializers.CharField(required=False, allow_blank=True, default="")

    def to_input(self, *, user) -> StartCloseRunInput:
        data = self.validated_data
        return StartCloseRunInput(
            company_id=data["company_id"],
            period_id=data["period"],
            actor=user,
            notes=data.get("notes", ""),
        )


class ChecklistUpdateSerializer(serializers.Serializer):
    status = serializers.CharField()
    comment = serializers.CharField(required=False, allow_blank=True, default="")
    assigned_to = serializers.IntegerField(required=False, allow_null=True, min_value=1)

    def validate_status(self, value):
        return (value or "").strip().upper()

    def validate_assigned_to(self, value):
        if value is not None and not get_user_model().objects.filter(pk=value).exists():
            raise serializers.ValidationError("Unknown user")
        return value

    def to_input(self, *, item_id, user) -> ChecklistUpdateInput:
        data = self.validated_data
        return ChecklistUpdateInput(
            item_id=item_id,
            status=data["status"],
            actor=user,
            comment=data.get("comment", ""),
            assigned_to_id=data.get("assigned_to"),
        )
