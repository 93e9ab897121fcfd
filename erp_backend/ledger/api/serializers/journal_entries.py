# ledger/api/serializers/journal_entries.py

"""
======================================================
PATH: ledger/api/serializers/journal_entries.py
======================================================
JOURNAL ENTRY SERIALIZERS

Read:
- JournalEntrySerializer (header + lines)

Commands (shape only; ledger rules live in the service):
- JournalPostSerializer     -> PostingInput
- JournalVoidSerializer     -> VoidInput
- JournalReverseSerializer  -> ReverseInput
"""

from rest_framework import serializers

from ledger.models import JournalEntry, JournalLine
from ledger.services.inputs import (
    PostingInput,
    PostingLineInput,
    ReverseInput,
    VoidInput,
)
from ledger.services.posting_validator import MAX_SOURCE_MODULE_LENGTH


class JournalLineSerializer(serializers.ModelSerializer):
    account_code = serializers.CharField(source="account.code", read_only=True)
    account_name = serializers.CharField(source="account.name", read_only=True)

    class Meta:
        model = JournalLine
        fields = (
            "id",
            "account",
            "account_code",
            "account_name",
            "debit",
            "credit",
            "dim_company_id",
            "dim_branch_id",
            "dim_warehouse_id",
        )
        read_only_fields = fields


class JournalEntrySerializer(serializers.ModelSerializer):
    lines = JournalLineSerializer(many=True, read_only=True)

    class Meta:
        model = JournalEntry
        fields = (
            "id",
            "number",
            "period",
            "date",
            "source_module",
            "source_id",
            "memo",
            "posted_by",
            "posted_at",
            "status",
            "lines",
            "created_at",
            "updated_at",
        )
        read_only_fields = fields


class JournalLineInputSerializer(serializers.Serializer):
    account = serializers.IntegerField(min_value=1)
    debit = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, default="0")
    credit = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, default="0")
    dim_company_id = serializers.IntegerField(required=False, allow_null=True)
    dim_branch_id = serializers.IntegerField(required=False, allow_null=True)
    dim_warehouse_id = serializers.IntegerField(required=False, allow_null=True)


class JournalPostSerializer(serializers.Serializer):
    period = serializers.IntegerField(min_value=1)
    date = serializers.DateField()
    source_module = serializers.CharField(max_length=MAX_SOURCE_MODULE_LENGTH)
    source_id = serializers.UUIDField()
    memo = serializers.CharField(required=False, allow_blank=True, default="")
    lines = JournalLineInputSerializer(many=True)

    def to_input(self, *, user) -> PostingInput:
        data = self.validated_data
        return PostingInput(
            period_id=data["period"],
            date=data["date"],
            source_module=data["source_module"],
            source_id=data["source_id"],
            memo=data.get("memo", ""),
            posted_by=user,
            lines=[
                PostingLineInput(
                    account_id=line["account"],
                    debit=line.get("debit"),
                    credit=line.get("credit"),
                    dim_company_id=line.get("dim_company_id"),
                    dim_branch_id=line.get("dim_branch_id"),
                    dim_warehouse_id=line.get("dim_warehouse_id"),
                )
                for line in data["lines"]
            ],
        )


class JournalVoidSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")

    def to_input(self, *, entry_id, user) -> VoidInput:
        return VoidInput(
            entry_id=entry_id,
            actor=user,
            reason=self.validated_data.get("reason", ""),
        )


class JournalReverseSerializer(serializers.Serializer):
    target_date = serializers.DateField(required=False, allow_null=True)
    memo = serializers.CharField(required=False, allow_blank=True, default="")
    override = serializers.BooleanField(required=False, default=False)

    def to_input(self, *, entry_id, user) -> ReverseInput:
        data = self.validated_data
        return ReverseInput(
            entry_id=entry_id,
            actor=user,
            target_date=data.get("target_date"),
            memo=data.get("memo", ""),
            override=data.get("override", False),
        )
