# PATH: ledger/api/views/journal_entries.py

"""
JOURNAL ENTRY API

Thin adapter over LedgerService:
- list / retrieve (read-only, filterable)
- create  -> post_journal
- void    -> void_journal     (POST /journal-entries/{id}/void/)
- reverse -> reverse_journal  (POST /journal-entries/{id}/reverse/)

No ledger rules here: views validate request shape, call the service and
translate domain errors (ledger.api.errors).
"""

from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ledger.api.errors import handle_domain_error
from ledger.api.filters import JournalEntryFilter
from ledger.api.serializers import (
    JournalEntrySerializer,
    JournalPostSerializer,
    JournalReverseSerializer,
    JournalVoidSerializer,
)
from ledger.models import JournalEntry
from ledger.services.exceptions import LedgerServiceError
from ledger.services.journal_entry_service import LedgerService


@extend_schema(tags=["ledger"])
class JournalEntryViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    permission_classes = [IsAuthenticated]
    serializer_class = JournalEntrySerializer
    filterset_class = JournalEntryFilter
    http_method_names = ["get", "post", "head", "options"]

    queryset = (
        JournalEntry.objects.select_related("period", "posted_by")
        .prefetch_related("lines__account")
        .order_by("-number")
    )

    def get_service(self) -> LedgerService:
        return LedgerService()

    def get_serializer_class(self):
        if self.action == "create":
            return JournalPostSerializer
        if self.action == "void":
            return JournalVoidSerializer
        if self.action == "reverse":
            return JournalReverseSerializer
        return JournalEntrySerializer

    @extend_schema(request=JournalPostSerializer, responses={201: JournalEntrySerializer})
    def create(self, request, *args, **kwargs):
        command = JournalPostSerializer(data=request.data)
        command.is_valid(raise_exception=True)

        try:
            entry = self.get_service().post_journal(command.to_input(user=request.user))
        except LedgerServiceError as exc:
            return handle_domain_error(exc)

        return Response(JournalEntrySerializer(entry).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=JournalVoidSerializer, responses={200: JournalEntrySerializer})
    @action(detail=True, methods=["post"], url_path="void")
    def void(self, request, pk=None):
        command = JournalVoidSerializer(data=request.data)
        command.is_valid(raise_exception=True)

        try:
            entry = self.get_service().void_journal(
                command.to_input(entry_id=_entry_id(pk), user=request.user)
            )
        except LedgerServiceError as exc:
            return handle_domain_error(exc)

        return Response(JournalEntrySerializer(entry).data, status=status.HTTP_200_OK)

    @extend_schema(request=JournalReverseSerializer, responses={201: JournalEntrySerializer})
    @action(detail=True, methods=["post"], url_path="reverse")
    def reverse(self, request, pk=None):
        command = JournalReverseSerializer(data=request.data)
        command.is_valid(raise_exception=True)

        try:
            reversal = self.get_service().reverse_journal(
                command.to_input(entry_id=_entry_id(pk), user=request.user)
            )
        except LedgerServiceError as exc:
            return handle_domain_error(exc)

        return Response(JournalEntrySerializer(reversal).data, status=status.HTTP_201_CREATED)


def _entry_id(pk):
    try:
        return int(pk)
    except (TypeError, ValueError):
        return None
