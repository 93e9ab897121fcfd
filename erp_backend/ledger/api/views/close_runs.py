# PATH: ledger/api/views/close_runs.py

"""
PERIOD CLOSE API

Endpoints:
- POST  /close-runs/                  start a close run (seeds the checklist)
- GET   /close-runs/{id}/             run + checklist
- POST  /close-runs/{id}/soft-close/  period OPEN -> SOFT_CLOSED
- POST  /close-runs/{id}/hard-close/  period -> HARD_CLOSED (checklist must be done)
- POST  /close-runs/{id}/cancel/      run -> CANCELLED
- PATCH /checklist-items/{id}/        update one checklist item
"""

from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ledger.api.errors import handle_domain_error
from ledger.api.serializers import (
    ChecklistItemSerializer,
    ChecklistUpdateSerializer,
    CloseRunSerializer,
    PeriodSerializer,
    StartCloseRunSerializer,
)
from ledger.models import ChecklistItem, CloseRun
from ledger.services.period_close_service import PeriodCloseError, PeriodCloseService


def _as_id(pk):
    try:
        return int(pk)
    except (TypeError, ValueError):
        return None


@extend_schema(tags=["ledger"])
class CloseRunViewSet(mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    permission_classes = [IsAuthenticated]
    serializer_class = CloseRunSerializer
    http_method_names = ["get", "post", "head", "options"]

    queryset = CloseRun.objects.select_related("period", "created_by").prefetch_related(
        "checklist_items"
    )

    def get_service(self) -> PeriodCloseService:
        return PeriodCloseService()

    def get_serializer_class(self):
        if self.action == "create":
            return StartCloseRunSerializer
        return CloseRunSerializer

    @extend_schema(request=StartCloseRunSerializer, responses={201: CloseRunSerializer})
    def create(self, request, *args, **kwargs):
        command = StartCloseRunSerializer(data=request.data)
        command.is_valid(raise_exception=True)

        try:
            run = self.get_service().start_close_run(command.to_input(user=request.user))
        except PeriodCloseError as exc:
            return handle_domain_error(exc)

        return Response(CloseRunSerializer(run).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=None, responses={200: PeriodSerializer})
    @action(detail=True, methods=["post"], url_path="soft-close")
    def soft_close(self, request, pk=None):
        try:
            period = self.get_service().soft_close(_as_id(pk), request.user)
        except PeriodCloseError as exc:
            return handle_domain_error(exc)
        return Response(PeriodSerializer(period).data, status=status.HTTP_200_OK)

    @extend_schema(request=None, responses={200: PeriodSerializer})
    @action(detail=True, methods=["post"], url_path="hard-close")
    def hard_close(self, request, pk=None):
        try:
            period = self.get_service().hard_close(_as_id(pk), request.user)
        except PeriodCloseError as exc:
            return handle_domain_error(exc)
        return Response(PeriodSerializer(period).data, status=status.HTTP_200_OK)

    @extend_schema(request=None, responses={200: CloseRunSerializer})
    @action(detail=True, methods=["post"], url_path="cancel")
    def cancel(self, request, pk=None):
        try:
            run = self.get_service().cancel_close_run(_as_id(pk), request.user)
        except PeriodCloseError as exc:
            return handle_domain_error(exc)
        return Response(CloseRunSerializer(run).data, status=status.HTTP_200_OK)


@extend_schema(tags=["ledger"])
class ChecklistItemViewSet(mixins.UpdateModelMixin, viewsets.GenericViewSet):
    permission_classes = [IsAuthenticated]
    serializer_class = ChecklistUpdateSerializer
    http_method_names = ["patch", "options"]

    queryset = ChecklistItem.objects.all()

    @extend_schema(request=ChecklistUpdateSerializer, responses={200: ChecklistItemSerializer})
    def partial_update(self, request, *args, **kwargs):
        command = ChecklistUpdateSerializer(data=request.data)
        command.is_valid(raise_exception=True)

        try:
            item = PeriodCloseService().update_checklist(
                command.to_input(item_id=_as_id(kwargs.get("pk")), user=request.user)
            )
        except PeriodCloseError as exc:
            return handle_domain_error(exc)

        return Response(ChecklistItemSerializer(item).data, status=status.HTTP_200_OK)
