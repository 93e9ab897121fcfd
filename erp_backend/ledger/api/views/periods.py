# PATH: ledger/api/views/periods.py

from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ledger.api.errors import handle_domain_error
from ledger.api.filters import PeriodFilter
from ledger.api.serializers import PeriodCreateSerializer, PeriodSerializer
from ledger.models import Period
from ledger.services.period_close_service import PeriodCloseError, PeriodCloseService


@extend_schema(tags=["ledger"])
class PeriodViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """
    Accounting periods.

    Status changes go through close runs (soft-close / hard-close), never
    through this endpoint.
    """

    permission_classes = [IsAuthenticated]
    serializer_class = PeriodSerializer
    filterset_class = PeriodFilter
    http_method_names = ["get", "post", "head", "options"]

    queryset = Period.objects.all().order_by("-start_date", "-id")

    def get_serializer_class(self):
        if self.action == "create":
            return PeriodCreateSerializer
        return PeriodSerializer

    @extend_schema(request=PeriodCreateSerializer, responses={201: PeriodSerializer})
    def create(self, request, *args, **kwargs):
        command = PeriodCreateSerializer(data=request.data)
        command.is_valid(raise_exception=True)

        try:
            period = PeriodCloseService().create_period(command.to_input(user=request.user))
        except PeriodCloseError as exc:
            return handle_domain_error(exc)

        return Response(PeriodSerializer(period).data, status=status.HTTP_201_CREATED)
