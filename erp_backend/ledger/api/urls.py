# ledger/api/urls.py

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from ledger.api.views import (
    ChecklistItemViewSet,
    CloseRunViewSet,
    JournalEntryViewSet,
    PeriodViewSet,
)

router = DefaultRouter()
router.register("journal-entries", JournalEntryViewSet, basename="journal-entry")
router.register("periods", PeriodViewSet, basename="period")
router.register("close-runs", CloseRunViewSet, basename="close-run")
router.register("checklist-items", ChecklistItemViewSet, basename="checklist-item")

urlpatterns = [
    path("", include(router.urls)),
]
