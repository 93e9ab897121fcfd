# ledger/api/filters.py

"""
LIST FILTERS (django-filter)

    /api/ledger/journal-entries/?period=3&status=POSTED&source_module=AR
    /api/ledger/journal-entries/?date_from=2024-01-01&date_to=2024-01-31
    /api/ledger/periods/?company_id=1&status=OPEN
"""

import django_filters

from ledger.models import JournalEntry, Period


class JournalEntryFilter(django_filters.FilterSet):
    period = django_filters.NumberFilter(field_name="period_id")
    status = django_filters.ChoiceFilter(choices=JournalEntry.STATUS_CHOICES)
    source_module = django_filters.CharFilter(field_name="source_module", lookup_expr="iexact")
    source_id = django_filters.UUIDFilter(field_name="source_id")
    date_from = django_filters.DateFilter(field_name="date", lookup_expr="gte")
    date_to = django_filters.DateFilter(field_name="date", lookup_expr="lte")

    class Meta:
        model = JournalEntry
        fields = ["period", "status", "source_module", "source_id", "date_from", "date_to"]


class PeriodFilter(django_filters.FilterSet):
    company_id = django_filters.NumberFilter(field_name="company_id")
    status = django_filters.ChoiceFilter(choices=Period.STATUS_CHOICES)

    class Meta:
        model = Period
        fields = ["company_id", "status"]
