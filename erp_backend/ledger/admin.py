# ledger/admin.py

from django.contrib import admin

from ledger.models import (
    Account,
    AccountMapping,
    AuditLog,
    ChecklistItem,
    CloseRun,
    JournalEntry,
    JournalLine,
    Period,
    SourceLink,
)


class ReadOnlyAdminMixin:
    """Ledger rows are written by the services only."""

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# ============================================================
# ACCOUNT
# ============================================================


@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "account_type", "parent", "is_active")
    list_filter = ("account_type", "is_active")
    search_fields = ("code", "name")
    ordering = ("code",)
    readonly_fields = ("created_at", "updated_at")

    fieldsets = (
        ("Account Identity", {"fields": ("code", "name", "account_type", "parent")}),
        ("Status", {"fields": ("is_active",)}),
        ("System Fields", {"fields": ("created_at", "updated_at")}),
    )


# ============================================================
# PERIODS + CLOSE RUNS (READ-ONLY; lifecycle goes through the API)
# ============================================================


@admin.register(Period)
class PeriodAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ("name", "company_id", "start_date", "end_date", "status", "closed_at")
    list_filter = ("status",)
    search_fields = ("name", "code")
    ordering = ("-start_date",)


class ChecklistItemInline(admin.TabularInline):
    model = ChecklistItem
    extra = 0
    can_delete = False
    readonly_fields = ("code", "label", "status", "assigned_to", "completed_at", "comment")

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(CloseRun)
class CloseRunAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ("id", "period", "company_id", "status", "created_by", "created_at", "completed_at")
    list_filter = ("status",)
    ordering = ("-created_at",)
    inlines = [ChecklistItemInline]


# ============================================================
# JOURNAL (STRICTLY IMMUTABLE)
# ============================================================


class JournalLineInline(admin.TabularInline):
    model = JournalLine
    extra = 0
    can_delete = False
    readonly_fields = ("account", "debit", "credit", "dim_company_id", "dim_branch_id", "dim_warehouse_id")

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(JournalEntry)
class JournalEntryAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ("number", "date", "period", "source_module", "source_id", "status", "posted_at")
    list_filter = ("status", "source_module")
    search_fields = ("memo", "source_module", "source_id")
    ordering = ("-number",)
    inlines = [JournalLineInline]


@admin.register(AccountMapping)
class AccountMappingAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ("module", "key", "account", "updated_at")
    list_filter = ("module",)
    search_fields = ("module", "key", "account__code")
    ordering = ("module", "key")


@admin.register(SourceLink)
class SourceLinkAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ("module", "ref_id", "entry", "created_at")
    search_fields = ("module", "ref_id")


@admin.register(AuditLog)
class AuditLogAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ("occurred_at", "action", "entity", "entity_id", "actor")
    list_filter = ("action", "entity")
    search_fields = ("entity_id",)
    ordering = ("-occurred_at",)
