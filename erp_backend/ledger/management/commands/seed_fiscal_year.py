# ledger/management/commands/seed_fiscal_year.py

import calendar
from datetime import date

from django.core.management.base import BaseCommand, CommandError

from ledger.models import Account
from ledger.services.inputs import CreatePeriodInput
from ledger.services.period_close_service import (
    CloseInputError,
    PeriodCloseService,
    PeriodOverlapError,
)

BASE_ACCOUNTS = [
    ("1000", "Cash", Account.ASSET),
    ("1010", "Bank", Account.ASSET),
    ("1100", "Accounts Receivable", Account.ASSET),
    ("1200", "Inventory", Account.ASSET),
    ("2000", "Accounts Payable", Account.LIABILITY),
    ("2100", "VAT Payable", Account.LIABILITY),
    ("3000", "Owner's Equity", Account.EQUITY),
    ("3100", "Retained Earnings", Account.EQUITY),
    ("4000", "Sales Revenue", Account.REVENUE),
    ("5000", "Cost of Goods Sold", Account.EXPENSE),
    ("6000", "Operating Expenses", Account.EXPENSE),
]


class Command(BaseCommand):
    help = "Seed twelve monthly OPEN periods for a company (and optionally a base chart of accounts)"

    def add_arguments(self, parser):
        parser.add_argument("--company", type=int, required=True, help="Company id (external master data).")
        parser.add_argument("--year", type=int, default=date.today().year)
        parser.add_argument(
            "--with-accounts",
            action="store_true",
            help="Also seed a base chart of accounts.",
        )

    def handle(self, *args, **options):
        company_id = options["company"]
        year = options["year"]

        if company_id <= 0:
            raise CommandError("--company must be a positive id")

        if options["with_accounts"]:
            self._seed_accounts()

        service = PeriodCloseService()
        created = 0
        skipped = 0

        for month in range(1, 13):
            last_day = calendar.monthrange(year, month)[1]
            code = f"{year}-{month:02d}"
            try:
                service.create_period(
                    CreatePeriodInput(
                        company_id=company_id,
                        code=code,
                        name=f"{calendar.month_name[month]} {year}",
                        start_date=date(year, month, 1),
                        end_date=date(year, month, last_day),
                        metadata={"seeded": True},
                    )
                )
                created += 1
            except PeriodOverlapError:
                skipped += 1
                self.stdout.write(f"SKIP  {code}: overlaps an existing period")
            except CloseInputError as exc:
                raise CommandError(str(exc)) from exc

        self.stdout.write(
            self.style.SUCCESS(
                f"✔ Fiscal year {year} seeded for company {company_id} "
                f"({created} new periods, {skipped} skipped)."
            )
        )

    def _seed_accounts(self):
        created_count = 0
        for code, name, account_type in BASE_ACCOUNTS:
            _, was_created = Account.objects.get_or_create(
                code=code,
                defaults={"name": name, "account_type": account_type, "is_active": True},
            )
            created_count += int(was_created)

        self.stdout.write(f"Accounts: {created_count} new")
