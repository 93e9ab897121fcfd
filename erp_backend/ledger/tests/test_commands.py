# ledger/tests/test_commands.py

from io import StringIO

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase

from ledger.models import Account, Period


class SeedFiscalYearCommandTests(TestCase):
    def test_seeds_twelve_open_periods(self):
        out = StringIO()
        call_command("seed_fiscal_year", "--company", "7", "--year", "2025", stdout=out)

        periods = Period.objects.filter(company_id=7).order_by("start_date")
        self.assertEqual(periods.count(), 12)
        self.assertTrue(all(p.status == Period.STATUS_OPEN for p in periods))
        self.assertEqual(periods.first().code, "2025-01")
        self.assertEqual(str(periods.last().end_date), "2025-12-31")
        self.assertIn("12 new periods", out.getvalue())

    def test_rerun_skips_existing_periods(self):
        call_command("seed_fiscal_year", "--company", "7", "--year", "2025", stdout=StringIO())

        out = StringIO()
        call_command("seed_fiscal_year", "--company", "7", "--year", "2025", stdout=out)

        self.assertEqual(Period.objects.filter(company_id=7).count(), 12)
        self.assertIn("12 skipped", out.getvalue())

    def test_with_accounts(self):
        call_command(
            "seed_fiscal_year", "--company", "7", "--year", "2025", "--with-accounts", stdout=StringIO()
        )

        self.assertTrue(Account.objects.filter(code="1000", is_active=True).exists())
        self.assertEqual(Account.objects.count(), 11)

    def test_company_must_be_positive(self):
        with self.assertRaises(CommandError):
            call_command("seed_fiscal_year", "--company", "0", stdout=StringIO())
