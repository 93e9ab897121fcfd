"""
======================================================
PATH: ledger/migrations/0002_account_mapping_source_module_length.py
======================================================
MIGRATION: ACCOUNT MAPPINGS + WIDER SOURCE MODULE

- JournalEntry.source_module / SourceLink.module widened to 128 so a
  reversal tag (<module>:REVERSAL) always fits
- AccountMapping (unique module + key -> account)
"""

from __future__ import annotations

from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):
    dependencies = [
        ("ledger", "0001_initial"),
    ]

    operations = [
        migrations.AlterField(
            model_name="journalentry",
            name="source_module",
            field=models.CharField(
                help_text="Free-text producer tag (e.g. AR, AP, INVENTORY)",
                max_length=128,
            ),
        ),
        migrations.AlterField(
            model_name="sourcelink",
            name="module",
            field=models.CharField(max_length=128),
        ),
        migrations.CreateModel(
            name="AccountMapping",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("module", models.CharField(max_length=64)),
                ("key", models.CharField(max_length=128)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "account",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="mappings",
                        to="ledger.account",
                    ),
                ),
            ],
            options={
                "verbose_name": "Account Mapping",
                "verbose_name_plural": "Account Mappings",
                "ordering": ["module", "key"],
                "constraints": [
                    models.UniqueConstraint(fields=("module", "key"), name="uq_account_mappings"),
                ],
            },
        ),
    ]
