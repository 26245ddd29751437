"""
Management command that mirrors the tables to or from Google Sheets.

Usage:
    python manage.py sync_google_sheets --push
    python manage.py sync_google_sheets --pull --table Projects --table Sections
"""

from django.core.management.base import BaseCommand, CommandError

from apps.sheets.exceptions import SheetsServiceError
from apps.sheets.google_sheets import GoogleSheetMirror
from apps.sheets.services import TABLE_ORDER


class Command(BaseCommand):
    help = 'Push tables to the shared Google spreadsheet or pull them back'

    def add_arguments(self, parser):
        direction = parser.add_mutually_exclusive_group(required=True)
        direction.add_argument('--push', action='store_true', help='Overwrite the worksheets with the database rows')
        direction.add_argument('--pull', action='store_true', help='Replace the database rows with the worksheets')
        parser.add_argument(
            '--table',
            action='append',
            choices=TABLE_ORDER,
            help='Limit to a table (repeatable), defaults to all',
        )

    def handle(self, *args, **options):
        tables = [table for table in TABLE_ORDER if table in options['table']] if options['table'] else None

        try:
            mirror = GoogleSheetMirror()
            if options['push']:
                written = mirror.push(tables)
                for table, count in written.items():
                    self.stdout.write(f"  {table}: {count} rows")
                self.stdout.write(self.style.SUCCESS('✅ Pushed to Google Sheets'))
            else:
                results = mirror.pull(tables)
                for table, counts in results.items():
                    self.stdout.write(
                        f"  {table}: created={counts['created']} updated={counts['updated']} "
                        f"deleted={counts['deleted']} skipped={counts['skipped']}"
                    )
                self.stdout.write(self.style.SUCCESS('✅ Pulled from Google Sheets'))
        except SheetsServiceError as e:
            raise CommandError(str(e))
