"""
Management command that writes a full xlsx backup of every table.

Usage:
    python manage.py backup_data
    python manage.py backup_data --output-dir /srv/backups --keep 30
"""

from pathlib import Path

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from apps.sheets.workbook import export_workbook

BACKUP_PREFIX = 'backup_'


class Command(BaseCommand):
    help = 'Export every table to a timestamped Excel workbook'

    def add_arguments(self, parser):
        parser.add_argument(
            '--output-dir',
            help='Directory for the backup, defaults to BACKUP_DIR',
        )
        parser.add_argument(
            '--keep',
            type=int,
            default=0,
            help='Delete older backups beyond this many files (0 keeps all)',
        )

    def handle(self, *args, **options):
        directory = Path(options['output_dir'] or settings.BACKUP_DIR)
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise CommandError(f"Cannot create {directory}: {e}")

        stamp = timezone.localtime().strftime('%Y%m%d_%H%M%S')
        path = directory / f"{BACKUP_PREFIX}{stamp}.xlsx"
        path.write_bytes(export_workbook())
        self.stdout.write(self.style.SUCCESS(f"💾 Backup written to {path}"))

        if options['keep'] > 0:
            backups = sorted(directory.glob(f"{BACKUP_PREFIX}*.xlsx"), reverse=True)
            for old in backups[options['keep']:]:
                old.unlink()
                self.stdout.write(self.style.WARNING(f"Removed old backup {old.name}"))
