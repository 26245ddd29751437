"""
Management command that sends the daily lecture deadline reminders.

Schedule it once per working day (e.g. cron at 10:00 Asia/Taipei).

Usage:
    python manage.py send_daily_notifications
    python manage.py send_daily_notifications --date 2025-03-09 --dry-run
"""

from datetime import datetime

from django.core.management.base import BaseCommand, CommandError

from apps.notifications.services import send_daily_notifications


class Command(BaseCommand):
    help = 'E-mail project coordinators about upcoming and overdue safety lectures'

    def add_arguments(self, parser):
        parser.add_argument(
            '--date',
            help='Reference date (YYYY-MM-DD), defaults to today',
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Count the reminders that would be sent without sending them',
        )

    def handle(self, *args, **options):
        today = None
        if options['date']:
            try:
                today = datetime.strptime(options['date'], '%Y-%m-%d').date()
            except ValueError:
                raise CommandError(f"Invalid date '{options['date']}', expected YYYY-MM-DD")

        counts = send_daily_notifications(today=today, dry_run=options['dry_run'])

        if options['dry_run']:
            self.stdout.write(self.style.WARNING('--dry-run mode: No e-mails sent.'))

        self.stdout.write(
            self.style.SUCCESS(
                f"📧 first={counts['first']} second={counts['second']} "
                f"overdue={counts['overdue']} failed={counts['failed']} skipped={counts['skipped']}"
            )
        )
