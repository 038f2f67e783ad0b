from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from telemetry.services.database import DatabaseUnavailable, wait_for_database


class Command(BaseCommand):
    help = "Block until the database answers, retrying with a fixed delay; exit non-zero when it never does."

    def add_arguments(self, parser):
        parser.add_argument('--database', default='default')
        parser.add_argument('--attempts', type=int, default=settings.DB_CONNECT_ATTEMPTS)
        parser.add_argument('--delay', type=float, default=settings.DB_CONNECT_DELAY)

    def handle(self, *args, **options):
        try:
            attempt = wait_for_database(options['database'], attempts=options['attempts'], delay=options['delay'])
        except DatabaseUnavailable as e:
            raise CommandError(str(e)) from e
        self.stdout.write(self.style.SUCCESS(f"Database {options['database']!r} available (attempt {attempt})"))
