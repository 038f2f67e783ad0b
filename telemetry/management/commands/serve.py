from django.conf import settings
from django.contrib.staticfiles.management.commands.runserver import Command as RunserverCommand
from django.core.management import call_command


class Command(RunserverCommand):
    help = "Wait for the database, then start the development server on settings.PORT."

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.default_port = str(settings.PORT)

    def handle(self, *args, **options):
        # raises CommandError (exit 1) once the retry budget is spent
        call_command('wait_for_db', stdout=self.stdout, stderr=self.stderr)
        super().handle(*args, **options)
