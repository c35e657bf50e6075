import time

from django.core.management.base import BaseCommand
from django.db import connections
from django.db.utils import OperationalError


class Command(BaseCommand):
    help = "Waits for the database to be available"

    def add_arguments(self, parser):
        parser.add_argument(
            "--timeout",
            type=int,
            default=0,
            help="Give up after this many seconds (0 waits forever).",
        )

    def handle(self, *args, **options):
        timeout = options["timeout"]
        self.stdout.write("Waiting for database...")
        started = time.monotonic()
        while True:
            try:
                connections["default"].ensure_connection()
                break
            except OperationalError:
                if timeout and time.monotonic() - started >= timeout:
                    self.stderr.write(self.style.ERROR("Database still unavailable, giving up."))
                    raise
                self.stdout.write(self.style.WARNING("Database unavailable, waiting 1 second..."))
                time.sleep(1)
        self.stdout.write(self.style.SUCCESS("Database available!"))
