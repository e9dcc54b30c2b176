from django.core.management.base import BaseCommand, CommandError

from allocation.calc import AllocationError
from equity.models import DividendComputation
from equity.services.notifications import send_dividend_computation_report


class Command(BaseCommand):
    help = "Email the CSV exports of a dividend computation"

    def add_arguments(self, parser):
        parser.add_argument("computation_id", type=int)
        parser.add_argument("--to", nargs="+", required=True, help="Recipient email addresses")

    def handle(self, *args, **options):
        computation = DividendComputation.objects.filter(id=options["computation_id"]).first()
        if computation is None:
            raise CommandError(f"Dividend computation {options['computation_id']} not found.")
        try:
            send_dividend_computation_report(computation, options["to"])
        except AllocationError as exc:
            raise CommandError(str(exc)) from exc
        self.stdout.write(self.style.SUCCESS(f"Report sent to {', '.join(options['to'])}"))
