from django.core.management.base import BaseCommand

from apps.mailer.services import retry_failed_emails


class Command(BaseCommand):
    help = 'Resend failed workflow emails that still have retries left'

    def add_arguments(self, parser):
        parser.add_argument('--limit', type=int, default=100)

    def handle(self, *args, **options):
        retried, sent = retry_failed_emails(limit=options['limit'])
        self.stdout.write(self.style.SUCCESS(f'✓ Retried {retried} emails, {sent} sent'))
