from django.core.management.base import BaseCommand, CommandError

from apps.ingestion.pipeline import run_ingestion, clear_ingested, normalize_types


class Command(BaseCommand):
    help = 'Fetch listings from OpenStreetMap (Overpass) and load them with pending status'

    def add_arguments(self, parser):
        parser.add_argument('--types', default='all',
                            help='Comma separated: hotels,restaurants,attractions,sports')
        parser.add_argument('--from-dir', dest='from_dir',
                            help='Read raw Overpass JSON (<type>.json) from this directory')
        parser.add_argument('--output-dir', dest='output_dir',
                            help='Write fetched Overpass JSON to this directory')
        parser.add_argument('--dry-run', action='store_true', help='Transform without saving')
        parser.add_argument('--clear', action='store_true',
                            help='Delete previously ingested listings instead of ingesting')

    def handle(self, *args, **options):
        try:
            types = normalize_types(options['types'])
        except ValueError as e:
            raise CommandError(str(e))

        if options['clear']:
            for data_type, count in clear_ingested(types).items():
                self.stdout.write(self.style.SUCCESS(f'✓ Removed {count} {data_type}'))
            return

        results = run_ingestion(types, source_dir=options['from_dir'],
                                output_dir=options['output_dir'], dry_run=options['dry_run'])
        for r in results:
            s = r['stats']
            line = (f"{r['data_type']}: {r['status']} (total {s['total']}, success {s['success']}, "
                    f"failed {s['failed']}, skipped {s['skipped']})")
            style = self.style.ERROR if r['status'] == 'failed' else self.style.SUCCESS
            self.stdout.write(style(('✗ ' if r['status'] == 'failed' else '✓ ') + line))
