from django.core.management.base import BaseCommand

from library.services import backfill_covers


class Command(BaseCommand):
    help = "Look up covers on Google Books for books that have none"

    def add_arguments(self, parser):
        parser.add_argument(
            '--limit',
            type=int,
            default=50,
            help='Maximum number of books to process (default: 50)',
        )
        parser.add_argument(
            '--delay',
            type=float,
            default=0.2,
            help='Seconds to wait between API calls (default: 0.2)',
        )

    def handle(self, *args, **options):
        summary = backfill_covers(limit=options['limit'], delay=options['delay'])

        if not summary['processed']:
            self.stdout.write(self.style.WARNING('No books without covers found.'))
            return

        for result in summary['results']:
            if result['success']:
                self.stdout.write(f"  + {result['title']}: {result['cover_url']}")
            else:
                self.stdout.write(f"  - {result['title']}: no cover found")

        self.stdout.write(self.style.SUCCESS(
            f"\nProcessed {summary['processed']} book(s), {summary['successful']} cover(s) updated."
        ))
