from django.core.management.base import BaseCommand
from library.services import search_books, search_database_books, search_google_books
from django.core.cache import cache


class Command(BaseCommand):
    help = "Test book search functionality to debug the add-book search"

    def add_arguments(self, parser):
        parser.add_argument(
            'query',
            type=str,
            help='Search query to test',
        )
        parser.add_argument(
            '--clear-cache',
            action='store_true',
            help='Clear cache before testing',
        )

    def handle(self, *args, **options):
        query = options['query']

        if options['clear_cache']:
            cache.clear()
            self.stdout.write(self.style.SUCCESS('Cache cleared!'))

        self.stdout.write(f"\n{'='*70}")
        self.stdout.write(f"Testing search for: '{query}'")
        self.stdout.write(f"{'='*70}\n")

        self.stdout.write("1. DATABASE SEARCH (local catalog):")
        self.stdout.write("-" * 70)
        self._print_results(search_database_books(query))

        self.stdout.write("\n2. GOOGLE BOOKS API SEARCH:")
        self.stdout.write("-" * 70)
        self._print_results(search_google_books(query))

        self.stdout.write("\n3. UNIFIED SEARCH (database + Google):")
        self.stdout.write("-" * 70)
        all_results = search_books(query)
        self._print_results(all_results)

        self.stdout.write(f"\n{'='*70}\n")

        if not all_results:
            self.stdout.write(self.style.WARNING(f"WARNING: No results found for '{query}'!"))
        else:
            self.stdout.write(self.style.SUCCESS("Search completed successfully"))

    def _print_results(self, results):
        self.stdout.write(f"   Found {len(results)} results")
        if not results:
            self.stdout.write("   No results")
        for i, book in enumerate(results, 1):
            authors = ', '.join(book['authors']) or 'Unknown'
            self.stdout.write(f"   {i}. {book['title']} by {authors} (ISBN: {book['isbn'] or 'none'})")
