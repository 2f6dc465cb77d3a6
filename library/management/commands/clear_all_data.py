from django.core.management.base import BaseCommand
from django.contrib.auth.models import User
from library.models import Author, Book, UserBook, BookNote, UserFollow


class Command(BaseCommand):
    help = "Delete all catalog, library, note and follow data, and every non-superuser account"

    def add_arguments(self, parser):
        parser.add_argument(
            '--noinput',
            action='store_true',
            help='Skip confirmation prompt',
        )

    def handle(self, *args, **options):
        superuser_count = User.objects.filter(is_superuser=True).count()
        non_superuser_count = User.objects.filter(is_superuser=False).count()

        if not options['noinput']:
            self.stdout.write(self.style.WARNING('This will delete:'))
            self.stdout.write(f'  - {BookNote.objects.count()} BookNote entries')
            self.stdout.write(f'  - {UserBook.objects.count()} UserBook entries')
            self.stdout.write(f'  - {UserFollow.objects.count()} UserFollow entries')
            self.stdout.write(f'  - {Book.objects.count()} Book entries')
            self.stdout.write(f'  - {Author.objects.count()} Author entries')
            self.stdout.write(f'  - {non_superuser_count} non-superuser User accounts')
            self.stdout.write(f'\n  (Preserving {superuser_count} superuser account(s))')

            confirm = input('\nAre you sure you want to proceed? (yes/no): ')
            if confirm.lower() != 'yes':
                self.stdout.write(self.style.ERROR('Operation cancelled.'))
                return

        self.stdout.write(self.style.WARNING('Deleting data...'))

        # Children first so foreign keys stay valid
        for model in (BookNote, UserBook, UserFollow, Book, Author):
            deleted = model.objects.all().delete()[0]
            self.stdout.write(self.style.SUCCESS(f'Deleted {deleted} {model.__name__} entries.'))

        users_deleted = User.objects.filter(is_superuser=False).delete()[0]
        self.stdout.write(self.style.SUCCESS(f'Deleted {users_deleted} objects with non-superuser User accounts.'))

        self.stdout.write(self.style.SUCCESS(f'\nData deletion complete! {superuser_count} superuser account(s) preserved.'))
