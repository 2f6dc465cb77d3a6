from django.core.management.base import BaseCommand
from django.contrib.auth.models import User
from library.models import Author, Book, UserBook, BookNote, UserFollow


class Command(BaseCommand):
    help = "Check data counts in the database"

    def handle(self, *args, **options):
        total_users = User.objects.count()
        authors_count = Author.objects.count()
        books_count = Book.objects.count()
        missing_covers = Book.objects.filter(cover_url__isnull=True).count() + Book.objects.filter(cover_url='').count()
        memberships_count = UserBook.objects.count()
        favorites_count = UserBook.objects.filter(favorite=True).count()
        notes_count = BookNote.objects.count()
        follows_count = UserFollow.objects.count()

        self.stdout.write(self.style.SUCCESS('=' * 50))
        self.stdout.write(self.style.SUCCESS('Database Statistics:'))
        self.stdout.write(self.style.SUCCESS('=' * 50))
        self.stdout.write(f'Users: {total_users}')
        self.stdout.write(f'Authors: {authors_count}')
        self.stdout.write(f'Books: {books_count}')
        self.stdout.write(f'  - Without cover: {missing_covers}')
        self.stdout.write(f'Library entries: {memberships_count}')
        for value, label in UserBook.STATUS_CHOICES:
            self.stdout.write(f'  - {label}: {UserBook.objects.filter(status=value).count()}')
        self.stdout.write(f'Favorites: {favorites_count}')
        self.stdout.write(f'Notes: {notes_count}')
        self.stdout.write(f'Follows: {follows_count}')
        self.stdout.write(self.style.SUCCESS('=' * 50))

        # Show a few sample users
        if total_users > 0:
            self.stdout.write('\nSample Users (first 5):')
            for user in User.objects.order_by('username')[:5]:
                book_count = UserBook.objects.filter(user=user).count()
                fav_count = UserBook.objects.filter(user=user, favorite=True).count()
                self.stdout.write(f'  - {user.username} ({book_count} books, {fav_count} favorites)')
