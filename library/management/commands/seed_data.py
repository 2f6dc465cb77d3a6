import random
from datetime import date, timedelta

from django.core.management.base import BaseCommand
from django.contrib.auth.models import User

from library.catalog import ensure_book
from library.favorites import toggle_favorite
from library.models import Author, Book, UserBook, BookNote, UserFollow
from library.social import follow_user


class Command(BaseCommand):
    help = "Seeds the database with test readers, books, favorites, notes and follows"

    def handle(self, *args, **kwargs):
        self.stdout.write(self.style.WARNING('Deleting old data...'))
        # Clear existing data to avoid duplicates
        BookNote.objects.all().delete()
        UserBook.objects.all().delete()
        UserFollow.objects.all().delete()
        Book.objects.all().delete()
        Author.objects.all().delete()
        # We don't delete superusers, only the test users we are about to create
        User.objects.filter(username__startswith='testreader').delete()

        self.stdout.write(self.style.SUCCESS('Creating Authors and Books...'))

        titles = [
            ("Project Hail Mary", "Andy Weir"), ("The Martian", "Andy Weir"),
            ("Atomic Habits", "James Clear"),
            ("The Seven Husbands of Evelyn Hugo", "Taylor Jenkins Reid"), ("Daisy Jones & The Six", "Taylor Jenkins Reid"),
            ("1984", "George Orwell"), ("Animal Farm", "George Orwell"),
            ("The Hobbit", "J.R.R. Tolkien"), ("The Fellowship of the Ring", "J.R.R. Tolkien"),
            ("Murder on the Orient Express", "Agatha Christie"), ("And Then There Were None", "Agatha Christie"),
        ]

        book_ids = []
        for i, (title, author_name) in enumerate(titles):
            # Fake ISBN based on loop index
            result = ensure_book(title, author_name, isbn=f"978000{i:06d}1")
            book_ids.append(result.book_id)

        self.stdout.write(self.style.SUCCESS(f'Created {len(book_ids)} books.'))

        self.stdout.write(self.style.SUCCESS('Creating Users...'))
        readers = []
        for i in range(1, 6):
            readers.append(User.objects.create_user(username=f"testreader{i}", password="password123"))

        statuses = [choice for choice, _ in UserBook.STATUS_CHOICES]
        today = date.today()
        for reader in readers:
            for book_id in random.sample(book_ids, 5):
                status = random.choice(statuses)
                started = today - timedelta(days=random.randint(10, 200)) if status != UserBook.STATUS_PLANNED else None
                finished = started + timedelta(days=random.randint(3, 9)) if status == UserBook.STATUS_FINISHED else None
                user_book = UserBook.objects.create(
                    user=reader,
                    book_id=book_id,
                    status=status,
                    date_started=started,
                    date_finished=finished,
                )
                if status == UserBook.STATUS_READING:
                    BookNote.objects.create(
                        user_book=user_book,
                        user=reader,
                        content="Really enjoying this so far.",
                        tags=["first impressions"],
                        page_number=random.randint(10, 120),
                    )

            # One favorite that is already in the list and one that is not
            owned = list(UserBook.objects.filter(user=reader).values_list('book_id', flat=True))
            toggle_favorite(reader, owned[0], current_favorite=False)
            unowned = [b for b in book_ids if b not in owned]
            if unowned:
                toggle_favorite(reader, unowned[0], current_favorite=False)

        # Everyone follows the first reader; the first reader follows the second
        for reader in readers[1:]:
            follow_user(reader, readers[0].id)
        follow_user(readers[0], readers[1].id)

        self.stdout.write(self.style.SUCCESS('Successfully seeded database!'))
        self.stdout.write(self.style.SUCCESS('Log in as testreader1 / password123 to see a populated feed.'))
