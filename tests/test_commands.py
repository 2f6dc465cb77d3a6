from io import StringIO
from unittest import mock

import pytest
from django.contrib.auth.models import User
from django.core.management import call_command

from library import services
from library.models import Author, Book, UserBook, UserFollow

pytestmark = pytest.mark.django_db


def run(*args, **kwargs):
    out = StringIO()
    call_command(*args, stdout=out, **kwargs)
    return out.getvalue()


def test_backfill_covers(author, google_response, make_volume):
    Book.objects.create(title='The Martian', author=author)
    google_response([make_volume(image_links={'thumbnail': 'https://books.google.com/m'})])

    with mock.patch.object(services.time, 'sleep'):
        output = run('backfill_covers', '--limit', '5')

    assert '+ The Martian: https://books.google.com/m' in output
    assert 'Processed 1 book(s), 1 cover(s) updated.' in output
    assert Book.objects.get().cover_url == 'https://books.google.com/m'


def test_backfill_covers_nothing_to_do():
    assert 'No books without covers found.' in run('backfill_covers')


def test_check_data(user, book):
    UserBook.objects.create(user=user, book=book, favorite=True)

    output = run('check_data')

    assert 'Books: 1' in output
    assert 'Favorites: 1' in output
    assert 'reader (1 books, 1 favorites)' in output


def test_top_favorited_books(user, other_user, book, author):
    martian = author.books.create(title='The Martian')
    UserBook.objects.create(user=user, book=book, favorite=True)
    UserBook.objects.create(user=other_user, book=book, favorite=True)
    UserBook.objects.create(user=user, book=martian, favorite=True)
    UserBook.objects.create(user=other_user, book=martian, favorite=False)

    output = run('top_favorited_books', '--limit', '10')

    assert output.index('Project Hail Mary') < output.index('The Martian')
    assert 'Total books with favorites: 2' in output


def test_test_book_search(book):
    output = run('test_book_search', 'hail')
    assert '1. Project Hail Mary by Andy Weir' in output


def test_clear_all_data(user, book):
    User.objects.create_superuser(username='admin', password='admin-password')
    UserBook.objects.create(user=user, book=book)

    run('clear_all_data', '--noinput')

    assert not Book.objects.exists()
    assert not Author.objects.exists()
    assert list(User.objects.values_list('username', flat=True)) == ['admin']


def test_seed_data():
    run('seed_data')

    assert User.objects.filter(username__startswith='testreader').count() == 5
    assert Book.objects.count() == 11
    assert UserFollow.objects.count() == 5
    assert UserBook.objects.filter(favorite=True).count() >= 5
