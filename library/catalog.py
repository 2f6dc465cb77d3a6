"""
Catalog and library operations.

Authors and books are shared, append-mostly rows keyed by natural keys
(author name; title + author). Lookups are exact and case-sensitive. The
database enforces both keys, so two requests racing to create the same row
both end up with the row that won.
"""
import logging
from dataclasses import dataclass

from django.db import DatabaseError, IntegrityError, transaction

from .exceptions import ConflictError, NotFoundError, StorageError
from .models import Author, Book, UserBook
from .services import resolve_cover

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnsureResult:
    author_id: int
    book_id: int
    created: bool


def _get_or_create(model, lookup, defaults=None):
    """
    Lookup-before-insert that survives a concurrent insert of the same key.
    Returns (instance, created).
    """
    instance = model.objects.filter(**lookup).first()
    if instance:
        return instance, False

    try:
        with transaction.atomic():
            return model.objects.create(**lookup, **(defaults or {})), True
    except IntegrityError:
        # Another request just created the same row: fetch it
        instance = model.objects.filter(**lookup).first()
        if instance is None:
            raise
        logger.info("Recovered from concurrent insert of %s %s", model.__name__, lookup)
        return instance, False


def ensure_author(name):
    try:
        author, created = _get_or_create(Author, {'name': name})
    except DatabaseError as exc:
        raise StorageError(f"Failed to create author: {exc}") from exc
    if created:
        logger.info("Created new author %s (%r)", author.id, name)
    return author, created


def ensure_book(title, author_name, **metadata):
    """
    Make sure an author and a book exist, creating either one if needed.
    Metadata (cover_url, description, isbn, page_count, published_date,
    google_books_url) is only used when the book is created.
    """
    author, _ = ensure_author(author_name)

    try:
        book, created = _get_or_create(Book, {'title': title, 'author': author}, defaults=metadata)
    except DatabaseError as exc:
        raise StorageError(f"Failed to create book: {exc}") from exc

    if created:
        logger.info("Created new book %s (%r by %r)", book.id, title, author_name)
    else:
        logger.debug("Book already exists: %s", book.id)
    return EnsureResult(author_id=author.id, book_id=book.id, created=created)


def add_book_to_library(user, title, author_name, status=UserBook.STATUS_PLANNED,
                        date_started=None, date_finished=None, notes=None, **metadata):
    """
    Ensure the book exists and add it to the user's list.
    Raises ConflictError when the user already has the book. A missing cover
    is looked up afterwards; that lookup never fails the add.
    """
    result = ensure_book(title, author_name, **metadata)

    if UserBook.objects.filter(user=user, book_id=result.book_id).exists():
        raise ConflictError("You have already added this book to your library.")

    try:
        with transaction.atomic():
            user_book = UserBook.objects.create(
                user=user,
                book_id=result.book_id,
                status=status,
                date_started=date_started,
                date_finished=date_finished,
                notes=notes or None,
            )
    except IntegrityError as exc:
        raise ConflictError("You have already added this book to your library.") from exc
    except DatabaseError as exc:
        raise StorageError(f"Failed to add book: {exc}") from exc

    resolve_cover(user_book.book)
    return user_book


def get_user_book(user, user_book_id):
    try:
        return UserBook.objects.select_related('book__author').get(id=user_book_id, user=user)
    except UserBook.DoesNotExist:
        raise NotFoundError("Book not found in your library.")


def update_user_book(user, user_book_id, **fields):
    """Apply status, date, notes and rating edits to one of the user's memberships."""
    user_book = get_user_book(user, user_book_id)

    allowed = ('status', 'date_started', 'date_finished', 'notes', 'personal_rating')
    changed = []
    for key in allowed:
        if key in fields:
            value = fields[key]
            if key == 'notes':
                value = value or None
            setattr(user_book, key, value)
            changed.append(key)

    if changed:
        try:
            user_book.save(update_fields=changed + ['updated_at'])
        except DatabaseError as exc:
            raise StorageError(f"Failed to update book: {exc}") from exc
    return user_book


def remove_user_book(user, user_book_id):
    user_book = get_user_book(user, user_book_id)
    title = user_book.book.title
    try:
        user_book.delete()
    except DatabaseError as exc:
        raise StorageError(f"Failed to remove book: {exc}") from exc
    return title


def serialize_user_book(user_book):
    book = user_book.book
    return {
        'id': user_book.id,
        'book_id': book.id,
        'title': book.title or 'Unknown Title',
        'author': book.author.name if book.author_id else 'Unknown Author',
        'cover_url': book.cover_url,
        'status': user_book.status,
        'favorite': user_book.favorite,
        'date_started': user_book.date_started.isoformat() if user_book.date_started else None,
        'date_finished': user_book.date_finished.isoformat() if user_book.date_finished else None,
        'notes': user_book.notes or '',
        'personal_rating': user_book.personal_rating,
    }


def list_user_books(user):
    user_books = UserBook.objects.filter(user=user).select_related('book__author').order_by('-updated_at', '-id')
    return [serialize_user_book(ub) for ub in user_books]
