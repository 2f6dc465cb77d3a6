import logging

from django.db import DatabaseError

from .catalog import get_user_book
from .exceptions import NotFoundError, StorageError
from .models import BookNote

logger = logging.getLogger(__name__)


def create_note(user, user_book_id, content, highlight_text=None, tags=None, page_number=None):
    user_book = get_user_book(user, user_book_id)
    try:
        note = BookNote.objects.create(
            user_book=user_book,
            user=user,
            content=content.strip(),
            highlight_text=(highlight_text or '').strip() or None,
            tags=list(tags or []),
            page_number=page_number,
        )
    except DatabaseError as exc:
        raise StorageError(f"Failed to add note: {exc}") from exc
    logger.info("User %s added note %s to membership %s", user.pk, note.id, user_book.id)
    return note


def get_note(user, note_id):
    try:
        return BookNote.objects.get(id=note_id, user=user)
    except BookNote.DoesNotExist:
        raise NotFoundError("Note not found.")


def update_note(user, note_id, content, highlight_text=None, tags=None, page_number=None):
    note = get_note(user, note_id)
    note.content = content.strip()
    note.highlight_text = (highlight_text or '').strip() or None
    note.tags = list(tags or [])
    note.page_number = page_number
    try:
        note.save()
    except DatabaseError as exc:
        raise StorageError(f"Failed to update note: {exc}") from exc
    return note


def delete_note(user, note_id):
    note = get_note(user, note_id)
    try:
        note.delete()
    except DatabaseError as exc:
        raise StorageError(f"Failed to delete note: {exc}") from exc


def list_notes(user, user_book_id=None):
    """The user's notes, newest first, optionally limited to one membership."""
    notes = BookNote.objects.filter(user=user).select_related('user_book__book__author')
    if user_book_id is not None:
        notes = notes.filter(user_book_id=user_book_id)
    return list(notes.order_by('-created_at', '-id'))


def filter_notes(notes, query='', tag=None):
    """
    Keep notes whose content, highlight or any tag contains ``query``
    (case-insensitive) and, when ``tag`` is given, that carry that exact tag.
    """
    query = (query or '').lower()

    def matches(note):
        if tag and tag not in (note.tags or []):
            return False
        if not query:
            return True
        if query in note.content.lower():
            return True
        if note.highlight_text and query in note.highlight_text.lower():
            return True
        return any(query in t.lower() for t in note.tags or [])

    return [note for note in notes if matches(note)]


def all_tags(notes):
    """Unique tags across notes, in first-seen order."""
    seen = []
    for note in notes:
        for tag in note.tags or []:
            if tag not in seen:
                seen.append(tag)
    return seen


def serialize_note(note):
    book = note.user_book.book
    return {
        'id': note.id,
        'user_book_id': note.user_book_id,
        'content': note.content,
        'highlight_text': note.highlight_text,
        'tags': note.tags or [],
        'page_number': note.page_number,
        'created_at': note.created_at.isoformat(),
        'updated_at': note.updated_at.isoformat(),
        'book_title': book.title,
        'book_author': book.author.name,
    }
