"""
Favorite toggle for a (user, book) membership.

Decision table, evaluated in order:

1. no membership                          -> insert planned + favorite  -> favorited
2. membership, caller says not favorite   -> set favorite               -> favorited
3. membership, caller says favorite, planned   -> delete row            -> removed
4. membership, caller says favorite, other     -> clear favorite        -> unfavorited

A planned row that is no longer a favorite carries no state worth keeping,
so unfavoriting it removes it from the list instead.

The decision and its single write run in one transaction with the
membership row locked, so toggles from several sessions converge.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from django.db import DatabaseError, IntegrityError, transaction

from .catalog import ensure_book
from .exceptions import LibraryError
from .models import Book, UserBook

logger = logging.getLogger(__name__)

FAVORITED = 'favorited'
UNFAVORITED = 'unfavorited'
REMOVED = 'removed'
ERROR = 'error'

INSERT = 'insert'
UPDATE = 'update'
DELETE = 'delete'

MESSAGES = {
    FAVORITED: 'Added to your favorites.',
    UNFAVORITED: 'Removed from your favorites.',
    REMOVED: 'Removed from your favorites and your reading list.',
    ERROR: 'Could not update favorite.',
}


@dataclass(frozen=True)
class MembershipState:
    status: str
    favorite: bool


@dataclass(frozen=True)
class FavoriteTransition:
    action: str
    outcome: str
    favorite: Optional[bool] = None


@dataclass(frozen=True)
class ToggleResult:
    result: str
    error_message: Optional[str] = None

    @property
    def message(self):
        return self.error_message or MESSAGES[self.result]


def decide_favorite_transition(membership, current_favorite):
    """Pure decision: the one write to perform for this membership state."""
    if membership is None:
        return FavoriteTransition(INSERT, FAVORITED, favorite=True)
    if not current_favorite:
        return FavoriteTransition(UPDATE, FAVORITED, favorite=True)
    if membership.status == UserBook.STATUS_PLANNED:
        return FavoriteTransition(DELETE, REMOVED)
    return FavoriteTransition(UPDATE, UNFAVORITED, favorite=False)


def _resolve_book_id(book_id, title, author_name):
    """Return an existing book id, creating the book from title/author when it is missing."""
    if Book.objects.filter(id=book_id).exists():
        return book_id
    if not title or not author_name:
        raise LibraryError('Book details missing. Cannot favorite.')

    return ensure_book(title, author_name).book_id


def _apply(user, book_id, current_favorite):
    with transaction.atomic():
        user_book = (
            UserBook.objects.select_for_update()
            .filter(user=user, book_id=book_id)
            .first()
        )
        state = MembershipState(user_book.status, user_book.favorite) if user_book else None
        transition = decide_favorite_transition(state, current_favorite)

        if transition.action == INSERT:
            try:
                with transaction.atomic():
                    UserBook.objects.create(
                        user=user,
                        book_id=book_id,
                        status=UserBook.STATUS_PLANNED,
                        favorite=True,
                    )
            except IntegrityError:
                # Another session inserted the row first; favoriting it converges
                user_book = UserBook.objects.select_for_update().get(user=user, book_id=book_id)
                user_book.favorite = True
                user_book.save(update_fields=['favorite', 'updated_at'])
        elif transition.action == DELETE:
            if not user_book.favorite:
                # Stale caller: the planned row is no longer a favorite, keep it
                logger.info("Skipping delete of non-favorite planned membership %s", user_book.id)
                return FavoriteTransition(UPDATE, UNFAVORITED, favorite=False)
            user_book.delete()
        else:
            user_book.favorite = transition.favorite
            user_book.save(update_fields=['favorite', 'updated_at'])

        return transition


def toggle_favorite(user, book_id, current_favorite, title=None, author_name=None):
    """
    Toggle the favorite flag of ``book_id`` for ``user``.

    ``current_favorite`` is the caller's view of the flag. Returns a
    ToggleResult whose ``result`` is favorited, unfavorited, removed or
    error; storage failures are reported as error, never raised. Callers
    refresh their own view afterwards.
    """
    try:
        real_book_id = _resolve_book_id(book_id, title, author_name)
        transition = _apply(user, real_book_id, current_favorite)
    except LibraryError as exc:
        logger.error("toggle_favorite failed for user %s book %s: %s", user.pk, book_id, exc.message)
        return ToggleResult(ERROR, exc.message)
    except DatabaseError as exc:
        logger.error("toggle_favorite storage error for user %s book %s: %s", user.pk, book_id, exc)
        return ToggleResult(ERROR, str(exc))

    logger.info(
        "toggle_favorite user=%s book=%s action=%s outcome=%s",
        user.pk, real_book_id, transition.action, transition.outcome,
    )
    return ToggleResult(transition.outcome)
