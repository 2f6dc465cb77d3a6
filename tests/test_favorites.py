from unittest import mock

import pytest
from django.db import DatabaseError

from library import favorites
from library.favorites import (
    DELETE,
    FAVORITED,
    INSERT,
    REMOVED,
    UNFAVORITED,
    UPDATE,
    MembershipState,
    decide_favorite_transition,
    toggle_favorite,
)
from library.models import Author, Book, UserBook


class TestDecision:
    def test_no_membership_inserts_planned_favorite(self):
        transition = decide_favorite_transition(None, False)
        assert (transition.action, transition.outcome, transition.favorite) == (INSERT, FAVORITED, True)

    def test_no_membership_ignores_caller_flag(self):
        transition = decide_favorite_transition(None, True)
        assert transition.action == INSERT
        assert transition.outcome == FAVORITED

    @pytest.mark.parametrize('status', [s for s, _ in UserBook.STATUS_CHOICES])
    def test_not_favorite_sets_flag_for_any_status(self, status):
        transition = decide_favorite_transition(MembershipState(status, False), False)
        assert (transition.action, transition.outcome, transition.favorite) == (UPDATE, FAVORITED, True)

    def test_planned_favorite_is_deleted(self):
        transition = decide_favorite_transition(MembershipState(UserBook.STATUS_PLANNED, True), True)
        assert (transition.action, transition.outcome) == (DELETE, REMOVED)

    @pytest.mark.parametrize('status', [
        UserBook.STATUS_READING,
        UserBook.STATUS_FINISHED,
        UserBook.STATUS_DID_NOT_FINISH,
    ])
    def test_started_favorite_is_cleared(self, status):
        transition = decide_favorite_transition(MembershipState(status, True), True)
        assert (transition.action, transition.outcome, transition.favorite) == (UPDATE, UNFAVORITED, False)


@pytest.mark.django_db
class TestToggleFavorite:
    def test_favorite_book_not_in_list(self, user, book):
        result = toggle_favorite(user, book.id, current_favorite=False)

        assert result.result == FAVORITED
        assert result.message == favorites.MESSAGES[FAVORITED]
        user_book = UserBook.objects.get(user=user, book=book)
        assert user_book.status == UserBook.STATUS_PLANNED
        assert user_book.favorite is True

    def test_favorite_keeps_reading_progress(self, user, book):
        UserBook.objects.create(
            user=user,
            book=book,
            status=UserBook.STATUS_READING,
            notes='Halfway through',
            date_started='2026-03-01',
        )

        result = toggle_favorite(user, book.id, current_favorite=False)

        assert result.result == FAVORITED
        user_book = UserBook.objects.get(user=user, book=book)
        assert user_book.favorite is True
        assert user_book.status == UserBook.STATUS_READING
        assert user_book.notes == 'Halfway through'
        assert str(user_book.date_started) == '2026-03-01'

    def test_unfavorite_planned_removes_membership(self, user, book):
        UserBook.objects.create(user=user, book=book, status=UserBook.STATUS_PLANNED, favorite=True)

        result = toggle_favorite(user, book.id, current_favorite=True)

        assert result.result == REMOVED
        assert not UserBook.objects.filter(user=user, book=book).exists()
        assert Book.objects.filter(id=book.id).exists()

    def test_unfavorite_finished_keeps_membership(self, user, book):
        UserBook.objects.create(user=user, book=book, status=UserBook.STATUS_FINISHED, favorite=True)

        result = toggle_favorite(user, book.id, current_favorite=True)

        assert result.result == UNFAVORITED
        user_book = UserBook.objects.get(user=user, book=book)
        assert user_book.favorite is False
        assert user_book.status == UserBook.STATUS_FINISHED

    def test_unfavorite_leaves_other_fields_alone(self, user, book):
        UserBook.objects.create(
            user=user,
            book=book,
            status=UserBook.STATUS_FINISHED,
            favorite=True,
            date_started='2026-02-01',
            date_finished='2026-02-20',
            notes='Loved the ending',
            personal_rating=5,
        )

        toggle_favorite(user, book.id, current_favorite=True)

        user_book = UserBook.objects.get(user=user, book=book)
        assert user_book.favorite is False
        assert str(user_book.date_started) == '2026-02-01'
        assert str(user_book.date_finished) == '2026-02-20'
        assert user_book.notes == 'Loved the ending'
        assert user_book.personal_rating == 5

    def test_concurrent_insert_becomes_favorite(self, user, book):
        # The row appears between the locked read and the insert
        UserBook.objects.create(user=user, book=book, status=UserBook.STATUS_READING, notes='Chapter 4')
        real_select_for_update = UserBook.objects.select_for_update
        calls = []

        def stale_select_for_update(*args, **kwargs):
            calls.append(kwargs)
            if len(calls) == 1:
                return UserBook.objects.none()
            return real_select_for_update(*args, **kwargs)

        with mock.patch.object(UserBook.objects, 'select_for_update', side_effect=stale_select_for_update):
            result = toggle_favorite(user, book.id, current_favorite=False)

        assert result.result == FAVORITED
        assert len(calls) == 2
        user_book = UserBook.objects.get(user=user, book=book)
        assert user_book.favorite is True
        assert user_book.status == UserBook.STATUS_READING
        assert user_book.notes == 'Chapter 4'
        assert UserBook.objects.filter(user=user, book=book).count() == 1

    def test_missing_book_is_created_from_details(self, user):
        result = toggle_favorite(user, 9999, current_favorite=False, title='Dune', author_name='Frank Herbert')

        assert result.result == FAVORITED
        author = Author.objects.get(name='Frank Herbert')
        book = Book.objects.get(title='Dune', author=author)
        assert UserBook.objects.get(user=user, book=book).favorite is True

    def test_missing_book_reuses_existing_catalog_row(self, user, book):
        result = toggle_favorite(user, 9999, current_favorite=False, title=book.title, author_name='Andy Weir')

        assert result.result == FAVORITED
        assert Book.objects.count() == 1
        assert UserBook.objects.get(user=user).book_id == book.id

    def test_missing_book_without_details_is_error(self, user):
        result = toggle_favorite(user, 9999, current_favorite=False)

        assert result.result == favorites.ERROR
        assert result.message == 'Book details missing. Cannot favorite.'
        assert UserBook.objects.count() == 0
        assert Book.objects.count() == 0

    def test_storage_failure_is_reported_not_raised(self, user, book):
        with mock.patch.object(UserBook.objects, 'select_for_update', side_effect=DatabaseError('disk full')):
            result = toggle_favorite(user, book.id, current_favorite=False)

        assert result.result == favorites.ERROR
        assert 'disk full' in result.error_message
        assert UserBook.objects.count() == 0

    def test_stale_unfavorite_keeps_planned_row(self, user, book):
        # Another session already cleared the flag
        UserBook.objects.create(user=user, book=book, status=UserBook.STATUS_PLANNED, favorite=False)

        result = toggle_favorite(user, book.id, current_favorite=True)

        assert result.result == UNFAVORITED
        user_book = UserBook.objects.get(user=user, book=book)
        assert user_book.favorite is False

    def test_repeated_favorite_converges(self, user, book):
        first = toggle_favorite(user, book.id, current_favorite=False)
        second = toggle_favorite(user, book.id, current_favorite=False)

        assert first.result == second.result == FAVORITED
        assert UserBook.objects.filter(user=user, book=book).count() == 1
        assert UserBook.objects.get(user=user, book=book).favorite is True

    def test_toggle_round_trip_from_empty_list(self, user, book):
        toggle_favorite(user, book.id, current_favorite=False)
        result = toggle_favorite(user, book.id, current_favorite=True)

        assert result.result == REMOVED
        assert UserBook.objects.filter(user=user).count() == 0

    def test_other_users_are_untouched(self, user, other_user, book):
        UserBook.objects.create(user=other_user, book=book, status=UserBook.STATUS_PLANNED, favorite=True)

        toggle_favorite(user, book.id, current_favorite=False)

        assert UserBook.objects.get(user=other_user, book=book).favorite is True
        assert UserBook.objects.filter(book=book).count() == 2
