import logging
from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Optional, Union

from django.contrib.auth.models import User
from django.core.cache import cache
from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import Q

from .exceptions import ConflictError, NotFoundError, StorageError, ValidationError
from .invalidation import user_stats_cache_key
from .models import Author, Book, BookNote, Profile, UserBook, UserFollow
from .utils import force_https, initials, year_bounds

logger = logging.getLogger(__name__)

STATS_TTL = 300

STATUS_ACTIONS = {
    UserBook.STATUS_PLANNED: 'added',
    UserBook.STATUS_READING: 'started',
    UserBook.STATUS_FINISHED: 'finished',
    UserBook.STATUS_DID_NOT_FINISH: 'abandoned',
}


# --- Follow graph ---

def follow_user(user, target_id):
    if user.id == target_id:
        raise ValidationError("You cannot follow yourself.")
    if not User.objects.filter(id=target_id).exists():
        raise NotFoundError("User not found.")

    try:
        with transaction.atomic():
            follow, created = UserFollow.objects.get_or_create(follower=user, following_id=target_id)
    except IntegrityError:
        follow, created = UserFollow.objects.get(follower=user, following_id=target_id), False
    except DatabaseError as exc:
        raise StorageError(f"Failed to follow user: {exc}") from exc
    return follow, created


def unfollow_user(user, target_id):
    deleted, _ = UserFollow.objects.filter(follower=user, following_id=target_id).delete()
    return bool(deleted)


def following_ids(user):
    return list(UserFollow.objects.filter(follower=user).values_list('following_id', flat=True))


def _display_name(user):
    profile = getattr(user, 'profile', None)
    return (profile.display_name if profile else None) or user.username


def list_following(user):
    follows = (
        UserFollow.objects.filter(follower=user)
        .select_related('following__profile')
        .order_by('-created_at', '-id')
    )
    result = []
    for follow in follows:
        target = follow.following
        profile = getattr(target, 'profile', None)
        result.append({
            'id': target.id,
            'username': target.username,
            'display_name': _display_name(target),
            'avatar_url': profile.avatar_url if profile else None,
            'bio': profile.bio if profile else None,
            'followed_at': follow.created_at.isoformat(),
        })
    return result


# --- Profile ---

def update_profile(user, username, display_name=None, bio=None, avatar_url=None):
    """Apply a validated profile update. Raises ConflictError when the username is taken."""
    if User.objects.filter(username=username).exclude(id=user.id).exists():
        raise ConflictError("Username is already taken")

    profile, _ = Profile.objects.get_or_create(user=user)
    try:
        with transaction.atomic():
            if user.username != username:
                user.username = username
                user.save(update_fields=['username'])
            profile.display_name = display_name or None
            profile.bio = bio or None
            profile.avatar_url = avatar_url or None
            profile.save()
    except IntegrityError as exc:
        raise ConflictError("Username is already taken") from exc
    except DatabaseError as exc:
        raise StorageError(f"Failed to update profile: {exc}") from exc
    return profile


# --- Stats ---

def get_user_stats(user, today=None):
    """
    Total books, books finished this calendar year, and following count.
    Cached per user; the invalidation bus drops the entry on changes.
    """
    cache_key = user_stats_cache_key(user.id)
    cached = cache.get(cache_key)
    if cached is not None:
        return cached

    start, end = year_bounds(today)
    stats = {
        'total_books': UserBook.objects.filter(user=user).count(),
        'books_this_year': UserBook.objects.filter(
            user=user,
            date_finished__gte=start,
            date_finished__lte=end,
        ).count(),
        'following': UserFollow.objects.filter(follower=user).count(),
    }
    cache.set(cache_key, stats, STATS_TTL)
    return stats


# --- Activity feed ---

@dataclass(frozen=True)
class BookActivity:
    user_id: int
    username: str
    display_name: str
    action: str
    book_id: int
    book_title: str
    book_author: str
    timestamp: datetime
    note: Optional[str] = None
    kind: str = 'book'

    def to_dict(self):
        data = asdict(self)
        data['timestamp'] = self.timestamp.isoformat()
        data['user_initials'] = initials(self.display_name)
        return data


@dataclass(frozen=True)
class ProfileActivity:
    user_id: int
    username: str
    display_name: str
    bio: Optional[str]
    avatar_url: Optional[str]
    timestamp: datetime
    kind: str = 'profile'

    def to_dict(self):
        data = asdict(self)
        data['timestamp'] = self.timestamp.isoformat()
        data['user_initials'] = initials(self.display_name)
        return data


Activity = Union[BookActivity, ProfileActivity]


def _book_activities(user_ids, limit):
    user_books = (
        UserBook.objects.filter(user_id__in=user_ids)
        .select_related('user__profile', 'book__author')
        .order_by('-updated_at', '-id')[:limit]
    )
    for ub in user_books:
        yield BookActivity(
            user_id=ub.user_id,
            username=ub.user.username,
            display_name=_display_name(ub.user),
            action=STATUS_ACTIONS.get(ub.status, ub.status),
            book_id=ub.book_id,
            book_title=ub.book.title,
            book_author=ub.book.author.name,
            timestamp=ub.updated_at,
        )

    notes = (
        BookNote.objects.filter(user_id__in=user_ids)
        .select_related('user__profile', 'user_book__book__author')
        .order_by('-created_at', '-id')[:limit]
    )
    for note in notes:
        book = note.user_book.book
        yield BookActivity(
            user_id=note.user_id,
            username=note.user.username,
            display_name=_display_name(note.user),
            action='noted',
            book_id=book.id,
            book_title=book.title,
            book_author=book.author.name,
            timestamp=note.created_at,
            note=note.content,
        )


def _profile_activities(user_ids, limit):
    # A profile counts as updated once any of its public fields is filled in
    profiles = (
        Profile.objects.filter(user_id__in=user_ids)
        .filter(Q(display_name__isnull=False) | Q(bio__isnull=False) | Q(avatar_url__isnull=False))
        .select_related('user')
        .order_by('-updated_at', '-id')[:limit]
    )
    for profile in profiles:
        yield ProfileActivity(
            user_id=profile.user_id,
            username=profile.user.username,
            display_name=profile.display_name or profile.user.username,
            bio=profile.bio,
            avatar_url=profile.avatar_url,
            timestamp=profile.updated_at,
        )


def merge_activities(*streams, limit=20):
    """Merge activity streams newest first and keep ``limit`` entries."""
    merged = [activity for stream in streams for activity in stream]
    merged.sort(key=lambda a: a.timestamp, reverse=True)
    return merged[:limit]


def activity_feed(user, limit=20):
    """Book and profile activity of the user and everyone they follow."""
    followed = following_ids(user)
    book_stream = _book_activities([user.id] + followed, limit)
    profile_stream = _profile_activities(followed, limit)
    return merge_activities(book_stream, profile_stream, limit=limit)


# --- Header search ---

def search_everything(query, limit=5):
    """
    Case-insensitive substring search across books, authors and profiles.
    """
    query = (query or '').strip()
    results = {'books': [], 'authors': [], 'users': []}
    if len(query) < 2:
        return results

    books = Book.objects.filter(title__icontains=query).select_related('author').order_by('title')[:limit]
    results['books'] = [
        {
            'id': book.id,
            'title': book.title,
            'author': book.author.name,
            'cover_url': force_https(book.cover_url),
        }
        for book in books
    ]

    authors = Author.objects.filter(name__icontains=query).order_by('name')[:limit]
    results['authors'] = [{'id': author.id, 'name': author.name} for author in authors]

    users = (
        User.objects.filter(Q(username__icontains=query) | Q(profile__display_name__icontains=query))
        .select_related('profile')
        .order_by('username')
        .distinct()[:limit]
    )
    results['users'] = [
        {'id': u.id, 'username': u.username, 'display_name': _display_name(u)}
        for u in users
    ]
    return results


# --- Public catalog ---

def public_books(limit=12):
    """Recently added books that have a cover, viewable without an account."""
    books = (
        Book.objects.exclude(cover_url__isnull=True)
        .exclude(cover_url='')
        .select_related('author')
        .order_by('-created_at', '-id')[:limit]
    )
    return [
        {
            'id': book.id,
            'title': book.title or 'Unknown',
            'author': book.author.name if book.author_id else 'Unknown Author',
            'cover_url': force_https(book.cover_url),
            'page_count': book.page_count or 0,
            'description': book.description or '',
        }
        for book in books
    ]
