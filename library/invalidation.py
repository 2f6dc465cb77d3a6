"""
Publish/subscribe bus that tells consumers an entity they display may be stale.

Model signals (see ``library.signals``) publish on every save and delete;
subscribers register per entity type and receive the primary key and, when
available, the owning user id.
"""
import logging
from collections import defaultdict

from django.core.cache import cache

logger = logging.getLogger(__name__)

AUTHOR = 'author'
BOOK = 'book'
USER_BOOK = 'user_book'
BOOK_NOTE = 'book_note'
PROFILE = 'profile'
USER_FOLLOW = 'user_follow'

ENTITY_TYPES = (AUTHOR, BOOK, USER_BOOK, BOOK_NOTE, PROFILE, USER_FOLLOW)


class InvalidationBus:
    def __init__(self):
        self._subscribers = defaultdict(list)

    def subscribe(self, entity_type, callback):
        """Register ``callback(entity_type, pk, user_id)``; returns an unsubscribe function."""
        if entity_type not in ENTITY_TYPES:
            raise ValueError(f"Unknown entity type: {entity_type}")
        self._subscribers[entity_type].append(callback)

        def unsubscribe():
            if callback in self._subscribers[entity_type]:
                self._subscribers[entity_type].remove(callback)

        return unsubscribe

    def publish(self, entity_type, pk, user_id=None):
        # Copy so a callback may unsubscribe itself
        for callback in list(self._subscribers.get(entity_type, [])):
            callback(entity_type, pk, user_id)

    def clear(self):
        self._subscribers.clear()


bus = InvalidationBus()


def user_stats_cache_key(user_id):
    return f"user_stats:{user_id}"


def drop_user_stats(entity_type, pk, user_id):
    if user_id is None:
        return
    cache.delete(user_stats_cache_key(user_id))
    logger.debug("Dropped cached stats for user %s after %s %s changed", user_id, entity_type, pk)


def register_default_subscribers(target=None):
    target = target or bus
    return [
        target.subscribe(USER_BOOK, drop_user_stats),
        target.subscribe(USER_FOLLOW, drop_user_stats),
    ]
