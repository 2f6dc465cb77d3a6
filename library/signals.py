from django.contrib.auth.models import User
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver

from . import invalidation
from .models import Author, Book, UserBook, BookNote, Profile, UserFollow

# model -> (entity type, attribute holding the owning user id)
PUBLISHED_MODELS = {
    Author: (invalidation.AUTHOR, None),
    Book: (invalidation.BOOK, None),
    UserBook: (invalidation.USER_BOOK, 'user_id'),
    BookNote: (invalidation.BOOK_NOTE, 'user_id'),
    Profile: (invalidation.PROFILE, 'user_id'),
    UserFollow: (invalidation.USER_FOLLOW, 'follower_id'),
}


@receiver(post_save, sender=User)
def create_profile(sender, instance, created, **kwargs):
    if created:
        Profile.objects.get_or_create(user=instance)


def publish_change(sender, instance, **kwargs):
    entity_type, user_attr = PUBLISHED_MODELS[sender]
    user_id = getattr(instance, user_attr) if user_attr else None
    invalidation.bus.publish(entity_type, instance.pk, user_id)


for model in PUBLISHED_MODELS:
    post_save.connect(publish_change, sender=model, dispatch_uid=f"publish_save_{model.__name__}")
    post_delete.connect(publish_change, sender=model, dispatch_uid=f"publish_delete_{model.__name__}")

invalidation.register_default_subscribers()
