from django.db import models
from django.contrib.auth.models import User
from django.core.validators import MinValueValidator, MaxValueValidator


class Author(models.Model):
    name = models.CharField(max_length=200)
    bio = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['name'], name='uq_author_name'),
        ]

    def __str__(self):
        return self.name


class Book(models.Model):
    title = models.CharField(max_length=500)
    author = models.ForeignKey(Author, on_delete=models.CASCADE, related_name='books')
    cover_url = models.URLField(max_length=1000, blank=True, null=True)
    description = models.TextField(blank=True, null=True)
    isbn = models.CharField(max_length=20, blank=True, null=True)
    page_count = models.PositiveIntegerField(blank=True, null=True)
    published_date = models.CharField(max_length=20, blank=True, null=True)
    google_books_url = models.URLField(max_length=1000, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['title', 'author'], name='uq_book_title_author'),
        ]

    def __str__(self):
        return self.title


class UserBook(models.Model):
    """One row per (user, book): the user's reading status and favorite flag."""

    STATUS_PLANNED = 'planned'
    STATUS_READING = 'reading'
    STATUS_FINISHED = 'finished'
    STATUS_DID_NOT_FINISH = 'did_not_finish'
    STATUS_CHOICES = [
        (STATUS_PLANNED, 'Planned'),
        (STATUS_READING, 'Reading'),
        (STATUS_FINISHED, 'Finished'),
        (STATUS_DID_NOT_FINISH, 'Did not finish'),
    ]

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='user_books')
    book = models.ForeignKey(Book, on_delete=models.CASCADE, related_name='memberships')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PLANNED)
    favorite = models.BooleanField(default=False)
    date_started = models.DateField(blank=True, null=True)
    date_finished = models.DateField(blank=True, null=True)
    notes = models.TextField(blank=True, null=True)
    personal_rating = models.PositiveSmallIntegerField(
        blank=True,
        null=True,
        validators=[MinValueValidator(1), MaxValueValidator(5)],
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['user', 'book'], name='uq_user_book'),
        ]
        indexes = [
            models.Index(fields=['user', 'status'], name='userbook_user_status_idx'),
            models.Index(fields=['user', 'favorite'], name='userbook_user_favorite_idx'),
        ]

    def __str__(self):
        return f"{self.user.username} - {self.book.title} ({self.status})"


class BookNote(models.Model):
    user_book = models.ForeignKey(UserBook, on_delete=models.CASCADE, related_name='book_notes')
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='book_notes')
    content = models.TextField()
    highlight_text = models.TextField(blank=True, null=True)
    tags = models.JSONField(default=list, blank=True)
    page_number = models.PositiveIntegerField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"{self.user.username} - note on {self.user_book.book.title}"


class Profile(models.Model):
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='profile')
    display_name = models.CharField(max_length=64, blank=True, null=True)
    bio = models.CharField(max_length=256, blank=True, null=True)
    avatar_url = models.URLField(max_length=1000, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.display_name or self.user.username


class UserFollow(models.Model):
    follower = models.ForeignKey(User, on_delete=models.CASCADE, related_name='following_set')
    following = models.ForeignKey(User, on_delete=models.CASCADE, related_name='follower_set')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['follower', 'following'], name='uq_user_follow'),
        ]

    def __str__(self):
        return f"{self.follower.username} -> {self.following.username}"
