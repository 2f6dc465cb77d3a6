from django.contrib import admin
from .models import Author, Book, UserBook, BookNote, Profile, UserFollow

@admin.register(Author)
class AuthorAdmin(admin.ModelAdmin):
    list_display = ('name', 'created_at')
    search_fields = ('name',)

@admin.register(Book)
class BookAdmin(admin.ModelAdmin):
    list_display = ('title', 'author', 'isbn', 'cover_url')
    search_fields = ('title', 'isbn', 'author__name')

@admin.register(UserBook)
class UserBookAdmin(admin.ModelAdmin):
    list_display = ('user', 'book', 'status', 'favorite', 'updated_at')
    list_filter = ('status', 'favorite')

@admin.register(BookNote)
class BookNoteAdmin(admin.ModelAdmin):
    list_display = ('user', 'user_book', 'page_number', 'created_at')

@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ('user', 'display_name', 'updated_at')

@admin.register(UserFollow)
class UserFollowAdmin(admin.ModelAdmin):
    list_display = ('follower', 'following', 'created_at')
