from django.urls import path
from . import views

urlpatterns = [
path('favorites/toggle/', views.toggle_favorite_view, name='toggle_favorite'),
path('books/', views.create_book_view, name='create_book'),
path('books/public/', views.public_books_view, name='public_books'),
path('books/cover/', views.book_cover_view, name='book_cover'),
path('books/search/', views.search_google_books_view, name='search_google_books'),
path('books/info/', views.book_info_view, name='book_info'),
path('library/', views.library_view, name='library'),
path('library/<int:user_book_id>/', views.update_user_book_view, name='update_user_book'),
path('library/<int:user_book_id>/delete/', views.remove_user_book_view, name='remove_user_book'),
path('library/<int:user_book_id>/notes/', views.book_notes_view, name='book_notes'),
path('notes/', views.all_notes_view, name='all_notes'),
path('notes/<int:note_id>/', views.update_note_view, name='update_note'),
path('notes/<int:note_id>/delete/', views.delete_note_view, name='delete_note'),
path('profile/', views.profile_view, name='profile'),
path('follow/<int:user_id>/', views.follow_view, name='follow'),
path('unfollow/<int:user_id>/', views.unfollow_view, name='unfollow'),
path('following/', views.following_view, name='following'),
path('feed/', views.feed_view, name='feed'),
path('search/', views.search_view, name='search'),
path('stats/', views.stats_view, name='stats'),
]
