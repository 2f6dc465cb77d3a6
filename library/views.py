import logging
from functools import wraps

from django.http import JsonResponse

from . import catalog, favorites, notes, services, social
from .exceptions import LibraryError
from .forms import (
    BookInputForm,
    BookNoteForm,
    BookUpdateForm,
    CreateBookForm,
    ProfileUpdateForm,
    ToggleFavoriteForm,
    validate,
)

logger = logging.getLogger(__name__)


def api_view(methods=('GET',), login=True):
    """
    JSON endpoint wrapper: enforces the allowed methods, requires a logged-in
    user unless ``login`` is False, and turns LibraryError into a JSON error
    response with the matching status code.
    """
    def decorator(view):
        @wraps(view)
        def wrapper(request, *args, **kwargs):
            if request.method not in methods:
                return JsonResponse({'error': 'Method not allowed'}, status=405)
            if login and not request.user.is_authenticated:
                return JsonResponse({'error': 'Unauthorized'}, status=401)
            try:
                return view(request, *args, **kwargs)
            except LibraryError as exc:
                if exc.status_code >= 500:
                    logger.error("%s failed: %s", view.__name__, exc.message)
                body = {'error': exc.message}
                if exc.details:
                    body['details'] = exc.details
                return JsonResponse(body, status=exc.status_code)
        return wrapper
    return decorator


@api_view(methods=('POST',))
def toggle_favorite_view(request):
    form = validate(ToggleFavoriteForm, request.POST)
    data = form.cleaned_data
    outcome = favorites.toggle_favorite(
        request.user,
        data['book_id'],
        data['current_favorite'],
        title=data['title'] or None,
        author_name=data['author'] or None,
    )
    body = {'result': outcome.result, 'message': outcome.message}
    if outcome.result == favorites.ERROR:
        body['error'] = outcome.error_message
        return JsonResponse(body, status=500)
    return JsonResponse(body)


@api_view(methods=('POST',))
def create_book_view(request):
    form = validate(CreateBookForm, request.POST)
    result = catalog.ensure_book(
        form.cleaned_data['title'],
        form.cleaned_data['author_name'],
        **form.metadata()
    )
    body = {
        'book_id': result.book_id,
        'author_id': result.author_id,
        'message': 'Book created successfully' if result.created else 'Book already exists',
    }
    return JsonResponse(body, status=201 if result.created else 200)


@api_view(methods=('GET',), login=False)
def public_books_view(request):
    return JsonResponse({'books': social.public_books()})


@api_view(methods=('GET',))
def book_cover_view(request):
    title = request.GET.get('title', '').strip()
    author = request.GET.get('author', '').strip()
    if not title or not author:
        return JsonResponse({'error': 'Missing title or author parameter'}, status=400)

    cover_url = services.fetch_cover_url(title, author)
    if not cover_url:
        return JsonResponse({'error': 'Cover not found'}, status=404)
    return JsonResponse({'cover_url': cover_url})


@api_view(methods=('GET',), login=False)
def search_google_books_view(request):
    query = request.GET.get('q', '').strip()
    if not query:
        return JsonResponse({'error': 'Missing query parameter', 'items': []}, status=400)
    try:
        max_results = min(max(int(request.GET.get('maxResults', 10)), 1), 40)
    except ValueError:
        max_results = 10

    items = services.search_google_books(query, max_results=max_results)
    return JsonResponse({'items': items, 'totalItems': len(items)})


@api_view(methods=('GET',), login=False)
def book_info_view(request):
    """Google Books details for a title/author pair."""
    title = request.GET.get('title', '').strip()
    author = request.GET.get('author', '').strip()

    if not title or not author:
        return JsonResponse({'error': 'Title and author are required'}, status=400)

    book_details = services.get_book_details(title, author)
    if book_details:
        return JsonResponse(book_details)
    return JsonResponse({'error': 'Book information not found'}, status=404)


@api_view(methods=('GET', 'POST'))
def library_view(request):
    if request.method == 'GET':
        return JsonResponse({'books': catalog.list_user_books(request.user)})

    form = validate(BookInputForm, request.POST)
    data = form.cleaned_data
    user_book = catalog.add_book_to_library(
        request.user,
        data['title'],
        data['author'],
        status=data['status'],
        date_started=data['date_started'],
        date_finished=data['date_finished'],
        notes=data['notes'],
        **form.metadata()
    )
    return JsonResponse(
        {
            'message': f"{user_book.book.title} has been added to your library.",
            'book': catalog.serialize_user_book(user_book),
        },
        status=201,
    )


@api_view(methods=('POST',))
def update_user_book_view(request, user_book_id):
    form = validate(BookUpdateForm, request.POST)
    # Fields left out of the request keep their stored values
    fields = {key: value for key, value in form.cleaned_data.items() if key in request.POST}
    user_book = catalog.update_user_book(request.user, user_book_id, **fields)
    return JsonResponse({
        'message': f"{user_book.book.title} has been updated.",
        'book': catalog.serialize_user_book(user_book),
    })


@api_view(methods=('POST',))
def remove_user_book_view(request, user_book_id):
    title = catalog.remove_user_book(request.user, user_book_id)
    return JsonResponse({'message': f"Removed {title} from your library."})


@api_view(methods=('GET', 'POST'))
def book_notes_view(request, user_book_id):
    if request.method == 'POST':
        form = validate(BookNoteForm, request.POST)
        note = notes.create_note(request.user, user_book_id, **form.cleaned_data)
        return JsonResponse({'message': 'Your note has been saved.', 'note': notes.serialize_note(note)}, status=201)

    catalog.get_user_book(request.user, user_book_id)
    user_notes = notes.list_notes(request.user, user_book_id=user_book_id)
    filtered = notes.filter_notes(user_notes, request.GET.get('q', ''), request.GET.get('tag') or None)
    return JsonResponse({
        'notes': [notes.serialize_note(n) for n in filtered],
        'tags': notes.all_tags(user_notes),
    })


@api_view(methods=('GET',))
def all_notes_view(request):
    user_notes = notes.list_notes(request.user)
    return JsonResponse({'notes': [notes.serialize_note(n) for n in user_notes]})


@api_view(methods=('POST',))
def update_note_view(request, note_id):
    form = validate(BookNoteForm, request.POST)
    note = notes.update_note(request.user, note_id, **form.cleaned_data)
    return JsonResponse({'message': 'Your note has been updated.', 'note': notes.serialize_note(note)})


@api_view(methods=('POST',))
def delete_note_view(request, note_id):
    notes.delete_note(request.user, note_id)
    return JsonResponse({'message': 'Note deleted.'})


@api_view(methods=('POST',))
def profile_view(request):
    form = validate(ProfileUpdateForm, request.POST)
    social.update_profile(request.user, **form.cleaned_data)
    return JsonResponse({'success': True})


@api_view(methods=('POST',))
def follow_view(request, user_id):
    _, created = social.follow_user(request.user, user_id)
    return JsonResponse({'following': True}, status=201 if created else 200)


@api_view(methods=('POST',))
def unfollow_view(request, user_id):
    social.unfollow_user(request.user, user_id)
    return JsonResponse({'following': False})


@api_view(methods=('GET',))
def following_view(request):
    return JsonResponse({'following': social.list_following(request.user)})


@api_view(methods=('GET',))
def feed_view(request):
    try:
        limit = min(max(int(request.GET.get('limit', 20)), 1), 100)
    except ValueError:
        limit = 20
    activities = social.activity_feed(request.user, limit=limit)
    return JsonResponse({'activities': [a.to_dict() for a in activities]})


@api_view(methods=('GET',))
def search_view(request):
    return JsonResponse(social.search_everything(request.GET.get('q', '')))


@api_view(methods=('GET',))
def stats_view(request):
    return JsonResponse(social.get_user_stats(request.user))
