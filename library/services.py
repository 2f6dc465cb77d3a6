import logging
import time

import requests
from django.conf import settings
from django.core.cache import cache
from django.db import DatabaseError, transaction
from django.db.models import Q

from .exceptions import ExternalLookupError
from .models import Book
from .utils import force_https

logger = logging.getLogger(__name__)

GOOGLE_BOOKS_URL = "https://www.googleapis.com/books/v1/volumes"

# Largest first
COVER_PREFERENCE = ('extraLarge', 'large', 'medium', 'small', 'thumbnail')

CACHE_TTL = 86400

# Create a session for connection pooling (reuses TCP connections)
_session = requests.Session()


def _get_volumes(params):
    """
    Call the Google Books volumes endpoint.
    Raises ExternalLookupError when the API is unreachable, answers with a
    non-success status, or returns something that is not a JSON object.
    """
    params = dict(params)
    if settings.GOOGLE_API_KEY:
        params['key'] = settings.GOOGLE_API_KEY

    try:
        response = _session.get(GOOGLE_BOOKS_URL, params=params, timeout=settings.GOOGLE_BOOKS_TIMEOUT)
    except requests.exceptions.RequestException as exc:
        raise ExternalLookupError(f"Google Books request failed: {exc}") from exc

    if response.status_code != 200:
        raise ExternalLookupError(f"Google Books API error: {response.status_code}")

    try:
        data = response.json()
    except ValueError as exc:
        raise ExternalLookupError("Google Books returned invalid JSON") from exc
    if not isinstance(data, dict):
        raise ExternalLookupError("Google Books returned an unexpected payload")
    return data


def lookup_volume(title, author):
    """Return the volumeInfo of the best match for title + author, or None."""
    data = _get_volumes({'q': f'intitle:{title}+inauthor:{author}', 'maxResults': 1})
    items = data.get('items') or []
    if not items:
        return None
    if not isinstance(items, list) or not isinstance(items[0], dict):
        raise ExternalLookupError("Google Books returned malformed volumes")
    volume_info = items[0].get('volumeInfo') or {}
    if not isinstance(volume_info, dict):
        raise ExternalLookupError("Google Books returned malformed volume info")
    return volume_info


def pick_cover_url(image_links):
    """
    Select the largest available image variant and force HTTPS.
    Google serves a higher resolution for zoom=2 than the default zoom=1.
    """
    if not isinstance(image_links, dict):
        return None
    raw_url = next((image_links[name] for name in COVER_PREFERENCE if image_links.get(name)), None)
    if not isinstance(raw_url, str):
        return None
    return force_https(raw_url).replace('&zoom=1', '&zoom=2')


def fetch_cover_url(title, author):
    """Best-effort cover lookup: a URL, or None when not found or on any lookup failure."""
    try:
        volume_info = lookup_volume(title, author)
    except ExternalLookupError as exc:
        logger.warning("Cover lookup failed for %r by %r: %s", title, author, exc)
        return None

    if volume_info is None:
        logger.info("No cover found for %r by %r", title, author)
        return None
    return pick_cover_url(volume_info.get('imageLinks'))


def resolve_cover(book):
    """
    Fill in a missing cover for a book. Advisory only: a book without a cover
    is a valid end state, and lookup failures never reach the caller.
    Returns the book's cover URL after the attempt (possibly None).
    """
    if book.cover_url:
        return book.cover_url

    cover_url = fetch_cover_url(book.title, book.author.name)
    if cover_url:
        try:
            with transaction.atomic():
                Book.objects.filter(pk=book.pk).update(cover_url=cover_url)
        except DatabaseError as exc:
            logger.warning("Could not store cover for %r: %s", book.title, exc)
            return book.cover_url
        book.cover_url = cover_url
        logger.info("Updated cover for %r: %s", book.title, cover_url)
    return book.cover_url


def backfill_covers(limit=50, delay=0.2):
    """
    Resolve covers for books that have none.
    Returns {'processed', 'successful', 'results'} where each result is
    {'title', 'success', 'cover_url'}.
    """
    books = Book.objects.filter(Q(cover_url__isnull=True) | Q(cover_url='')).select_related('author')[:limit]

    results = []
    for index, book in enumerate(books):
        if index and delay:
            # Rate limit between API calls
            time.sleep(delay)
        cover_url = resolve_cover(book)
        results.append({'title': book.title, 'success': bool(cover_url), 'cover_url': cover_url})

    return {
        'processed': len(results),
        'successful': sum(1 for r in results if r['success']),
        'results': results,
    }


def _normalize_item(item):
    info = item.get('volumeInfo', {})
    identifiers = info.get('industryIdentifiers', [])
    isbn = (
        next((i['identifier'] for i in identifiers if i.get('type') == 'ISBN_13'), None)
        or next((i['identifier'] for i in identifiers if i.get('type') == 'ISBN_10'), None)
    )
    return {
        'id': item.get('id'),
        'title': info.get('title') or 'Unknown Title',
        'authors': info.get('authors', []),
        'cover_url': pick_cover_url(info.get('imageLinks')),
        'description': info.get('description', ''),
        'page_count': info.get('pageCount'),
        'published_date': info.get('publishedDate'),
        'isbn': isbn,
        'google_books_url': info.get('infoLink'),
        'categories': info.get('categories', []),
        'language': info.get('language'),
        'publisher': info.get('publisher'),
    }


def search_google_books(query, max_results=10):
    """
    Searches Google Books API with caching to reduce latency.
    Returns an empty list when the API cannot be reached.
    """
    query_normalized = (query or '').lower().strip()
    if not query_normalized:
        return []
    cache_key = f"google_books_search:{max_results}:{query_normalized}"

    cached_results = cache.get(cache_key)
    if cached_results is not None:
        return cached_results

    try:
        data = _get_volumes({'q': query, 'maxResults': max_results})
    except ExternalLookupError as exc:
        logger.warning("Google Books search for %r failed: %s", query, exc)
        return []

    results = [_normalize_item(item) for item in data.get('items') or [] if isinstance(item, dict)]
    logger.info("Found %s results for %r", data.get('totalItems', 0), query)

    cache.set(cache_key, results, CACHE_TTL)
    return results


def search_database_books(query, limit=5):
    """
    Search the local catalog by title or author name.
    Returns results in the same format as search_google_books.
    """
    query = (query or '').strip()
    if not query:
        return []

    books = Book.objects.filter(
        Q(title__icontains=query) | Q(author__name__icontains=query)
    ).select_related('author').order_by('title')[:limit]

    return [
        {
            'id': None,
            'book_id': book.id,
            'title': book.title,
            'authors': [book.author.name],
            'cover_url': force_https(book.cover_url),
            'description': book.description or '',
            'page_count': book.page_count,
            'published_date': book.published_date,
            'isbn': book.isbn,
            'google_books_url': book.google_books_url,
            'categories': [],
            'language': None,
            'publisher': None,
        }
        for book in books
    ]


def search_books(query, limit=5):
    """
    Unified search: local catalog first, then Google Books, deduplicated by ISBN.
    """
    db_results = search_database_books(query, limit=limit)
    if len(db_results) >= limit:
        return db_results

    google_results = search_google_books(query, max_results=limit)

    seen_isbns = {r['isbn'] for r in db_results if r['isbn']}
    combined_results = db_results.copy()
    for result in google_results:
        if result['isbn'] and result['isbn'] in seen_isbns:
            continue
        combined_results.append(result)
        if result['isbn']:
            seen_isbns.add(result['isbn'])
        if len(combined_results) >= limit:
            break

    return combined_results


def get_book_details(title, author):
    """
    Gets detailed information about a specific book from Google Books API,
    including description/summary. Cached for 24 hours; None when not found.
    """
    query_normalized = f"{title} {author}".lower().strip()
    cache_key = f"google_books_details:{query_normalized}"

    cached_result = cache.get(cache_key)
    if cached_result is not None:
        return cached_result

    try:
        volume_info = lookup_volume(title, author)
    except ExternalLookupError as exc:
        logger.warning("Book details lookup failed for %r by %r: %s", title, author, exc)
        return None

    if volume_info is None:
        return None

    result = {
        'title': volume_info.get('title', title),
        'author': ', '.join(volume_info.get('authors', [author])),
        'description': volume_info.get('description', ''),
        'published_date': volume_info.get('publishedDate', ''),
        'page_count': volume_info.get('pageCount'),
        'categories': volume_info.get('categories', []),
        'cover_url': pick_cover_url(volume_info.get('imageLinks')),
        'preview_link': volume_info.get('previewLink', ''),
        'info_link': volume_info.get('infoLink', ''),
    }

    cache.set(cache_key, result, CACHE_TTL)
    return result
