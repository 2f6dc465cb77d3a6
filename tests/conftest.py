from unittest import mock

import pytest
import requests
from django.contrib.auth.models import User
from django.core.cache import cache

from library import services
from library.models import Author, Book


@pytest.fixture(autouse=True)
def clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def user(db):
    return User.objects.create_user(username='reader', password='password123')


@pytest.fixture
def other_user(db):
    return User.objects.create_user(username='friend', password='password123')


@pytest.fixture
def author(db):
    return Author.objects.create(name='Andy Weir')


@pytest.fixture
def book(author):
    return Book.objects.create(title='Project Hail Mary', author=author)


@pytest.fixture
def auth_client(client, user):
    client.force_login(user)
    return client


@pytest.fixture
def make_volume():
    def make(title='Project Hail Mary', authors=('Andy Weir',), image_links=None,
             isbn13=None, isbn10=None, volume_id='vol-1', **extra):
        identifiers = []
        if isbn13:
            identifiers.append({'type': 'ISBN_13', 'identifier': isbn13})
        if isbn10:
            identifiers.append({'type': 'ISBN_10', 'identifier': isbn10})
        info = {
            'title': title,
            'authors': list(authors),
            'industryIdentifiers': identifiers,
            **extra,
        }
        if image_links is not None:
            info['imageLinks'] = image_links
        return {'id': volume_id, 'volumeInfo': info}
    return make


@pytest.fixture(autouse=True)
def google_api():
    """
    Stand-in for the Google Books session. Unreachable unless a test
    configures an answer through ``google_response``.
    """
    with mock.patch.object(services._session, 'get') as get:
        get.side_effect = requests.exceptions.ConnectionError('network disabled in tests')
        yield get


@pytest.fixture
def google_response(google_api):
    """Make the Google Books session answer with the given volumes."""
    def respond(items=None, status_code=200):
        response = mock.MagicMock()
        response.status_code = status_code
        payload = {'totalItems': len(items or [])}
        if items:
            payload['items'] = items
        response.json.return_value = payload
        google_api.side_effect = None
        google_api.return_value = response
        return response
    return respond
