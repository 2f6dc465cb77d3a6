from django import forms
from django.core.validators import RegexValidator

from .exceptions import ValidationError
from .models import UserBook
from .utils import parse_tags


class BookMetadataForm(forms.Form):
    """Optional catalog fields accepted wherever a book may be created."""

    cover_url = forms.URLField(required=False, max_length=1000, error_messages={'invalid': 'Invalid cover URL'})
    description = forms.CharField(
        required=False,
        max_length=10000,
        strip=False,
        error_messages={'max_length': 'Description must be less than 10000 characters'},
    )
    isbn = forms.CharField(
        required=False,
        max_length=20,
        error_messages={'max_length': 'ISBN must be less than 20 characters'},
    )
    page_count = forms.IntegerField(
        required=False,
        min_value=1,
        max_value=100000,
        error_messages={
            'min_value': 'Page count must be at least 1',
            'max_value': 'Page count seems unreasonably large',
        },
    )
    published_date = forms.CharField(required=False, max_length=20)
    google_books_url = forms.URLField(
        required=False,
        max_length=1000,
        error_messages={'invalid': 'Invalid Google Books URL'},
    )

    METADATA_FIELDS = ('cover_url', 'description', 'isbn', 'page_count', 'published_date', 'google_books_url')

    def metadata(self):
        """Cleaned metadata with blanks dropped."""
        return {
            key: self.cleaned_data[key]
            for key in self.METADATA_FIELDS
            if self.cleaned_data.get(key) not in (None, '')
        }


class CreateBookForm(BookMetadataForm):
    title = forms.CharField(
        max_length=500,
        error_messages={'required': 'Title is required', 'max_length': 'Title must be less than 500 characters'},
    )
    author_name = forms.CharField(
        max_length=200,
        error_messages={
            'required': 'Author name is required',
            'max_length': 'Author name must be less than 200 characters',
        },
    )


class ReadingDatesMixin:
    """Rejects a finish date earlier than the start date."""

    def clean(self):
        cleaned = super().clean()
        started = cleaned.get('date_started')
        finished = cleaned.get('date_finished')
        if started and finished and finished < started:
            self.add_error('date_finished', 'Finish date cannot be before start date')
        return cleaned


class BookInputForm(ReadingDatesMixin, BookMetadataForm):
    title = forms.CharField(
        max_length=500,
        error_messages={'required': 'Title is required', 'max_length': 'Title must be less than 500 characters'},
    )
    author = forms.CharField(
        max_length=200,
        error_messages={'required': 'Author is required', 'max_length': 'Author must be less than 200 characters'},
    )
    status = forms.ChoiceField(choices=UserBook.STATUS_CHOICES, required=False)
    date_started = forms.DateField(required=False)
    date_finished = forms.DateField(required=False)
    notes = forms.CharField(
        required=False,
        max_length=5000,
        error_messages={'max_length': 'Notes must be less than 5000 characters'},
    )

    def clean_status(self):
        return self.cleaned_data.get('status') or UserBook.STATUS_PLANNED


class BookUpdateForm(ReadingDatesMixin, forms.Form):
    status = forms.ChoiceField(choices=UserBook.STATUS_CHOICES)
    date_started = forms.DateField(required=False)
    date_finished = forms.DateField(required=False)
    notes = forms.CharField(
        required=False,
        max_length=5000,
        error_messages={'max_length': 'Notes must be less than 5000 characters'},
    )
    personal_rating = forms.IntegerField(required=False, min_value=1, max_value=5)


TRUE_VALUES = ('true', 'True', '1', 'on')
FALSE_VALUES = ('false', 'False', '0', 'off')


class ToggleFavoriteForm(forms.Form):
    book_id = forms.IntegerField(min_value=1)
    # Missing or blank means "not a favorite"
    current_favorite = forms.TypedChoiceField(
        choices=[(value, value) for value in TRUE_VALUES + FALSE_VALUES],
        coerce=lambda value: value in TRUE_VALUES,
        required=False,
        empty_value=False,
        error_messages={'invalid_choice': 'current_favorite must be true or false'},
    )
    title = forms.CharField(required=False, max_length=500)
    author = forms.CharField(required=False, max_length=200)


class BookNoteForm(forms.Form):
    content = forms.CharField(max_length=10000, error_messages={'required': 'Note content is required'})
    highlight_text = forms.CharField(required=False, max_length=10000)
    tags = forms.CharField(required=False, max_length=1000)
    page_number = forms.IntegerField(required=False, min_value=1)

    def clean_tags(self):
        return parse_tags(self.cleaned_data.get('tags'))


class ProfileUpdateForm(forms.Form):
    username = forms.CharField(
        min_length=3,
        max_length=32,
        validators=[
            RegexValidator(
                r'^[a-zA-Z0-9_]+$',
                'Username can only contain letters, numbers, and underscores',
            )
        ],
        error_messages={
            'min_length': 'Username must be at least 3 characters',
            'max_length': 'Username must be less than 32 characters',
        },
    )
    display_name = forms.CharField(
        required=False,
        max_length=64,
        error_messages={'max_length': 'Display name must be less than 64 characters'},
    )
    bio = forms.CharField(
        required=False,
        max_length=256,
        strip=False,
        error_messages={'max_length': 'Bio must be less than 256 characters'},
    )
    avatar_url = forms.URLField(required=False, max_length=1000, error_messages={'invalid': 'Invalid avatar URL'})


def validate(form_class, data):
    """Bind and validate a form, raising ValidationError with per-field details."""
    form = form_class(data)
    if not form.is_valid():
        details = {
            field: [error['message'] for error in errors]
            for field, errors in form.errors.get_json_data().items()
        }
        raise ValidationError('Validation failed', details=details)
    return form
