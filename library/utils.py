from datetime import date


def parse_tags(raw) -> list:
    """
    Split comma-separated tag input into a clean, ordered list.
    Example: " fav, quotes,, ch 3 " -> ["fav", "quotes", "ch 3"]
    Lists are accepted as-is apart from trimming and dropping empties.
    """
    if not raw:
        return []
    parts = raw if isinstance(raw, (list, tuple)) else str(raw).split(',')
    return [str(part).strip() for part in parts if str(part).strip()]


def force_https(url):
    """Upgrade an http:// link to https://; None and empty strings pass through."""
    if not url:
        return url
    if url.startswith('http://'):
        return 'https://' + url[len('http://'):]
    return url


def initials(name: str) -> str:
    """Two-letter initials for a display name, e.g. "Sarah Johnson" -> "SJ"."""
    words = [w for w in (name or '').split() if w]
    if not words:
        return '?'
    if len(words) == 1:
        return words[0][:2].upper()
    return (words[0][0] + words[-1][0]).upper()


def year_bounds(today: date = None):
    today = today or date.today()
    return date(today.year, 1, 1), date(today.year, 12, 31)
