"""
Input Cleaning Module

Cleans text arriving from request bodies and scraped recipe pages before it
is stored. Output is plain text; the API returns JSON and leaves escaping to
whoever renders it.
"""

import html
import re
from urllib.parse import urlparse

CONTROL_CHARS = re.compile(r'[\x00-\x08\x0b-\x1f\x7f-\x9f]')


def clean_text(text, max_length=10000, multiline=False):
    """
    Strip control characters and surrounding whitespace, then truncate.

    Single-line text also has runs of whitespace collapsed to one space.
    """
    if text is None:
        return ''

    if not isinstance(text, str):
        text = str(text)

    text = CONTROL_CHARS.sub('', text).strip()
    if not multiline:
        text = re.sub(r'\s+', ' ', text)

    return text[:max_length]


def sanitize_url(url):
    """Return the URL if it is http(s), otherwise ''."""
    if not url or not isinstance(url, str):
        return ''

    url = url.strip()
    try:
        parsed = urlparse(url)
    except ValueError:
        return ''

    if parsed.scheme.lower() not in ('http', 'https') or not parsed.netloc:
        return ''
    return url


def sanitize_recipe_name(name, max_length=200):
    """Clean a scraped recipe name. Entities such as '&amp;' are decoded."""
    if not name:
        return None
    name = clean_text(html.unescape(str(name)), max_length=max_length)
    return name or None


def sanitize_ingredient_text(text, max_length=500):
    """Clean one scraped ingredient line ('1 &frac12; cups flour' -> '1 ½ cups flour')."""
    if not text:
        return ''
    return clean_text(html.unescape(str(text)), max_length=max_length)
