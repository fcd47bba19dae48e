import re
import unicodedata

_NON_SLUG_CHARS = re.compile(r'[^a-z0-9]+')


def slugify(text: str) -> str:
    """
    URL slug from a product or category title.

    Example:
        >>> slugify("Victorian Brass Telescope (c. 1880)")
        'victorian-brass-telescope-c-1880'
    """
    normalized = unicodedata.normalize('NFKD', text).encode('ascii', 'ignore').decode('ascii')
    slug = _NON_SLUG_CHARS.sub('-', normalized.lower()).strip('-')
    return slug or 'item'
