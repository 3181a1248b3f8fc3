import re

# One or more lowercase alnum groups joined by single hyphens
SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
SLUG_MAX_LENGTH = 50

URL_PATTERN = re.compile(r"^https?://[^\s/$.?#].[^\s]*$", re.IGNORECASE)


def is_valid_slug(value: str | None) -> bool:
    return bool(value) and SLUG_PATTERN.fullmatch(value) is not None


def is_valid_url(value: str | None) -> bool:
    return bool(value) and URL_PATTERN.fullmatch(value) is not None
