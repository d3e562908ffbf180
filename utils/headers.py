import re

# visible ASCII plus space and tab, the same bytes http accepts as a str header value
_HEADER_VALUE = re.compile(r'^[\t\x20-\x7e]*$')


def is_valid_header_value(value) -> bool:
    """Return True when ``value`` can be sent back as an HTTP header value."""
    if not isinstance(value, str) or not value.strip():
        return False
    return _HEADER_VALUE.match(value) is not None
