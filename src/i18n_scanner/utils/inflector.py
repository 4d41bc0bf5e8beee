"""ActiveSupport-style name inflection used for key segments."""
import re
from typing import Optional

_ACRONYM_BOUNDARY = re.compile(r'([A-Z\d]+)([A-Z][a-z])')
_WORD_BOUNDARY = re.compile(r'([a-z\d])([A-Z])')


def underscore(name: str) -> str:
    """`TestScopes` -> `test_scopes`, `HTMLParser` -> `html_parser`."""
    word = _ACRONYM_BOUNDARY.sub(r'\1_\2', name)
    word = _WORD_BOUNDARY.sub(r'\1_\2', word)
    return word.replace('-', '_').lower()


def strip_suffix(name: str, suffix: Optional[str]) -> str:
    """Remove `suffix` from `name` unless that would leave nothing."""
    if suffix and name.endswith(suffix) and len(name) > len(suffix):
        return name[:-len(suffix)]
    return name
