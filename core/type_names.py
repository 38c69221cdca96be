"""
Type Names — Derive the node type name of a content model.

The type name is the configured prefix and the model's short name joined by a
space, split into words and PascalCased:

    create_type_name("post", "Blog")        -> "BlogPost"
    create_type_name("ct_author", "")       -> "CtAuthor"
    create_type_name("blogEntry", "Chisel") -> "ChiselBlogEntry"
    create_type_name("FAQ item", "Site")    -> "SiteFaqItem"
    create_type_name("über", "Blog")        -> "BlogÜber"

Word boundaries are any run of characters that are neither letters nor digits,
the lower to upper case transitions inside a word, and the switches between
letters and digits. Letters are matched by Unicode category, so accented and
non-Latin letters are kept. Each word keeps its first character upper-cased
and the rest lower-cased.
"""

import re
from typing import List

_SEPARATOR_PATTERN = re.compile(r"[\W_]+")


def _is_lower(char: str) -> bool:
    # Caseless letters (CJK, Arabic, ...) continue a word like lower case
    return not char.isdigit() and not char.isupper()


def _split_chunk(chunk: str) -> List[str]:
    words = []
    i, n = 0, len(chunk)
    while i < n:
        j = i + 1
        if chunk[i].isdigit():
            while j < n and chunk[j].isdigit():
                j += 1
        elif chunk[i].isupper():
            while j < n and chunk[j].isupper():
                j += 1
            if j < n and _is_lower(chunk[j]):
                if j - i > 1:
                    # Acronym followed by a capitalized word: "XMLHttp" -> XML, Http
                    j -= 1
                else:
                    while j < n and _is_lower(chunk[j]):
                        j += 1
        else:
            while j < n and _is_lower(chunk[j]):
                j += 1
        words.append(chunk[i:j])
        i = j
    return words


def split_words(value: str) -> List[str]:
    """Split a string into its words on separators and case boundaries."""
    words = []
    for chunk in _SEPARATOR_PATTERN.split(value or ""):
        words.extend(_split_chunk(chunk))
    return words


def create_type_name(name: str, prefix: str = "") -> str:
    """Return the PascalCase node type name for a model.

    Args:
        name: The model's short name (its "nameId").
        prefix: The configured type-name prefix (may be empty).

    Returns:
        The derived type name. Pure and deterministic.
    """
    joined = f"{prefix or ''} {name or ''}"
    return "".join(word[0].upper() + word[1:].lower() for word in split_words(joined))
