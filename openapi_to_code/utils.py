"""
Name mangling utilities shared by every backend.

These functions are part of the generated code's public surface: changing
their output renames identifiers in every target. They implement fixed
rules rather than a general-purpose case conversion.
"""

# Characters stripped from the front of wire property names (e.g. ``$not``)
SIGILS = "$@#"


def snake_to_camel_case(text: str) -> str:
    """Convert a wire name in snake_case to UpperCamelCase.

    Leading sigils are dropped, every underscore-delimited segment gets its
    first letter capitalized, and underscores are removed. The rest of each
    segment is left as is.

    Examples:
        "$not" -> "Not"
        "rank_by" -> "RankBy"
        "top_k_Value" -> "TopKValue"
    """
    result = []
    capitalize_next = True
    for char in text.lstrip(SIGILS):
        if char == "_":
            capitalize_next = True
            continue
        result.append(char.upper() if capitalize_next else char)
        capitalize_next = False
    return "".join(result)


def lower_camel_case(text: str) -> str:
    """Lowercase the leading run of uppercase characters.

    Characters are lowercased one by one while they are uppercase. The first
    character that is not uppercase stops the run; it and everything after
    it are kept unchanged.

    Examples:
        "FilterEq" -> "filterEq"
        "ID" -> "id"
        "HTTPStatus" -> "httpstatus"
        "rankBy" -> "rankBy"
    """
    for i, char in enumerate(text):
        if not char.isupper():
            return text[:i].lower() + text[i:]
    return text.lower()


def capitalize_first(text: str) -> str:
    """Uppercase only the first character: ``"asc"`` -> ``"Asc"``."""
    if not text:
        return text
    return text[0].upper() + text[1:]


def escape_keyword(name: str, keywords: frozenset[str] | set[str]) -> str:
    """Append an underscore to identifiers that collide with a reserved word."""
    return f"{name}_" if name in keywords else name
