import re

_IDENTIFIER = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")


def quote_identifier(name: str) -> str:
    """
    Quote a table or column name for interpolation into raw SQL.

    Only plain identifiers are accepted; anything else raises ValueError
    before it can reach a statement.
    """
    if not isinstance(name, str) or not _IDENTIFIER.fullmatch(name):
        raise ValueError(f"Invalid SQL identifier: {name!r}")
    return f'"{name}"'
