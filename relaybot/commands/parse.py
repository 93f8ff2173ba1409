"""Command input parsing utilities."""

import shlex


def split_command_name(text: str) -> tuple[str | None, str]:
    """Split command input into (command_name, arguments_text).

    The name is the first whitespace-delimited token, lowercased.

    Args:
        text: Input with the prefix already removed (e.g., ``"echo hi"``).

    Returns:
        A tuple of (command_name, args_text) where command_name is None
        for blank input.
    """
    stripped = text.strip()
    if not stripped:
        return None, ""
    parts = stripped.split(maxsplit=1)
    name = parts[0].lower()
    args = parts[1] if len(parts) > 1 else ""
    return name, args


def split_command_args(text: str) -> tuple[str, ...]:
    """Split command arguments using shell-like parsing.

    Args:
        text: The arguments text to split.

    Returns:
        A tuple of argument strings.

    Raises:
        ValueError: If quoting is unbalanced.
    """
    if not text.strip():
        return ()
    return tuple(shlex.split(text))
