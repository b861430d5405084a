"""
Shell escaping for names rendered into catalog commands.

Every shell-special character has exactly one escaped form:

* newline becomes a single-quoted newline (``'<LF>'``), because a
  backslash-newline pair is a line continuation to ``sh``
* every other special character is prefixed with a backslash

``unescape_shell`` inverts the mapping, so ``unescape_shell(escape_shell(s))``
is ``s`` for every string ``s``.
"""

SHELL_SPECIAL_CHARACTERS = frozenset("\\'\"$`!&|;<>(){}[]*?#~=% \t")

_QUOTED_NEWLINE = "'\n'"


def escape_shell(text: str) -> str:
    escaped = []
    for char in text:
        if char == "\n":
            escaped.append(_QUOTED_NEWLINE)
        elif char in SHELL_SPECIAL_CHARACTERS:
            escaped.append("\\" + char)
        else:
            escaped.append(char)
    return "".join(escaped)


def unescape_shell(text: str) -> str:
    """Reverse ``escape_shell``.

    Raises:
        ValueError: If ``text`` is not a possible output of ``escape_shell``.
    """
    result = []
    i = 0
    while i < len(text):
        char = text[i]
        if char == "\\":
            if i + 1 >= len(text):
                raise ValueError("Dangling escape character at end of input")
            result.append(text[i + 1])
            i += 2
        elif char == "'":
            if text[i : i + len(_QUOTED_NEWLINE)] != _QUOTED_NEWLINE:
                raise ValueError(f"Unexpected quote at offset {i}")
            result.append("\n")
            i += len(_QUOTED_NEWLINE)
        else:
            result.append(char)
            i += 1
    return "".join(result)
