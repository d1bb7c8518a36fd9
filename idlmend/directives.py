# idlmend/directives.py
"""Preprocessor directive mask.

Web IDL has no notion of `#if` / `#endif` lines. `mask` turns each of them
into a line comment so the tokeniser keeps it as trivia; `unmask` undoes it
after writing.

Lines are split on "\n" only, so "\r\n" endings pass through untouched.

Known limitation: a line that already starts with `//#` before masking is
indistinguishable from a masked directive and loses its `//` on unmask.
`has_mask_collision` reports such input.
"""

from __future__ import annotations

DIRECTIVE_MARKER = "#"
COMMENT_MARKER = "//"
MASKED_PREFIX = COMMENT_MARKER + DIRECTIVE_MARKER


def mask(text: str) -> str:
    return "\n".join(
        COMMENT_MARKER + line if line.startswith(DIRECTIVE_MARKER) else line
        for line in text.split("\n")
    )


def unmask(text: str) -> str:
    return "\n".join(
        line[len(COMMENT_MARKER):] if line.startswith(MASKED_PREFIX) else line
        for line in text.split("\n")
    )


def has_mask_collision(text: str) -> bool:
    """True if `unmask(mask(text))` would not give `text` back."""
    return any(line.startswith(MASKED_PREFIX) for line in text.split("\n"))
