from __future__ import annotations

from collections.abc import Sequence

DEFAULT_MAX_LINES = 20


def gather_context(
    lines: Sequence[str],
    line_index: int,
    *,
    max_lines: int = DEFAULT_MAX_LINES,
    max_line_chars: int | None = None,
    max_total_chars: int | None = None,
    cursor_character: int | None = None,
) -> str:
    """
    Build the text window that ends at the cursor line.

    Up to ``max_lines`` preceding lines plus the current one, each followed by
    a newline, in document order. ``max_line_chars`` keeps the head of every
    preceding line, while the current line keeps the characters that end at
    ``cursor_character`` (the end of the line when it is None).
    ``max_total_chars`` then drops the oldest lines until the window fits; the
    current line is never dropped.

    The window holds exactly ``min(line_index, max_lines) + 1`` lines only while
    ``max_total_chars`` does not bite.
    """
    if not 0 <= line_index < len(lines):
        raise IndexError(f"line {line_index} is outside a document of {len(lines)} lines")

    start = max(0, line_index - max(0, max_lines))
    window = [lines[i] for i in range(start, line_index + 1)]
    if max_line_chars is not None:
        window = [line[:max_line_chars] for line in window[:-1]] + [
            _clip_around_cursor(window[-1], max_line_chars, cursor_character)
        ]

    if max_total_chars is not None:
        total = sum(len(line) + 1 for line in window)
        while len(window) > 1 and total > max_total_chars:
            total -= len(window.pop(0)) + 1

    return "".join(f"{line}\n" for line in window)


def _clip_around_cursor(line: str, limit: int, cursor_character: int | None) -> str:
    end = len(line) if cursor_character is None else min(max(0, cursor_character), len(line))
    start = max(0, end - limit)
    return line[start : start + limit]


def build_completion_prompt(snippet: str) -> str:
    return f"Context:\n{snippet}\nCompletion:"
