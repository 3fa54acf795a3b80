"""Fixed-size word windows over a transcript."""

import re

CHUNK_WORDS = 60

_WORD = re.compile(r"\S+")


def split_into_windows(text: str, window: int = CHUNK_WORDS) -> list[str]:
    """
    Split text into consecutive, non-overlapping windows of `window` words.

    Each window is the exact substring from its first word to its last word,
    so speaker-label line breaks inside a window are preserved. The final
    window may be shorter. Text without words yields no windows.
    """
    if window < 1:
        raise ValueError("window must be at least 1 word")

    spans = [m.span() for m in _WORD.finditer(text)]
    return [
        text[spans[i][0] : spans[min(i + window, len(spans)) - 1][1]]
        for i in range(0, len(spans), window)
    ]
