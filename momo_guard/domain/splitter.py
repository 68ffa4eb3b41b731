"""Segment splitter - divides one raw SMS into transaction-sized segments"""

import re
from typing import List, Tuple

from momo_guard.domain.models import TransactionSegment

# Openers that start a new transaction; lookahead keeps them with the next segment
TRANSACTION_OPENER = re.compile(
    r"(?=Your\s+(?:payment|new\s+balance)|Cash\s+Out|Payment\s+for|Confirmed\.\s+GHS|\d{13}\s+Confirmed)",
    re.IGNORECASE,
)

# ". Capitalized" boundary, only when the rest of the piece still looks financial
SENTENCE_BOUNDARY = re.compile(
    r"\.\s+(?=[A-Z].*(?:GHS|₵|(?i:payment|cash|financial|confirmed)))"
)

CURRENCY_MARKERS = ("GHS", "₵")
MIN_SEGMENT_LENGTH = 15


def _split_at_openers(text: str) -> List[Tuple[str, int]]:
    starts = sorted({m.start() for m in TRANSACTION_OPENER.finditer(text)} | {0})
    bounds = starts + [len(text)]
    return [(text[bounds[i]:bounds[i + 1]], bounds[i]) for i in range(len(starts))]


def _split_at_sentences(piece: str, offset: int) -> List[Tuple[str, int]]:
    parts = []
    start = 0
    for match in SENTENCE_BOUNDARY.finditer(piece):
        parts.append((piece[start:match.start()], offset + start))
        start = match.end()
    parts.append((piece[start:], offset + start))
    return parts


def _strip(text: str, offset: int) -> Tuple[str, int]:
    leading = len(text) - len(text.lstrip())
    return text.strip(), offset + leading


def split_segments(raw: str) -> List[TransactionSegment]:
    """
    Split a raw message into candidate transaction segments.

    A piece survives only if it is at least 15 characters long and carries a
    currency marker. Zero segments is a valid outcome; the caller decides
    whether that is a rejection.
    """
    segments = []
    for piece, piece_offset in _split_at_openers(raw):
        for part, part_offset in _split_at_sentences(piece, piece_offset):
            text, offset = _strip(part, part_offset)
            if len(text) < MIN_SEGMENT_LENGTH:
                continue
            if not any(marker in text for marker in CURRENCY_MARKERS):
                continue
            segments.append(TransactionSegment(text=text, offset=offset))
    return segments
