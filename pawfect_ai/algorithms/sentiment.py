"""
Keyword Review Sentiment

Local sentiment estimate used whenever the external sentiment judgement is
unavailable. Counts positive and negative keywords over all review words.
"""

import re
from typing import Iterable

from pawfect_ai.constants.thresholds import NEUTRAL_SIGNAL

POSITIVE_WORDS = frozenset({
    "great", "excellent", "amazing", "wonderful", "perfect", "love", "best", "fantastic",
})
NEGATIVE_WORDS = frozenset({
    "terrible", "awful", "bad", "horrible", "worst", "hate", "disappointed", "poor",
})

_WORD_RE = re.compile(r"[a-z0-9]+")


def tokenize(text: str) -> list:
    return _WORD_RE.findall(text.lower())


def keyword_sentiment(texts: Iterable[str]) -> float:
    """
    Sentiment in [0, 1] from keyword counts; 0.5 when there are no words.

    Example:
        >>> keyword_sentiment(["Great sitter", "bad timing"])
        0.5
        >>> keyword_sentiment([])
        0.5
    """
    positive = negative = total = 0
    for text in texts:
        for word in tokenize(text or ""):
            if word in POSITIVE_WORDS:
                positive += 1
            elif word in NEGATIVE_WORDS:
                negative += 1
            total += 1

    if total == 0:
        return NEUTRAL_SIGNAL

    raw = (positive - negative) / total
    return max(0.0, min(1.0, (raw + 1) / 2))
