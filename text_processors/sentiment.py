"""
Lexicon-based sentence sentiment on a five point scale

    0 very negative, 1 negative, 2 neutral, 3 positive, 4 very positive
"""
from typing import Iterable, Optional, Set

VERY_NEGATIVE = 0
NEGATIVE = 1
NEUTRAL = 2
POSITIVE = 3
VERY_POSITIVE = 4

POSITIVE_WORDS = {
    "good", "great", "excellent", "amazing", "awesome", "love", "loved", "loves", "like", "liked",
    "happy", "glad", "nice", "wonderful", "fantastic", "best", "better", "beautiful", "enjoy",
    "enjoyed", "brilliant", "perfect", "pleasant", "positive", "success", "successful", "win",
    "won", "favorite", "fine", "helpful", "impressive", "superb", "delightful", "recommend"
}

NEGATIVE_WORDS = {
    "bad", "terrible", "awful", "horrible", "hate", "hated", "hates", "dislike", "sad", "angry",
    "poor", "worst", "worse", "ugly", "boring", "fail", "failed", "failure", "negative", "wrong",
    "broken", "disappointing", "disappointed", "annoying", "painful", "useless", "lose", "lost",
    "problem", "problems", "nasty", "dreadful", "mediocre", "unhappy"
}

NEGATIONS = {"not", "no", "never", "n't", "nothing", "nobody", "neither", "nor", "without"}

INTENSIFIERS = {"very", "really", "extremely", "so", "too", "absolutely", "incredibly"}


class LexiconSentimentAnalyzer:
    """Scores sentences by counting polarity words with negation and intensifiers"""

    def __init__(self, positive: Optional[Set[str]] = None, negative: Optional[Set[str]] = None):
        self.positive = positive or POSITIVE_WORDS
        self.negative = negative or NEGATIVE_WORDS

    def polarity(self, words: Iterable[str]) -> int:
        score = 0
        negate = False
        boost = 1
        for word in words:
            word = word.lower()
            if word in NEGATIONS:
                negate = True
                continue
            if word in INTENSIFIERS:
                boost = 2
                continue
            value = 1 if word in self.positive else -1 if word in self.negative else 0
            if value:
                score += -value * boost if negate else value * boost
                negate = False
                boost = 1
        return score

    def score(self, words: Iterable[str]) -> int:
        polarity = self.polarity(words)
        if polarity <= -2:
            return VERY_NEGATIVE
        if polarity == -1:
            return NEGATIVE
        if polarity == 0:
            return NEUTRAL
        if polarity == 1:
            return POSITIVE
        return VERY_POSITIVE
