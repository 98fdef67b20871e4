"""
Labels, relationship types and well-known property keys of the graph layout
"""
from enum import Enum


class Labels(str, Enum):
    ANNOTATED_TEXT = "AnnotatedText"
    SENTENCE = "Sentence"
    TAG = "Tag"
    KEYWORD = "Keyword"


class Relationships(str, Enum):
    CONTAINS_SENTENCE = "CONTAINS_SENTENCE"
    HAS_TAG = "HAS_TAG"
    IS_RELATED_TO = "IS_RELATED_TO"
    DESCRIBES = "DESCRIBES"
    SIMILARITY_COSINE = "SIMILARITY_COSINE"
    SIMILARITY_COSINE_CN5 = "SIMILARITY_COSINE_CN5"


class Properties(str, Enum):
    """Well-known properties; the stored key can be aliased in DynamicConfiguration"""
    ID = "id"
    TX_ID = "txId"
    TEXT = "text"
    NUM_TERMS = "numTerms"
    LANGUAGE = "language"
    SENTENCE_NUMBER = "sentenceNumber"
    SENTIMENT = "sentiment"
    OCCURRENCES = "occurrences"
    VALUE = "value"
    POS = "pos"
    NE = "ne"
    TERM_FREQUENCY = "tf"
    WEIGHT = "weight"
    TYPE = "type"
    RELEVANCE = "relevance"
    PAGERANK = "pagerank"
