"""
Annotated text model

An AnnotatedText is the result of running a text processor over raw text:
an ordered list of sentences, each holding the ordered tag occurrences found
in it. Tags are identified by lemma and language so that the same word in
two different texts maps to the same stored Tag node.
"""
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Optional, Tuple

from domain.references import EntityKind


@dataclass
class Tag:
    """A lemma together with the POS and named-entity types observed for it"""
    lemma: str
    language: str = "en"
    pos: List[str] = field(default_factory=list)
    ne: List[str] = field(default_factory=list)

    entity_kind: ClassVar[EntityKind] = EntityKind.TAG

    @property
    def id(self) -> str:
        return f"{self.lemma}_{self.language}"

    def merge(self, other: "Tag") -> None:
        """Add the POS and NE values of another occurrence of the same tag"""
        for value in other.pos:
            if value not in self.pos:
                self.pos.append(value)
        for value in other.ne:
            if value not in self.ne:
                self.ne.append(value)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lemma": self.lemma,
            "language": self.language,
            "pos": list(self.pos),
            "ne": list(self.ne)
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Tag":
        return cls(
            lemma=data["lemma"],
            language=data.get("language", "en"),
            pos=list(data.get("pos") or []),
            ne=list(data.get("ne") or [])
        )


@dataclass
class TagOccurrence:
    """A single token of a sentence and the tag it was normalized to"""
    value: str
    begin: int
    end: int
    tag: Tag

    def to_dict(self) -> Dict[str, Any]:
        return {
            "value": self.value,
            "begin": self.begin,
            "end": self.end,
            "lemma": self.tag.lemma,
            "pos": list(self.tag.pos),
            "ne": list(self.tag.ne)
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], language: str = "en") -> "TagOccurrence":
        tag = Tag(
            lemma=data["lemma"],
            language=language,
            pos=list(data.get("pos") or []),
            ne=list(data.get("ne") or [])
        )
        return cls(value=data["value"], begin=data["begin"], end=data["end"], tag=tag)


@dataclass
class Sentence:
    """An ordered run of tag occurrences with an optional sentiment score"""
    text: str
    number: int
    occurrences: List[TagOccurrence] = field(default_factory=list)
    # 0 (very negative) .. 4 (very positive), None until computed
    sentiment: Optional[int] = None

    def add_occurrence(self, value: str, begin: int, end: int, tag: Tag) -> TagOccurrence:
        occurrence = TagOccurrence(value=value, begin=begin, end=end, tag=tag)
        self.occurrences.append(occurrence)
        return occurrence

    @property
    def token_count(self) -> int:
        return len(self.occurrences)

    @property
    def tags(self) -> List[Tag]:
        """Distinct tags in order of first appearance, POS/NE merged"""
        tags: Dict[str, Tag] = {}
        for occurrence in self.occurrences:
            tag = occurrence.tag
            if tag.id in tags:
                tags[tag.id].merge(tag)
            else:
                tags[tag.id] = Tag(tag.lemma, tag.language, list(tag.pos), list(tag.ne))
        return list(tags.values())

    def tag_frequencies(self) -> Dict[str, int]:
        frequencies: Dict[str, int] = {}
        for occurrence in self.occurrences:
            frequencies[occurrence.tag.id] = frequencies.get(occurrence.tag.id, 0) + 1
        return frequencies


@dataclass
class AnnotatedText:
    """Structured result of processing a text"""
    text: str
    sentences: List[Sentence] = field(default_factory=list)
    language: str = "en"
    # Set when the text is loaded back from the graph store
    id: Optional[str] = None
    tx_id: Optional[str] = None

    entity_kind: ClassVar[EntityKind] = EntityKind.ANNOTATED_TEXT

    @property
    def token_count(self) -> int:
        return sum(sentence.token_count for sentence in self.sentences)

    @property
    def tags(self) -> List[Tag]:
        tags: Dict[str, Tag] = {}
        for sentence in self.sentences:
            for tag in sentence.tags:
                if tag.id in tags:
                    tags[tag.id].merge(tag)
                else:
                    tags[tag.id] = tag
        return list(tags.values())

    def filter(self, expression: str) -> bool:
        """
        Evaluate a filter expression against the text.

        The expression is a comma separated list of items, each either a plain
        value ("Monaco") or a value with a named-entity type
        ("Monaco/LOCATION"). The text matches when any item matches one of its
        tag occurrences, comparing lemma or surface value case-insensitively.
        """
        criteria = self._parse_filter(expression)
        for sentence in self.sentences:
            for occurrence in sentence.occurrences:
                for value, entity_type in criteria:
                    if value not in (occurrence.value.lower(), occurrence.tag.lemma.lower()):
                        continue
                    if entity_type is None or entity_type in (ne.upper() for ne in occurrence.tag.ne):
                        return True
        return False

    @staticmethod
    def _parse_filter(expression: str) -> List[Tuple[str, Optional[str]]]:
        criteria = []
        for item in expression.split(","):
            item = item.strip()
            if not item:
                continue
            if "/" in item:
                value, entity_type = item.rsplit("/", 1)
                criteria.append((value.strip().lower(), entity_type.strip().upper() or None))
            else:
                criteria.append((item.lower(), None))
        return criteria
