"""
Rule database types.

Frozen dataclasses describing keywords, decomposition patterns and
reassembly templates. A RuleSet is built once and shared read-only by
every engine; the mutable rotation and memory state lives on the engine.
"""

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, FrozenSet, Mapping, Optional, Tuple, Union


PLACEHOLDER_RE = re.compile(r"\{(\d+)\}")
"""Numbered capture reference inside a reassembly template, e.g. {1}."""


# =============================================================================
# Pattern tokens
# =============================================================================

@dataclass(frozen=True)
class Word:
    """Literal token; also matches input whose canonical form is this word."""

    text: str

    @property
    def captures(self) -> bool:
        return False

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class Wildcard:
    """Absorbs zero or more input tokens."""

    @property
    def captures(self) -> bool:
        return True

    def __str__(self) -> str:
        return "*"


@dataclass(frozen=True)
class SynonymGroup:
    """Matches exactly one token belonging to the named equivalence class."""

    name: str

    @property
    def captures(self) -> bool:
        return True

    def __str__(self) -> str:
        return f"@{self.name}"


PatternToken = Union[Word, Wildcard, SynonymGroup]


# =============================================================================
# Reassemblies (tagged variant)
# =============================================================================

@dataclass(frozen=True)
class Literal:
    """Reply template spliced with the decomposition's captures."""

    text: str

    def placeholders(self) -> Tuple[int, ...]:
        return tuple(int(n) for n in PLACEHOLDER_RE.findall(self.text))


@dataclass(frozen=True)
class Defer:
    """
    Store a reply for later instead of answering now.

    The template is assembled like a Literal and pushed onto the memory
    queue; the engine then moves on to the next reassembly.
    """

    text: str

    def placeholders(self) -> Tuple[int, ...]:
        return tuple(int(n) for n in PLACEHOLDER_RE.findall(self.text))


@dataclass(frozen=True)
class Redirect:
    """Answer with another keyword's decompositions (classic 'goto')."""

    keyword: str

    def placeholders(self) -> Tuple[int, ...]:
        return ()


Reassembly = Union[Literal, Defer, Redirect]


# =============================================================================
# Rules
# =============================================================================

@dataclass(frozen=True)
class Decomposition:
    """
    A decomposition pattern with its ordered reassemblies.

    Attributes:
        pattern: Sequence of literal words, wildcards and synonym groups
        reassemblies: Candidate replies, used round-robin
    """

    pattern: Tuple[PatternToken, ...]
    reassemblies: Tuple[Reassembly, ...]

    @property
    def capture_count(self) -> int:
        """Number of tokens that produce a numbered capture."""
        return sum(1 for token in self.pattern if token.captures)

    def __str__(self) -> str:
        return " ".join(str(token) for token in self.pattern)


@dataclass(frozen=True)
class KeywordRule:
    """
    A trigger word plus its decomposition grammar.

    Attributes:
        word: Canonical keyword (lowercase)
        rank: Priority when several keywords appear; higher wins
        decompositions: Patterns tried in declared order
    """

    word: str
    rank: int
    decompositions: Tuple[Decomposition, ...]

    def __repr__(self) -> str:
        return (
            f"KeywordRule({self.word!r}, rank={self.rank}, "
            f"decompositions={len(self.decompositions)})"
        )


@dataclass(frozen=True)
class RuleSet:
    """
    The complete, immutable rule database.

    Attributes:
        keywords: Keyword rules by canonical word
        synonyms: Canonical word -> surface forms treated as that word
        reflections: Pronoun/possessive swaps applied to captured text
        substitutions: Phrase rewrites applied before tokenization
        defaults: Fallback replies when nothing matches and memory is empty
        greetings: Opening lines offered by the chat front-ends
        farewells: Closing lines
        quit_words: Inputs that end a conversation
    """

    keywords: Mapping[str, KeywordRule]
    synonyms: Mapping[str, FrozenSet[str]]
    reflections: Mapping[str, str]
    substitutions: Tuple[Tuple[str, str], ...]
    defaults: Tuple[str, ...]
    greetings: Tuple[str, ...] = ()
    farewells: Tuple[str, ...] = ()
    quit_words: FrozenSet[str] = frozenset()
    _canonical: Mapping[str, str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        # Read-only views so engines sharing the rule set cannot mutate it
        synonyms = {name: frozenset(forms) for name, forms in self.synonyms.items()}
        object.__setattr__(self, "keywords", MappingProxyType(dict(self.keywords)))
        object.__setattr__(self, "synonyms", MappingProxyType(synonyms))
        object.__setattr__(self, "reflections", MappingProxyType(dict(self.reflections)))

        # Reverse index: surface form -> canonical word
        index: Dict[str, str] = {}
        for canonical, forms in synonyms.items():
            for form in forms:
                index.setdefault(form, canonical)
            index.setdefault(canonical, canonical)
        object.__setattr__(self, "_canonical", MappingProxyType(index))

    def canonical(self, token: str) -> str:
        """Map a token to its canonical keyword (or itself)."""
        return self._canonical.get(token, token)

    def in_group(self, token: str, group: str) -> bool:
        """Check whether a token belongs to a synonym class."""
        return token == group or token in self.synonyms.get(group, ())

    def keyword(self, word: str) -> Optional[KeywordRule]:
        return self.keywords.get(word)

    def __repr__(self) -> str:
        return (
            f"RuleSet(keywords={len(self.keywords)}, synonyms={len(self.synonyms)}, "
            f"defaults={len(self.defaults)})"
        )
