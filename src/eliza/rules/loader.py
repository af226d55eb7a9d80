"""
Rule table loading and validation.

Rule files are JSON documents validated with Pydantic, then compiled into
the frozen RuleSet types. Every structural problem is collected and
reported together as a RuleConfigError so a broken rule table can never
produce an engine.

Schema:
    {
      "greetings": ["..."], "farewells": ["..."], "quit": ["bye"],
      "substitutions": {"don't": "do not"},
      "reflections": {"i": "you", "you": "I"},
      "synonyms": {"family": ["mother", "father"]},
      "defaults": ["Please go on."],
      "keywords": [
        {"word": "my", "rank": 2, "decompositions": [
          {"pattern": "* my *",
           "reassemblies": ["Your {2}?", {"defer": "Earlier you said your {2}."}]}
        ]}
      ]
    }
"""

import json
import logging
from importlib import resources
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from eliza.config.constants import DEFAULT_RULES_FILE
from eliza.rules.types import (
    Decomposition,
    Defer,
    KeywordRule,
    Literal,
    PatternToken,
    Reassembly,
    Redirect,
    RuleSet,
    SynonymGroup,
    Wildcard,
    Word,
)

logger = logging.getLogger(__name__)


class RuleConfigError(ValueError):
    """A rule table is malformed. Raised at load time, never while responding."""

    def __init__(self, problems: List[str], source: Optional[str] = None):
        self.problems = list(problems)
        self.source = source
        where = f" in {source}" if source else ""
        detail = "\n".join(f"  - {p}" for p in self.problems)
        super().__init__(f"Invalid rule table{where}:\n{detail}")


# --- Schema ---

class DeferModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    defer: str


class GotoModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    goto: str

    @field_validator("goto")
    @classmethod
    def lower_target(cls, v: str) -> str:
        return v.strip().lower()


class DecompositionModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    pattern: str
    reassemblies: List[Union[str, DeferModel, GotoModel]] = Field(default_factory=list)


class KeywordModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    word: str
    rank: int = 0
    decompositions: List[DecompositionModel] = Field(default_factory=list)

    @field_validator("word")
    @classmethod
    def validate_word(cls, v: str) -> str:
        v = v.strip().lower()
        if not v or len(v.split()) != 1:
            raise ValueError("Keyword must be a single word")
        return v


class RuleFileModel(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    keywords: List[KeywordModel]
    defaults: List[str]
    synonyms: Dict[str, List[str]] = Field(default_factory=dict)
    reflections: Dict[str, str] = Field(default_factory=dict)
    substitutions: Dict[str, str] = Field(default_factory=dict)
    greetings: List[str] = Field(default_factory=list)
    farewells: List[str] = Field(default_factory=list)
    quit_words: List[str] = Field(default_factory=list, alias="quit")


# --- Compilation ---

def parse_pattern(pattern: str) -> tuple:
    """Split a pattern string into pattern tokens."""
    tokens: List[PatternToken] = []
    for part in pattern.lower().split():
        if part == "*":
            tokens.append(Wildcard())
        elif part.startswith("@") and len(part) > 1:
            tokens.append(SynonymGroup(part[1:]))
        else:
            tokens.append(Word(part))
    return tuple(tokens)


def _compile_reassembly(item: Union[str, DeferModel, GotoModel]) -> Reassembly:
    if isinstance(item, DeferModel):
        return Defer(item.defer)
    if isinstance(item, GotoModel):
        return Redirect(item.goto)
    return Literal(item)


def _check_decomposition(
    keyword: str,
    index: int,
    decomposition: Decomposition,
    keywords: Mapping[str, Any],
    synonyms: Mapping[str, Any],
) -> List[str]:
    where = f"keyword '{keyword}' decomposition {index} ('{decomposition}')"
    problems = []

    if not decomposition.pattern:
        problems.append(f"{where}: empty pattern")
    if not decomposition.reassemblies:
        problems.append(f"{where}: no reassemblies")

    for token in decomposition.pattern:
        if isinstance(token, SynonymGroup) and token.name not in synonyms:
            problems.append(f"{where}: unknown synonym class '@{token.name}'")

    limit = decomposition.capture_count
    for reassembly in decomposition.reassemblies:
        if isinstance(reassembly, (Literal, Defer)) and not reassembly.text.strip():
            problems.append(f"{where}: blank reassembly template")
        if isinstance(reassembly, Redirect) and reassembly.keyword not in keywords:
            problems.append(f"{where}: goto target '{reassembly.keyword}' is not a keyword")
        for n in reassembly.placeholders():
            if n < 1 or n > limit:
                problems.append(
                    f"{where}: placeholder {{{n}}} but pattern defines {limit} capture(s)"
                )
    return problems


def validate_rules(rules: RuleSet) -> List[str]:
    """
    Check a compiled RuleSet for problems that would break a reply.

    Returns:
        Human-readable problems; empty when the rule set is usable
    """
    problems: List[str] = []
    for word, rule in rules.keywords.items():
        if rule.rank < 0:
            problems.append(f"keyword '{word}': negative rank {rule.rank}")
        if not rule.decompositions:
            problems.append(f"keyword '{word}': no decompositions")
        for i, decomposition in enumerate(rule.decompositions):
            problems.extend(
                _check_decomposition(word, i, decomposition, rules.keywords, rules.synonyms)
            )

    if not rules.defaults:
        problems.append("default reply list is empty")
    elif not all(d.strip() for d in rules.defaults):
        problems.append("default reply list contains a blank reply")
    return problems


def build_rules(model: RuleFileModel, source: Optional[str] = None) -> RuleSet:
    """
    Compile a validated schema model into a RuleSet.

    Raises:
        RuleConfigError: If any semantic check fails
    """
    problems: List[str] = []
    names = [k.word for k in model.keywords]
    for word in sorted({w for w in names if names.count(w) > 1}):
        problems.append(f"duplicate keyword '{word}'")

    keywords: Dict[str, KeywordRule] = {}
    for entry in model.keywords:
        decompositions = tuple(
            Decomposition(
                pattern=parse_pattern(d.pattern),
                reassemblies=tuple(_compile_reassembly(r) for r in d.reassemblies),
            )
            for d in entry.decompositions
        )
        keywords.setdefault(entry.word, KeywordRule(entry.word, entry.rank, decompositions))

    rules = RuleSet(
        keywords=keywords,
        synonyms={
            name.strip().lower(): frozenset(f.strip().lower() for f in forms)
            for name, forms in model.synonyms.items()
        },
        reflections={k.lower(): v for k, v in model.reflections.items()},
        # Longest phrases first so "i'm not" wins over "i'm"
        substitutions=tuple(
            sorted(
                ((k.lower(), v.lower()) for k, v in model.substitutions.items()),
                key=lambda pair: len(pair[0]),
                reverse=True,
            )
        ),
        defaults=tuple(d for d in model.defaults if d.strip()),
        greetings=tuple(model.greetings),
        farewells=tuple(model.farewells),
        quit_words=frozenset(q.strip().lower() for q in model.quit_words),
    )

    problems.extend(validate_rules(rules))
    if problems:
        raise RuleConfigError(problems, source)

    logger.info(
        f"Loaded rule set{' from ' + source if source else ''}: "
        f"{len(rules.keywords)} keywords, {len(rules.synonyms)} synonym classes, "
        f"{len(rules.defaults)} defaults"
    )
    return rules


def parse_rules(data: Mapping[str, Any], source: Optional[str] = None) -> RuleSet:
    """
    Validate and compile a rule table held in memory.

    Args:
        data: Decoded rule table (see module docstring for the schema)
        source: Label used in error messages

    Raises:
        RuleConfigError: If the table is malformed
    """
    try:
        model = RuleFileModel.model_validate(data)
    except ValidationError as e:
        problems = [
            f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
            for err in e.errors()
        ]
        raise RuleConfigError(problems, source) from e
    return build_rules(model, source)


def load_rules(path: Union[str, Path]) -> RuleSet:
    """
    Load a rule table from a JSON file.

    Raises:
        RuleConfigError: If the file is not valid JSON or the table is malformed
        OSError: If the file cannot be read
    """
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise RuleConfigError([f"invalid JSON: {e}"], str(path)) from e
    return parse_rules(data, source=str(path))


def load_default_rules() -> RuleSet:
    """Load the bundled doctor script."""
    bundled = resources.files("eliza") / "data" / DEFAULT_RULES_FILE
    text = bundled.read_text(encoding="utf-8")
    return parse_rules(json.loads(text), source=DEFAULT_RULES_FILE)
