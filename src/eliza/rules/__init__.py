"""
Rules package: the immutable rule database and its loader.

Components:
    - RuleSet: Keywords, synonyms, reflections, substitutions and defaults
    - KeywordRule / Decomposition: Ranked keywords and their patterns
    - Literal / Defer / Redirect: Reassembly variants
    - load_rules / parse_rules: JSON loading with fail-fast validation
    - validate_rules: Semantic checks shared by the loader and the engine
"""

from eliza.rules.types import (
    Decomposition,
    Defer,
    KeywordRule,
    Literal,
    Redirect,
    RuleSet,
    SynonymGroup,
    Wildcard,
    Word,
)
from eliza.rules.loader import (
    RuleConfigError,
    load_default_rules,
    load_rules,
    parse_rules,
    validate_rules,
)

__all__ = [
    # Types
    "RuleSet",
    "KeywordRule",
    "Decomposition",
    "Word",
    "Wildcard",
    "SynonymGroup",
    "Literal",
    "Defer",
    "Redirect",
    # Loading
    "RuleConfigError",
    "load_rules",
    "load_default_rules",
    "parse_rules",
    "validate_rules",
]
