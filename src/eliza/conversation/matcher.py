"""
Decomposition matching, reflection and reassembly.

Patterns are matched token by token against a clause. A literal word
matches itself or any synonym filed under it, a synonym group matches any
member of its class, and captures keep the words the user actually typed.
"""

from typing import List, Mapping, Optional, Sequence

from eliza.rules.types import (
    PLACEHOLDER_RE,
    PatternToken,
    RuleSet,
    SynonymGroup,
    Wildcard,
)


def _token_matches(token: PatternToken, word: str, rules: RuleSet) -> bool:
    if isinstance(token, SynonymGroup):
        return rules.in_group(word, token.name)
    return word == token.text or rules.canonical(word) == token.text


def match_decomposition(
    pattern: Sequence[PatternToken],
    words: Sequence[str],
    rules: RuleSet,
) -> Optional[List[str]]:
    """
    Match a decomposition pattern against a clause.

    Wildcards absorb zero or more words and are resolved leftmost-shortest,
    backtracking when a later literal fails to align. The whole clause must
    be consumed.

    Args:
        pattern: Pattern tokens of the decomposition
        words: Normalized clause tokens
        rules: Rule set providing synonym classes

    Returns:
        Captured text for each capturing token in pattern order
        (wildcards may capture an empty string), or None if no match.
    """
    captures: List[str] = []

    def walk(p: int, w: int) -> bool:
        if p == len(pattern):
            return w == len(words)

        token = pattern[p]
        if isinstance(token, Wildcard):
            for end in range(w, len(words) + 1):
                captures.append(" ".join(words[w:end]))
                if walk(p + 1, end):
                    return True
                captures.pop()
            return False

        if w < len(words) and _token_matches(token, words[w], rules):
            if token.captures:
                captures.append(words[w])
            if walk(p + 1, w + 1):
                return True
            if token.captures:
                captures.pop()
        return False

    return captures if walk(0, 0) else None


def reflect(text: str, reflections: Mapping[str, str]) -> str:
    """Swap first and second person forms word by word."""
    return " ".join(reflections.get(word, word) for word in text.split())


def assemble(template: str, captures: Sequence[str], reflections: Mapping[str, str]) -> str:
    """
    Splice reflected captures into a reassembly template.

    Placeholders are 1-based ({1} is the first capture). Indices were
    checked against the pattern when the rule set was loaded.
    """
    def splice(match) -> str:
        return reflect(captures[int(match.group(1)) - 1], reflections)

    reply = " ".join(PLACEHOLDER_RE.sub(splice, template).split())
    # Tidy spacing left by empty captures ("you are ?" -> "you are?")
    for mark in (",", ".", "?", "!", ";", ":"):
        reply = reply.replace(f" {mark}", mark)
    return reply[:1].upper() + reply[1:]
