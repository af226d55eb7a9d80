"""
Input normalization.

Turns raw user text into clauses of lowercase tokens: substitutions are
applied first (contraction expansion and similar rewrites), then the text
is split on clause punctuation and stripped of everything else.
"""

import re
from typing import Iterable, List, Tuple

from eliza.config.constants import CLAUSE_SEPARATORS, CLAUSE_WORDS


_APOSTROPHES = str.maketrans({"’": "'", "‘": "'", "`": "'"})
_CLAUSE_RE = re.compile(
    "[" + re.escape(CLAUSE_SEPARATORS) + "]"
    + "".join(rf"|\b{re.escape(w)}\b" for w in CLAUSE_WORDS)
)
_NON_WORD_RE = re.compile(r"[^\w'\s]+")


class Normalizer:
    """
    Normalize and tokenize user input.

    Substitutions are matched on whole words in a single left-to-right
    pass, so a rewrite's output is never rewritten again.

    Example:
        >>> normalizer = Normalizer([("don't", "do not")])
        >>> normalizer.clauses("I don't know. Maybe.")
        [['i', 'do', 'not', 'know'], ['maybe']]
    """

    def __init__(self, substitutions: Iterable[Tuple[str, str]] = ()):
        self._substitutions = dict(substitutions)
        if self._substitutions:
            # Longest first so overlapping phrases prefer the longer rewrite
            phrases = sorted(self._substitutions, key=len, reverse=True)
            self._substitution_re = re.compile(
                r"(?<![\w'])(" + "|".join(re.escape(p) for p in phrases) + r")(?![\w'])"
            )
        else:
            self._substitution_re = None

    def substitute(self, text: str) -> str:
        """Apply phrase substitutions to lowercase text."""
        if self._substitution_re is None:
            return text
        return self._substitution_re.sub(lambda m: self._substitutions[m.group(1)], text)

    def clauses(self, text: str) -> List[List[str]]:
        """
        Split text into clauses of tokens.

        Returns an empty list for empty or punctuation-only input.
        """
        text = " ".join(text.translate(_APOSTROPHES).lower().split())
        text = self.substitute(text)

        result = []
        for clause in _CLAUSE_RE.split(text):
            clause = _NON_WORD_RE.sub(" ", clause)
            tokens = [t.strip("'") for t in clause.split()]
            tokens = [t for t in tokens if t]
            if tokens:
                result.append(tokens)
        return result

    def tokens(self, text: str) -> List[str]:
        """All tokens of the input, clause boundaries dropped."""
        return [token for clause in self.clauses(text) for token in clause]

    def __repr__(self) -> str:
        return f"Normalizer(substitutions={len(self._substitutions)})"
