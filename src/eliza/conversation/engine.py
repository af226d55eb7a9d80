"""
The responder engine.

Owns one conversation's mutable state (reassembly rotation cursors, the
memory queue and default-reply rotation) over a shared, read-only RuleSet.
Create one engine per conversation; the lock only matters when a single
engine is shared between threads.
"""

import logging
import threading
from collections import Counter
from typing import Dict, List, Optional, Tuple, Union

from eliza.config.constants import (
    DEFAULT_FAREWELL,
    DEFAULT_GREETING,
    DEFAULT_MEMORY_CAPACITY,
)
from eliza.conversation.matcher import assemble, match_decomposition
from eliza.conversation.memory import MemoryQueue
from eliza.conversation.normalizer import Normalizer
from eliza.rules.loader import RuleConfigError, validate_rules
from eliza.rules.types import Decomposition, Defer, KeywordRule, Reassembly, Redirect, RuleSet

logger = logging.getLogger(__name__)


class _FallThrough:
    """Marker: stop trying keywords and take the no-match path."""

    def __repr__(self) -> str:
        return "FALL_THROUGH"


FALL_THROUGH = _FallThrough()

_Outcome = Union[str, _FallThrough, None]


class ResponderEngine:
    """
    Deterministic keyword/decomposition responder.

    respond() is total: every string maps to a non-empty reply.

    Algorithm per call:
    1. Normalize into clauses; use the first clause containing a keyword
    2. Rank that clause's keywords (highest rank first, leftmost on ties)
    3. Try each keyword's decompositions in declared order
    4. Take the matching decomposition's next reassembly (round-robin):
       Literal -> reply, Defer -> push to memory and advance,
       Redirect -> retry with the target keyword
    5. Nothing matched: oldest memory entry, else next default reply

    Attributes:
        _rules: Shared rule database
        _memory: Deferred replies for this conversation
        _cursors: Rotation cursor per (keyword, decomposition index)

    Example:
        >>> engine = ResponderEngine(load_default_rules())
        >>> engine.respond("I am sad")
        'I am sorry to hear that you are sad.'
    """

    def __init__(self, rules: RuleSet, memory_capacity: int = DEFAULT_MEMORY_CAPACITY):
        """
        Initialize an engine over a rule set.

        Args:
            rules: Validated rule database (shared, never mutated)
            memory_capacity: Maximum deferred replies kept

        Raises:
            RuleConfigError: If the rule set could produce a broken reply
        """
        problems = validate_rules(rules)
        if problems:
            raise RuleConfigError(problems)

        self._rules = rules
        self._normalizer = Normalizer(rules.substitutions)
        self._memory = MemoryQueue(memory_capacity)
        self._cursors: Dict[Tuple[str, int], int] = {}
        self._default_cursor = 0
        self._greeting_cursor = 0
        self._farewell_cursor = 0
        self._turns = 0
        self._keyword_hits: Counter = Counter()
        self._lock = threading.Lock()

    # --- Public API ---

    def respond(self, text: str) -> str:
        """
        Produce a reply for one user message.

        Args:
            text: User input (trimming is optional; empty input is allowed)

        Returns:
            Non-empty reply string
        """
        with self._lock:
            self._turns += 1
            reply = self._respond(text)
            logger.debug(f"Turn {self._turns}: {text!r} -> {reply!r}")
            return reply

    def greeting(self) -> str:
        """Next opening line."""
        with self._lock:
            if not self._rules.greetings:
                return DEFAULT_GREETING
            line = self._rules.greetings[self._greeting_cursor % len(self._rules.greetings)]
            self._greeting_cursor += 1
            return line

    def farewell(self) -> str:
        """Next closing line."""
        with self._lock:
            if not self._rules.farewells:
                return DEFAULT_FAREWELL
            line = self._rules.farewells[self._farewell_cursor % len(self._rules.farewells)]
            self._farewell_cursor += 1
            return line

    def is_quit(self, text: str) -> bool:
        """Check whether the input is one of the rule set's quit words."""
        phrase = " ".join(self._normalizer.tokens(text))
        return bool(phrase) and phrase in self._rules.quit_words

    def reset(self) -> None:
        """Forget rotation state and memory, as if freshly constructed."""
        with self._lock:
            self._cursors.clear()
            self._memory.clear()
            self._default_cursor = 0
            self._greeting_cursor = 0
            self._farewell_cursor = 0
            self._turns = 0
            self._keyword_hits.clear()

    def stats(self) -> dict:
        """Conversation statistics."""
        with self._lock:
            return {
                "turns": self._turns,
                "memory_size": len(self._memory),
                "memory_capacity": self._memory.capacity,
                "keyword_hits": dict(self._keyword_hits),
            }

    @property
    def rules(self) -> RuleSet:
        return self._rules

    @property
    def memory(self) -> List[str]:
        """Deferred replies, oldest first."""
        with self._lock:
            return self._memory.snapshot()

    # --- Algorithm ---

    def _respond(self, text: str) -> str:
        for clause in self._normalizer.clauses(text):
            ranked = self._rank_keywords(clause)
            if not ranked:
                continue

            for rule in ranked:
                outcome = self._apply_rule(rule, clause, hops=0)
                if outcome is FALL_THROUGH:
                    break
                if outcome is not None:
                    return outcome
            # Only the first clause containing a keyword is considered
            break

        return self._no_match()

    def _keyword_for(self, token: str) -> Optional[KeywordRule]:
        rule = self._rules.keyword(token)
        if rule is None:
            rule = self._rules.keyword(self._rules.canonical(token))
        return rule

    def _rank_keywords(self, clause: List[str]) -> List[KeywordRule]:
        """Keywords present in the clause, highest rank first, leftmost on ties."""
        first_seen: Dict[str, Tuple[int, KeywordRule]] = {}
        for position, token in enumerate(clause):
            rule = self._keyword_for(token)
            if rule is not None and rule.word not in first_seen:
                first_seen[rule.word] = (position, rule)

        ordered = sorted(first_seen.values(), key=lambda item: (-item[1].rank, item[0]))
        return [rule for _, rule in ordered]

    def _apply_rule(self, rule: KeywordRule, clause: List[str], hops: int) -> _Outcome:
        """Try a keyword's decompositions; None means none matched."""
        for index, decomposition in enumerate(rule.decompositions):
            captures = match_decomposition(decomposition.pattern, clause, self._rules)
            if captures is None:
                continue

            logger.debug(f"Keyword '{rule.word}' matched decomposition {index}: {decomposition}")
            self._keyword_hits[rule.word] += 1
            return self._reassemble(rule, index, decomposition, captures, clause, hops)
        return None

    def _reassemble(
        self,
        rule: KeywordRule,
        index: int,
        decomposition: Decomposition,
        captures: List[str],
        clause: List[str],
        hops: int,
    ) -> _Outcome:
        deferred = False
        for _ in range(len(decomposition.reassemblies)):
            reassembly = self._next_reassembly(rule.word, index, decomposition)

            if isinstance(reassembly, Defer):
                if not deferred:
                    entry = assemble(reassembly.text, captures, self._rules.reflections)
                    # Empty captures can leave nothing worth recalling
                    if entry:
                        self._memory.push(entry)
                        deferred = True
                        logger.debug(f"Deferred to memory: {entry!r} ({len(self._memory)} held)")
                continue

            if isinstance(reassembly, Redirect):
                return self._redirect(reassembly.keyword, clause, hops)

            reply = assemble(reassembly.text, captures, self._rules.reflections)
            if reply:
                return reply

        return FALL_THROUGH

    def _redirect(self, keyword: str, clause: List[str], hops: int) -> _Outcome:
        if hops >= len(self._rules.keywords):
            logger.warning(f"Redirect chain exhausted at '{keyword}', using fallback reply")
            return FALL_THROUGH

        outcome = self._apply_rule(self._rules.keywords[keyword], clause, hops + 1)
        return FALL_THROUGH if outcome is None else outcome

    def _next_reassembly(
        self, word: str, index: int, decomposition: Decomposition
    ) -> Reassembly:
        key = (word, index)
        cursor = self._cursors.get(key, 0)
        self._cursors[key] = (cursor + 1) % len(decomposition.reassemblies)
        return decomposition.reassemblies[cursor]

    def _no_match(self) -> str:
        entry = self._memory.pop()
        if entry is not None:
            logger.debug(f"Recalled from memory: {entry!r}")
            return entry

        defaults = self._rules.defaults
        reply = defaults[self._default_cursor]
        self._default_cursor = (self._default_cursor + 1) % len(defaults)
        return reply

    def __repr__(self) -> str:
        return (
            f"ResponderEngine(rules={self._rules!r}, turns={self._turns}, "
            f"memory={len(self._memory)}/{self._memory.capacity})"
        )
