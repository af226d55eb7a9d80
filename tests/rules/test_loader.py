"""
Tests for rule table loading and validation.
"""

import json

import pytest

from eliza.rules.loader import (
    RuleConfigError,
    load_default_rules,
    load_rules,
    parse_pattern,
    parse_rules,
)
from eliza.rules.types import Defer, Literal, Redirect, RuleSet, SynonymGroup, Wildcard, Word


def _decomposition(table, word, index=0):
    rule = next(k for k in table["keywords"] if k["word"] == word)
    return rule["decompositions"][index]


class TestParsePattern:
    """Pattern string grammar."""

    def test_tokens(self):
        assert parse_pattern("* My @family *") == (
            Wildcard(),
            Word("my"),
            SynonymGroup("family"),
            Wildcard(),
        )

    def test_lone_at_sign_is_literal(self):
        assert parse_pattern("@") == (Word("@"),)


class TestParseRules:
    """Compiling a valid table."""

    def test_compiles_mini_table(self, mini_rules):
        assert set(mini_rules.keywords) == {
            "mother", "i", "my", "computer", "like", "sorry", "apologise", "secret",
        }
        assert mini_rules.keywords["mother"].rank == 3
        assert mini_rules.defaults == ("Please go on.", "Tell me more.", "I see.")
        assert mini_rules.quit_words == frozenset({"bye", "quit"})

    def test_reassembly_variants(self, mini_rules):
        my = mini_rules.keywords["my"].decompositions[0]
        apologise = mini_rules.keywords["apologise"].decompositions[0]

        assert my.reassemblies == (Defer("Earlier you said your {2}."), Literal("Your {2}?"))
        assert apologise.reassemblies == (Redirect("sorry"),)

    def test_capture_count(self, mini_rules):
        like = mini_rules.keywords["like"].decompositions[0]

        assert like.capture_count == 4

    def test_synonyms_resolve_to_canonical(self, mini_rules):
        assert mini_rules.canonical("unhappy") == "sad"
        assert mini_rules.canonical("table") == "table"
        assert mini_rules.in_group("father", "family")

    def test_rule_set_tables_are_read_only(self, mini_rules):
        with pytest.raises(TypeError):
            mini_rules.keywords["extra"] = mini_rules.keywords["mother"]
        with pytest.raises(TypeError):
            mini_rules.reflections["i"] = "me"
        with pytest.raises(TypeError):
            mini_rules.synonyms["sad"] = frozenset()

    def test_canonical_index_is_not_a_constructor_argument(self):
        with pytest.raises(TypeError):
            RuleSet(
                keywords={},
                synonyms={"sad": frozenset({"unhappy"})},
                reflections={},
                substitutions=(),
                defaults=("Go on.",),
                _canonical={"unhappy": "happy"},
            )

    def test_keyword_words_are_normalized(self, mini_table):
        mini_table["keywords"][0]["word"] = "  MOTHER "

        assert "mother" in parse_rules(mini_table).keywords

    def test_substitutions_longest_first(self, mini_table):
        mini_table["substitutions"] = {"i'm": "i am", "i'm not": "i am not"}

        rules = parse_rules(mini_table)

        assert rules.substitutions[0] == ("i'm not", "i am not")

    def test_optional_tables_default_empty(self):
        rules = parse_rules({
            "defaults": ["Go on."],
            "keywords": [{"word": "x", "decompositions": [{"pattern": "*", "reassemblies": ["X."]}]}],
        })

        assert rules.synonyms == {}
        assert rules.reflections == {}
        assert rules.greetings == ()


class TestConfigurationErrors:
    """Malformed tables fail at load time."""

    def test_placeholder_beyond_captures(self, mini_table):
        _decomposition(mini_table, "mother")["reassemblies"] = ["Your {3}?"]

        with pytest.raises(RuleConfigError, match=r"placeholder \{3\}"):
            parse_rules(mini_table)

    def test_placeholder_zero(self, mini_table):
        _decomposition(mini_table, "mother")["reassemblies"] = ["Your {0}?"]

        with pytest.raises(RuleConfigError, match="placeholder"):
            parse_rules(mini_table)

    def test_defer_placeholder_checked(self, mini_table):
        _decomposition(mini_table, "my")["reassemblies"] = [{"defer": "You said {5}."}]

        with pytest.raises(RuleConfigError, match="placeholder"):
            parse_rules(mini_table)

    def test_no_reassemblies(self, mini_table):
        _decomposition(mini_table, "mother")["reassemblies"] = []

        with pytest.raises(RuleConfigError, match="no reassemblies"):
            parse_rules(mini_table)

    def test_negative_rank(self, mini_table):
        mini_table["keywords"][0]["rank"] = -1

        with pytest.raises(RuleConfigError, match="negative rank"):
            parse_rules(mini_table)

    def test_unknown_synonym_class(self, mini_table):
        _decomposition(mini_table, "like")["pattern"] = "* @nothing *"

        with pytest.raises(RuleConfigError, match="unknown synonym class"):
            parse_rules(mini_table)

    def test_unknown_goto_target(self, mini_table):
        _decomposition(mini_table, "apologise")["reassemblies"] = [{"goto": "nowhere"}]

        with pytest.raises(RuleConfigError, match="goto target 'nowhere'"):
            parse_rules(mini_table)

    def test_empty_defaults(self, mini_table):
        mini_table["defaults"] = ["  "]

        with pytest.raises(RuleConfigError, match="default reply list is empty"):
            parse_rules(mini_table)

    def test_duplicate_keyword(self, mini_table):
        mini_table["keywords"].append(mini_table["keywords"][0])

        with pytest.raises(RuleConfigError, match="duplicate keyword 'mother'"):
            parse_rules(mini_table)

    def test_empty_pattern(self, mini_table):
        _decomposition(mini_table, "mother")["pattern"] = "   "

        with pytest.raises(RuleConfigError, match="empty pattern"):
            parse_rules(mini_table)

    def test_keyword_without_decompositions(self, mini_table):
        mini_table["keywords"][0]["decompositions"] = []

        with pytest.raises(RuleConfigError, match="no decompositions"):
            parse_rules(mini_table)

    def test_schema_errors_are_config_errors(self, mini_table):
        del mini_table["keywords"]

        with pytest.raises(RuleConfigError, match="keywords"):
            parse_rules(mini_table)

    def test_multi_word_keyword_rejected(self, mini_table):
        mini_table["keywords"][0]["word"] = "my mother"

        with pytest.raises(RuleConfigError):
            parse_rules(mini_table)

    def test_unknown_reassembly_shape_rejected(self, mini_table):
        _decomposition(mini_table, "mother")["reassemblies"] = [{"say": "hi"}]

        with pytest.raises(RuleConfigError):
            parse_rules(mini_table)

    def test_all_problems_reported(self, mini_table):
        mini_table["keywords"][0]["rank"] = -5
        mini_table["defaults"] = []
        _decomposition(mini_table, "apologise")["reassemblies"] = [{"goto": "nowhere"}]

        with pytest.raises(RuleConfigError) as exc_info:
            parse_rules(mini_table, source="broken.json")

        assert len(exc_info.value.problems) == 3
        assert exc_info.value.source == "broken.json"
        assert "broken.json" in str(exc_info.value)

    def test_error_is_a_value_error(self, mini_table):
        mini_table["defaults"] = []

        with pytest.raises(ValueError):
            parse_rules(mini_table)


class TestLoadRules:
    """Loading from disk."""

    def test_load_from_file(self, tmp_path, mini_table):
        path = tmp_path / "rules.json"
        path.write_text(json.dumps(mini_table), encoding="utf-8")

        rules = load_rules(path)

        assert "mother" in rules.keywords

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "rules.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(RuleConfigError, match="invalid JSON"):
            load_rules(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(OSError):
            load_rules(tmp_path / "missing.json")

    def test_bundled_rules_load(self):
        rules = load_default_rules()

        assert len(rules.keywords) > 20
        assert rules.greetings
        assert "bye" in rules.quit_words
