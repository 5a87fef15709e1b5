"""Tests for text normalization and keyword matching."""

from idea_advisor.text import jaccard, mentions, text_similarity, tokenize


class TestTokenize:
    def test_lowercases_and_dedupes(self):
        assert tokenize("Smart  smart PARKING\tapp") == {"smart", "parking", "app"}

    def test_empty_and_none(self):
        assert tokenize("") == set()
        assert tokenize(None) == set()
        assert tokenize("   ") == set()

    def test_punctuation_is_kept(self):
        """No stemming or punctuation stripping: 'app.' and 'app' differ."""
        assert tokenize("app. app") == {"app.", "app"}


class TestJaccard:
    def test_identical(self):
        assert text_similarity("machine learning app", "app learning machine") == 1.0

    def test_disjoint(self):
        assert text_similarity("parking finder", "clinic booking") == 0.0

    def test_both_empty_is_zero(self):
        assert jaccard(set(), set()) == 0.0
        assert text_similarity("", "") == 0.0

    def test_partial_overlap(self):
        # {a, b} vs {b, c}: 1 shared of 3
        assert jaccard({"a", "b"}, {"b", "c"}) == 1 / 3

    def test_symmetric(self):
        a, b = "student study groups app", "study app for clinics"
        assert text_similarity(a, b) == text_similarity(b, a)


class TestMentions:
    def test_keywords_match_inside_words(self):
        assert mentions("OpenAI", ("ai",))
        assert mentions("FastAPI", ("api",))
        assert mentions("REST APIs", ("api",))
        assert mentions("HTML", ("ml",))

    def test_long_keywords_match_substrings(self):
        assert mentions("Node.js", ("node",))
        assert mentions("TensorFlow 2", ("tensorflow",))

    def test_case_insensitive(self):
        assert mentions("React Native", ("REACT",))
        assert not mentions("Django", ("react", "vue"))
