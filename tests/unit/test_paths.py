"""Tests for path normalization and list helpers."""

import pytest

from beadlink.correlation.paths import append_unique, compile_glob, normalize_path


class TestNormalizePath:
    """Test normalize_path."""

    def test_strips_leading_dot_slash_and_trailing_slash(self):
        assert normalize_path("./a/b/") == "a/b"

    def test_converts_backslashes(self):
        assert normalize_path("a\\b") == "a/b"

    def test_backslash_dot_prefix(self):
        assert normalize_path(".\\src\\auth.py") == "src/auth.py"

    def test_plain_path_unchanged(self):
        assert normalize_path("src/auth.py") == "src/auth.py"

    @pytest.mark.parametrize(
        "path",
        ["./a/b/", "a\\b", "././x//", ".//a", "a/./", ".", "", "/abs/path/", ".\\.\\x\\"],
    )
    def test_idempotent(self, path):
        once = normalize_path(path)
        assert normalize_path(once) == once


class TestAppendUnique:
    """Test append_unique."""

    def test_append_to_empty(self):
        assert append_unique([], "a") == ["a"]

    def test_append_new_element(self):
        items = ["a", "b"]
        result = append_unique(items, "c")
        assert result == ["a", "b", "c"]
        assert items == ["a", "b"]

    def test_append_duplicate(self):
        result = append_unique(["a", "b"], "a")
        assert len(result) == 2
        assert result == ["a", "b"]


class TestCompileGlob:
    """Test glob compilation."""

    def test_star_does_not_cross_separator(self):
        matcher = compile_glob("src/*.py")
        assert matcher.fullmatch("src/auth.py")
        assert not matcher.fullmatch("src/sub/auth.py")

    def test_question_mark(self):
        matcher = compile_glob("a?.txt")
        assert matcher.fullmatch("ab.txt")
        assert not matcher.fullmatch("a/.txt")

    def test_character_class_and_range(self):
        matcher = compile_glob("file[0-9].md")
        assert matcher.fullmatch("file3.md")
        assert not matcher.fullmatch("filex.md")

    def test_negated_class(self):
        matcher = compile_glob("file[^0-9].md")
        assert matcher.fullmatch("filex.md")
        assert not matcher.fullmatch("file3.md")

    def test_negated_class_can_match_separator(self):
        matcher = compile_glob("src[^a]auth.py")
        assert matcher.fullmatch("src/auth.py")

    def test_bang_is_literal_in_class(self):
        matcher = compile_glob("file[!x].md")
        assert matcher.fullmatch("file!.md")
        assert matcher.fullmatch("filex.md")
        assert not matcher.fullmatch("filey.md")

    def test_escape(self):
        matcher = compile_glob("a\\*b")
        assert matcher.fullmatch("a*b")
        assert not matcher.fullmatch("axb")

    def test_regex_metacharacters_are_literal(self):
        matcher = compile_glob("pkg/a+b(c).go")
        assert matcher.fullmatch("pkg/a+b(c).go")

    @pytest.mark.parametrize("pattern", ["src/[abc", "trailing\\", "[]", "[z-a]"])
    def test_malformed_patterns(self, pattern):
        with pytest.raises(ValueError):
            compile_glob(pattern)
