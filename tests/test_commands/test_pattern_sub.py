"""Tests for pattern substitution.

Key areas: ${var/pattern/replacement}, ${var//pattern/replacement} (global),
           glob patterns in substitution, separator escaping
"""

import pytest
from just_env import GlobError, ParseError, RegexError, SubstitutionError, parse


class TestPatternSubstitutionBasic:
    """Basic pattern substitution ${var/pattern/replacement}."""

    def test_simple_replacement(self):
        """Simple pattern replacement."""
        result = parse('''
var="hello world"
out="${var/world/universe}"
''')
        assert result["out"] == "hello universe"

    def test_first_occurrence_only(self):
        """Single slash replaces first occurrence only."""
        result = parse('''
var="hello hello hello"
out="${var/hello/hi}"
''')
        assert result["out"] == "hi hello hello"

    def test_no_match(self):
        """No replacement when pattern doesn't match."""
        result = parse('''
var="hello world"
out="${var/xyz/abc}"
''')
        assert result["out"] == "hello world"

    def test_empty_replacement(self):
        """Delete match with empty replacement."""
        result = parse('''
var="hello world"
out="${var/ world/}"
''')
        assert result["out"] == "hello"

    def test_unquoted_value(self):
        result = parse("A=foo\nB=${A/foo/bar}")
        assert result == {"A": "foo", "B": "bar"}


class TestGlobalReplacement:
    """Global pattern substitution ${var//pattern/replacement}."""

    def test_global_replace_all(self):
        """Double slash replaces all occurrences."""
        result = parse('''
var="hello hello hello"
out="${var//hello/hi}"
''')
        assert result["out"] == "hi hi hi"

    def test_global_with_spaces(self):
        """Global replacement of spaces."""
        result = parse('''
var="a b c d"
out="${var// /-}"
''')
        assert result["out"] == "a-b-c-d"

    def test_global_single_char(self):
        """Global replacement of single character."""
        result = parse('''
var="banana"
out="${var//a/o}"
''')
        assert result["out"] == "bonono"

    def test_global_non_overlapping(self):
        result = parse("var=aaaa; out=${var//aa/b}")
        assert result["out"] == "bb"

    def test_global_no_match(self):
        result = parse("var=hello; out=${var//z/Z}")
        assert result["out"] == "hello"


class TestGlobPatterns:
    """Test glob patterns in substitution."""

    def test_star_pattern(self):
        """Greedy match, removes up to last _."""
        result = parse('''
var="hello_world_test"
out="${var/*_/}"
''')
        assert result["out"] == "test"

    def test_star_suffix(self):
        result = parse("name=archive.tar.gz; base=${name/.*/}")
        assert result["base"] == "archive"

    def test_question_pattern(self):
        """Glob ? in pattern."""
        result = parse('''
var="cat"
out="${var/?at/ot}"
''')
        assert result["out"] == "ot"

    def test_bracket_pattern(self):
        """Glob [] in pattern."""
        result = parse('''
var="cat"
out="${var/[a-z]at/ot}"
''')
        assert result["out"] == "ot"

    def test_negated_bracket_global(self):
        result = parse("var=a1b2c3; out=${var//[!0-9]/_}")
        assert result["out"] == "_1_2_3"

    def test_posix_class(self):
        result = parse("var=abc123; out=${var//[[:digit:]]/#}")
        assert result["out"] == "abc###"

    def test_star_replace_all_whole_value(self):
        result = parse("var=abc; out=${var//*/X}")
        assert result["out"] == "X"

    def test_regex_metacharacters_are_literal(self):
        result = parse("var=a.b.c; out=${var//./+}")
        assert result["out"] == "a+b+c"

    def test_pattern_from_variable(self):
        """Unquoted variable in the pattern keeps its wildcards active."""
        result = parse("var=hello; pat='l*'; out=${var/$pat/p}")
        assert result["out"] == "hep"


class TestSeparatorEscaping:
    """The first unescaped '/' splits pattern and replacement."""

    def test_escaped_slash_in_pattern(self):
        result = parse(r"path=a/b/c; out=${path/\//_}")
        assert result["out"] == "a_b/c"

    def test_escaped_slash_global(self):
        result = parse(r"path=a/b/c; out=${path//\//_}")
        assert result["out"] == "a_b_c"

    def test_quoted_slash_in_pattern(self):
        result = parse('path=a/b/c; out=${path//"/"/:}')
        assert result["out"] == "a:b:c"

    def test_slash_in_replacement(self):
        """Later slashes belong to the replacement."""
        result = parse("path=a_b; out=${path/_//}")
        assert result["out"] == "a/b"

    def test_escaped_wildcard_is_literal(self):
        result = parse(r"var='a*b'; out=${var/\*/x}")
        assert result["out"] == "axb"

    def test_quoted_wildcard_is_literal(self):
        result = parse("var='a*b*'; out=${var//'*'/x}")
        assert result["out"] == "axbx"

    def test_quoted_variable_in_pattern_is_literal(self):
        result = parse('''var='a*b'; pat='*'; out=${var/"$pat"/x}''')
        assert result["out"] == "axb"


class TestMultibyteValues:
    """Operators count characters, not bytes."""

    def test_substring(self):
        result = parse("A=héllo日; B=${A:1:2}")
        assert result["B"] == "él"

    def test_substring_from_end(self):
        result = parse("A=héllo日; B=${A: -1}")
        assert result["B"] == "日"

    def test_question_matches_one_character(self):
        result = parse("A=héllo日; B=${A//?/x}")
        assert result["B"] == "xxxxxx"

    def test_glob_across_multibyte(self):
        result = parse("A=héllo日; B=${A/é*/Z}")
        assert result["B"] == "hZ"

    def test_multibyte_pattern_and_replacement(self):
        result = parse("A=日本日; B=${A//日/ü}")
        assert result["B"] == "ü本ü"


class TestSubstitutionErrors:
    """Malformed substitutions fail with a positioned error."""

    def test_missing_separator(self):
        with pytest.raises(ParseError) as exc_info:
            parse("var=hello; out=${var/hello}")
        assert isinstance(exc_info.value.error, SubstitutionError)
        assert "separator" in exc_info.value.reason

    def test_unterminated_bracket(self):
        with pytest.raises(ParseError) as exc_info:
            parse("var=hello; out=${var/[a/x}")
        assert isinstance(exc_info.value.error, GlobError)
        assert str(exc_info.value).startswith("Glob translation error at line 1")

    def test_reversed_range(self):
        with pytest.raises(ParseError) as exc_info:
            parse("var=hello; out=${var/[z-a]/x}")
        assert isinstance(exc_info.value.error, RegexError)
        assert exc_info.value.reason.startswith("Syntax error:")

    def test_assignments_before_failure_are_kept(self):
        context = {}
        with pytest.raises(ParseError):
            parse("A=1\nB=${A/1}\nC=3", context)
        assert context == {"A": "1"}
