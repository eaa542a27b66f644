"""
Tests for pattern validation, rule-file parsing and rule-level matching
"""

import warnings
from pathlib import Path

import pathspec
import pytest

from rerun_except.ignore.constants import MAX_IGNORE_FILE_SIZE
from rerun_except.ignore.file_loader import IgnoreFileLoader, parse_rule_line
from rerun_except.ignore.rule_engine import (
    IgnoreRuleEngine,
    RuleLevel,
    RuleOrigin,
    RuleSection,
    find_unclosed_bracket,
    has_trailing_backslash,
    matches_entry,
)


@pytest.mark.parametrize("pattern", [
    "*.py",
    "!*.py",
    "target/",
    "/anchored.txt",
    "src/**/generated_*.rs",
    "file[0-9].txt",
    "[]abc].txt",
    "[!a].txt",
    "\\#not-a-comment",
    "trailing\\\\",
])
def test_valid_patterns(pattern):
    engine = IgnoreRuleEngine()
    is_valid, error = engine.validate_pattern(pattern)
    assert is_valid, error


@pytest.mark.parametrize("pattern,fragment", [
    ("src/[abc", "Unclosed"),
    ("**[unclosed", "Unclosed"),
    ("![oops", "Unclosed"),
    ("dangling\\", "backslash"),
    ("", "Empty"),
    ("!", "Empty"),
    ("   ", "Empty"),
])
def test_invalid_patterns(pattern, fragment):
    engine = IgnoreRuleEngine()
    is_valid, error = engine.validate_pattern(pattern)
    assert not is_valid
    assert fragment in error


def test_find_unclosed_bracket_offsets():
    assert find_unclosed_bracket("abc") is None
    assert find_unclosed_bracket("a[bc]d") is None
    assert find_unclosed_bracket("a\\[bc") is None
    assert find_unclosed_bracket("ab[c") == 2
    assert find_unclosed_bracket("[ok]x[bad") == 5


def test_has_trailing_backslash():
    assert has_trailing_backslash("a\\")
    assert not has_trailing_backslash("a\\\\")
    assert not has_trailing_backslash("a")


@pytest.mark.parametrize("line,expected", [
    ("*.log", "*.log"),
    ("*.log   ", "*.log"),
    ("*.log\t", "*.log"),
    ("name\\ ", "name\\ "),
    ("# comment", None),
    ("", None),
    ("    ", None),
    ("\\#hash", "\\#hash"),
    ("  leading", "  leading"),
    ("crlf\r\n", "crlf"),
])
def test_parse_rule_line(line, expected):
    assert parse_rule_line(line) == expected


def test_load_file_collects_rules_and_stats(tmp_path):
    rule_file = tmp_path / ".gitignore"
    rule_file.write_text("# build output\n\ntarget/\n*.log\n!keep.log\n")

    info = IgnoreFileLoader().load_file(rule_file)

    assert info.is_valid
    assert info.patterns == ["target/", "*.log", "!keep.log"]
    assert [r.line for r in info.rules] == [3, 4, 5]
    assert all(r.source == str(rule_file) for r in info.rules)
    assert info.stats == {
        'total_lines': 5,
        'empty_lines': 1,
        'comment_lines': 1,
        'pattern_lines': 3,
    }


def test_load_file_reports_bad_line(tmp_path):
    rule_file = tmp_path / ".gitignore"
    rule_file.write_text("ok.txt\n\nbad[pattern\n")

    info = IgnoreFileLoader().load_file(rule_file)

    assert not info.is_valid
    assert len(info.errors) == 1
    assert info.errors[0].line == 3
    assert info.errors[0].pattern == "bad[pattern"
    assert info.patterns == ["ok.txt"]


def test_load_file_handles_bom_and_crlf(tmp_path):
    rule_file = tmp_path / ".gitignore"
    rule_file.write_bytes(b"\xef\xbb\xbf*.tmp\r\nout/\r\n")

    info = IgnoreFileLoader().load_file(rule_file)

    assert info.patterns == ["*.tmp", "out/"]


def test_load_file_rejects_oversized_file(tmp_path):
    rule_file = tmp_path / ".gitignore"
    rule_file.write_text("a" * (MAX_IGNORE_FILE_SIZE + 1))

    info = IgnoreFileLoader().load_file(rule_file)

    assert info.errors[0].line == 0
    assert "too large" in info.errors[0].message


def test_load_file_rejects_undecodable_file(tmp_path):
    rule_file = tmp_path / ".gitignore"
    rule_file.write_bytes(b"\xff\xfe\xfa*.o\n")

    info = IgnoreFileLoader().load_file(rule_file)

    assert info.errors[0].line == 0
    assert "Error reading file" in info.errors[0].message


def test_load_missing_file(tmp_path):
    info = IgnoreFileLoader().load_file(tmp_path / "absent")
    assert not info.is_valid
    assert info.errors[0].line == 0


def test_broad_pattern_warning(tmp_path):
    rule_file = tmp_path / ".gitignore"
    rule_file.write_text("*\n")

    info = IgnoreFileLoader().load_file(rule_file)

    assert info.is_valid
    assert info.has_warnings


def _level(directory: Path, *sections):
    level = RuleLevel(directory=directory)
    for rank, source, patterns in sections:
        origins = [RuleOrigin(p, source, i + 1) for i, p in enumerate(patterns)]
        level.add_section(RuleSection(rank, source, origins))
    return level


def test_last_matching_line_wins_within_level():
    root = Path("/proj")
    levels = {root: _level(root, (1, "a", ["*.md", "!README.md"]))}
    engine = IgnoreRuleEngine()

    assert engine.match_path(root / "notes.md", False, levels, root).should_ignore
    result = engine.match_path(root / "README.md", False, levels, root)
    assert not result.should_ignore
    assert result.matched_pattern == "!README.md"
    assert result.line == 2


def test_deeper_level_wins():
    root = Path("/proj")
    sub = root / "sub"
    levels = {
        root: _level(root, (1, "root", ["*.log"])),
        sub: _level(sub, (1, "sub", ["!keep.log"])),
    }
    engine = IgnoreRuleEngine()

    assert engine.match_path(root / "x.log", False, levels, root).should_ignore
    assert engine.match_path(sub / "y.log", False, levels, root).should_ignore
    result = engine.match_path(sub / "keep.log", False, levels, root)
    assert not result.should_ignore
    assert result.rule_level == sub


def test_sections_ordered_by_rank():
    root = Path("/proj")
    level = _level(root, (1000, "caller", ["*.tmp"]), (1, "file", ["!*.tmp"]))
    engine = IgnoreRuleEngine()

    result = engine.match_path(root / "a.tmp", False, {root: level}, root)
    assert result.should_ignore
    assert result.source == "caller"


def test_replacing_a_section():
    root = Path("/proj")
    level = _level(root, (1, "file", ["*.tmp"]))
    level.add_section(RuleSection(1, "file", []))
    engine = IgnoreRuleEngine()

    assert not engine.match_path(root / "a.tmp", False, {root: level}, root).should_ignore


def test_directory_only_pattern():
    root = Path("/proj")
    levels = {root: _level(root, (1, "a", ["build/"]))}
    engine = IgnoreRuleEngine()

    assert engine.match_path(root / "build", True, levels, root).should_ignore
    assert not engine.match_path(root / "build", False, levels, root).should_ignore
    assert engine.match_path(root / "docs" / "build", True, levels, root).should_ignore


def test_anchored_pattern():
    root = Path("/proj")
    levels = {root: _level(root, (1, "a", ["/only_here.txt"]))}
    engine = IgnoreRuleEngine()

    assert engine.match_path(root / "only_here.txt", False, levels, root).should_ignore
    assert not engine.match_path(root / "sub" / "only_here.txt", False, levels, root).should_ignore


def test_effective_patterns_least_specific_first():
    root = Path("/proj")
    sub = root / "sub"
    levels = {
        root: _level(root, (1, "root", ["*.log"])),
        sub: _level(sub, (1, "sub", ["!keep.log"])),
    }
    engine = IgnoreRuleEngine()

    origins = engine.get_effective_patterns(sub / "keep.log", levels, root)
    assert [o.pattern for o in origins] == ["*.log", "!keep.log"]


@pytest.mark.parametrize("pattern,rel_path,is_dir,expected", [
    ("build/", "build", True, True),
    ("build/", "build/x.o", False, False),
    ("build/", "src/build", True, True),
    ("build", "build/sub", True, False),
    ("*/", "a/b", True, True),
    ("*/", "a/b.txt", False, False),
    ("*", "a/b.txt", False, True),
    ("*.txt", "x.txt/inner", False, False),
    ("vendor/**", "vendor", True, False),
    ("vendor/**", "vendor/lib.c", False, True),
    ("vendor/**", "vendor/sub", True, True),
])
def test_matches_entry_ignores_matches_through_parents(pattern, rel_path, is_dir, expected):
    compiled = pathspec.GitIgnoreSpec.from_lines([pattern]).patterns[0]
    assert matches_entry(compiled, rel_path, is_dir) is expected


def test_negated_directory_leaves_its_files_to_outer_rules():
    root = Path("/proj")
    sub = root / "sub"
    levels = {
        root: _level(root, (1, "root", ["*.txt"])),
        sub: _level(sub, (1, "sub", ["!keep/"])),
    }
    engine = IgnoreRuleEngine()

    assert not engine.match_path(sub / "keep", True, levels, root).should_ignore
    result = engine.match_path(sub / "keep" / "a.txt", False, levels, root)
    assert result.should_ignore
    assert result.source == "root"


def test_compiling_rules_raises_no_deprecation_warning():
    root = Path("/proj")
    levels = {root: _level(root, (1, "a", ["*.log", "!keep.log", "build/"]))}
    engine = IgnoreRuleEngine()

    with warnings.catch_warnings():
        warnings.simplefilter("error")
        assert engine.validate_pattern("*.log") == (True, None)
        assert engine.match_path(root / "x.log", False, levels, root).should_ignore
