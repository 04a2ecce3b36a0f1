"""Tests for commit classification and bump calculation."""

from __future__ import annotations

import pytest

from release_flow.config.models import Convention, ConventionConfig
from release_flow.core.commits import (
    OTHER_TYPE,
    RawCommit,
    calculate_bump,
    classify,
    classify_commit,
    filter_skip_release_commits,
    format_commit_for_changelog,
    get_breaking_changes,
    group_commits_by_section,
    parse_commits,
)
from release_flow.core.version import BumpType


class TestClassify:
    """Tests for classify()."""

    def test_simple_feat(self):
        """Parse a simple feat commit."""
        result = classify("feat: add new feature")

        assert result.type == "feat"
        assert result.scope == ""
        assert result.description == "add new feature"
        assert not result.is_breaking

    def test_with_scope(self):
        """Parse commit with scope."""
        result = classify("fix(api): handle null response")

        assert result.type == "fix"
        assert result.scope == "api"
        assert result.description == "handle null response"

    def test_breaking_with_exclamation(self):
        """The ! marker flags a breaking change."""
        result = classify("feat!: redesign API")

        assert result.is_breaking
        assert result.type == "feat"

    def test_breaking_with_scope_and_exclamation(self):
        """Scope and ! marker combine."""
        result = classify("feat(core)!: change config format")

        assert result.is_breaking
        assert result.scope == "core"
        assert result.description == "change config format"

    @pytest.mark.parametrize("marker", ["BREAKING CHANGE", "BREAKING-CHANGE"])
    def test_breaking_from_body(self, marker):
        """A BREAKING CHANGE footer in the body flags a breaking change."""
        result = classify("fix: tweak parser", f"Details.\n\n{marker}: output differs")

        assert result.is_breaking
        assert result.type == "fix"

    def test_body_marker_is_case_sensitive(self):
        """A lowercase marker in the body is not a breaking footer."""
        assert not classify("fix: tweak", "breaking change in wording only").is_breaking

    def test_body_marker_applies_to_unmatched_subject(self):
        """The body check runs even when the subject does not match."""
        result = classify("Update stuff", "BREAKING CHANGE: yes")

        assert result.type == OTHER_TYPE
        assert result.is_breaking

    def test_emoji_prefix_is_stripped(self):
        """Emoji-prefixed and plain subjects classify identically."""
        emoji = classify("📦 new: add X")
        plain = classify("new: add X")

        assert (emoji.type, emoji.description) == ("new", "add X")
        assert (plain.type, plain.description) == ("new", "add X")

    def test_multiple_leading_symbols_are_stripped(self):
        """The whole non-letter prefix is removed, not just one character."""
        result = classify("🚀✨ - feat: launch")

        assert result.type == "feat"
        assert result.description == "launch"

    def test_clean_commit_scope_after_space(self):
        """Clean Commit puts a space between type and scope."""
        result = classify("🔧 update (deps): bump httpx")

        assert result.type == "update"
        assert result.scope == "deps"
        assert result.description == "bump httpx"

    def test_non_matching_subject(self):
        """Free-form subjects fall back to type 'other' with the original text."""
        result = classify("Merge stuff from the branch")

        assert result.type == OTHER_TYPE
        assert result.scope == ""
        assert result.description == "Merge stuff from the branch"
        assert not result.is_breaking

    def test_non_matching_keeps_uncleaned_subject(self):
        """The description of an 'other' commit keeps the emoji prefix."""
        assert classify("🎉 Initial commit").description == "🎉 Initial commit"

    def test_only_symbols(self):
        """A subject with no letters at all is 'other'."""
        result = classify("🎉🎉 123")

        assert result.type == OTHER_TYPE
        assert result.description == "🎉🎉 123"

    def test_uppercase_type_does_not_match(self):
        """Types must be lowercase."""
        assert classify("Feat: add thing").type == OTHER_TYPE

    def test_missing_space_after_colon_does_not_match(self):
        """The header needs ': ' between type and description."""
        assert classify("feat:add thing").type == OTHER_TYPE

    def test_idempotent(self):
        """Classifying the same message twice gives equal results."""
        assert classify("feat(x)!: y", "body") == classify("feat(x)!: y", "body")


class TestClassifyCommit:
    """Tests for classify_commit() and parse_commits()."""

    def test_assigns_section(self, convention):
        """A classified commit carries its changelog section."""
        commit = classify_commit(RawCommit("a" * 40, "feat: add auth"), convention)

        assert commit.section == "Added"
        assert commit.subject == "feat: add auth"

    def test_excluded_type_has_no_section(self, convention):
        """docs commits are left out of the changelog by default."""
        commit = classify_commit(RawCommit("a" * 40, "docs: fix typo"), convention)

        assert commit.section == ""

    def test_other_has_no_section(self, convention):
        """Unmatched commits never reach a section."""
        commit = classify_commit(RawCommit("a" * 40, "random message"), convention)

        assert commit.type == OTHER_TYPE
        assert commit.section == ""

    def test_breaking_goes_to_changed(self, convention):
        """A breaking feat is filed under Changed."""
        commit = classify_commit(RawCommit("a" * 40, "feat!: new api"), convention)

        assert commit.section == "Changed"

    def test_changed_files_are_kept(self, convention):
        """Changed files are carried over for routing."""
        raw = RawCommit("a" * 40, "fix: x", changed_files=("packages/a/x.py",))

        assert classify_commit(raw, convention).changed_files == ("packages/a/x.py",)

    def test_parse_commits_preserves_order(self, convention):
        """parse_commits keeps input order."""
        raws = [RawCommit(f"{i:040x}", f"fix: item {i}") for i in range(5)]

        parsed = parse_commits(raws, convention)

        assert [c.description for c in parsed] == [f"item {i}" for i in range(5)]

    def test_to_dict(self, make_commit):
        """to_dict exposes the formatted description."""
        data = make_commit("feat(api)!: drop v1", sha="b" * 40).to_dict()

        assert data == {
            "sha": "b" * 40,
            "type": "feat",
            "scope": "api",
            "section": "Changed",
            "description": "**BREAKING:** drop v1",
        }


class TestFilterSkipReleaseCommits:
    """Tests for filter_skip_release_commits()."""

    def test_filters_marked_commits(self):
        """Commits carrying a marker are dropped."""
        commits = [
            RawCommit("1" * 40, "feat: keep me"),
            RawCommit("2" * 40, "chore: bump [skip release]"),
            RawCommit("3" * 40, "fix: hidden", "[no release]"),
        ]

        kept = filter_skip_release_commits(commits, ["[skip release]", "[no release]"])

        assert [c.subject for c in kept] == ["feat: keep me"]

    def test_case_insensitive(self):
        """Markers match regardless of case."""
        commits = [RawCommit("1" * 40, "fix: x [SKIP RELEASE]")]

        assert filter_skip_release_commits(commits, ["[skip release]"]) == []

    def test_no_patterns(self):
        """Without patterns every commit is kept."""
        commits = [RawCommit("1" * 40, "fix: x [skip release]")]

        assert filter_skip_release_commits(commits, []) == commits


class TestCalculateBump:
    """Tests for calculate_bump()."""

    def test_empty(self, convention):
        """No commits means no bump."""
        assert calculate_bump([], convention) == BumpType.NONE

    def test_patch(self, convention, fix_commit):
        """fix gives a patch bump."""
        assert calculate_bump([fix_commit], convention) == BumpType.PATCH

    def test_minor(self, convention, feat_commit, fix_commit):
        """feat outranks fix."""
        assert calculate_bump([fix_commit, feat_commit], convention) == BumpType.MINOR

    def test_breaking_marker(self, convention, breaking_commit, fix_commit):
        """The ! marker forces major."""
        assert calculate_bump([fix_commit, breaking_commit], convention) == BumpType.MAJOR

    def test_breaking_body_overrides_patch_type(self, convention, make_commit):
        """A fix with a BREAKING CHANGE footer is major."""
        commit = make_commit("fix: change output", "BREAKING CHANGE: new format")

        assert calculate_bump([commit], convention) == BumpType.MAJOR

    def test_major_keyword_anywhere(self, convention, make_commit):
        """A major keyword anywhere in the message forces major."""
        commit = make_commit("chore: this is breaking for plugins")

        assert calculate_bump([commit], convention) == BumpType.MAJOR

    def test_excluded_and_unknown_types(self, convention, make_commit):
        """Types outside every keyword list do not bump."""
        commits = [make_commit("docs: readme"), make_commit("random words")]

        assert calculate_bump(commits, convention) == BumpType.NONE

    def test_chore_is_patch_only_in_clean_commit(self, make_commit):
        """chore is a patch type in Clean Commit, not in Conventional Commits."""
        commit = make_commit("🔧 chore: tidy")

        assert calculate_bump([commit], ConventionConfig()) == BumpType.NONE
        clean = ConventionConfig(convention=Convention.CLEAN_COMMIT)
        assert calculate_bump([commit], clean) == BumpType.PATCH

    def test_custom_keywords(self, make_commit):
        """Configured keyword lists replace the defaults."""
        config = ConventionConfig(minor_keywords=["perf"], patch_keywords=["docs"])

        assert calculate_bump([make_commit("perf: faster")], config) == BumpType.MINOR
        assert calculate_bump([make_commit("docs: more")], config) == BumpType.PATCH

    def test_monotonic(self, convention, make_commit):
        """Adding commits never lowers the bump."""
        commits = [
            make_commit("docs: a"),
            make_commit("fix: b"),
            make_commit("feat: c"),
            make_commit("fix!: d"),
        ]
        bumps = [calculate_bump(commits[: i + 1], convention) for i in range(len(commits))]

        assert bumps == sorted(bumps)
        assert bumps[-1] == BumpType.MAJOR


class TestHelpers:
    """Tests for grouping and formatting helpers."""

    def test_get_breaking_changes(self, feat_commit, breaking_commit):
        """Only breaking commits are returned."""
        assert get_breaking_changes([feat_commit, breaking_commit]) == [breaking_commit]

    def test_group_by_section(self, make_commit):
        """Commits are grouped by section and excluded ones dropped."""
        feat = make_commit("feat: a")
        fix = make_commit("fix: b")
        docs = make_commit("docs: c")

        grouped = group_commits_by_section([feat, docs, fix])

        assert grouped == {"Added": [feat], "Fixed": [fix]}

    def test_format_plain(self, feat_commit):
        """Plain items are just the description."""
        assert format_commit_for_changelog(feat_commit) == "add auth"

    def test_format_breaking(self, breaking_commit):
        """Breaking items carry a bold marker."""
        assert format_commit_for_changelog(breaking_commit) == "**BREAKING:** drop v1 endpoints"

    def test_format_scope_and_sha(self, make_commit):
        """Scope and short SHA can be included."""
        commit = make_commit("fix(db): close pool", sha="abcdef1234" + "0" * 30)

        text = format_commit_for_changelog(commit, include_scope=True, include_sha=True)

        assert text == "**db:** close pool (abcdef1)"
