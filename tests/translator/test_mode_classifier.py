"""Tests for translator/mode_classifier.py — rule precedence and skill resolution."""

import pytest

from translator.mode_classifier import (
    CLASSIFICATION_RULES,
    classify,
    find_mentioned_skill,
    resolve_skill,
    skill_name_variants,
)
from translator.models import DispatchMode, Skill

CATALOG = [
    Skill("wingman", "Draft emails.", "~/skills/wingman/SKILL.md"),
    Skill("deploy-helper", "Ship builds.", "~/skills/deploy/SKILL.md"),
    Skill("claude-code-reviewer", "Review diffs.", "~/skills/review/SKILL.md"),
]


# ---------------------------------------------------------------------------
# Skill name resolution
# ---------------------------------------------------------------------------


class TestSkillNameVariants:
    def test_all_variants(self):
        assert skill_name_variants("Deploy-Helper") == ["deploy-helper", "deployhelper", "deploy helper"]

    def test_vendor_prefix_stripped(self):
        assert "reviewer" in skill_name_variants("claude-code-reviewer")


class TestResolveSkill:
    def test_exact(self):
        assert resolve_skill("wingman", CATALOG).name == "wingman"

    def test_hyphen_stripped(self):
        assert resolve_skill("deployhelper", CATALOG).name == "deploy-helper"

    def test_vendor_prefix_form(self):
        assert resolve_skill("reviewer", CATALOG).name == "claude-code-reviewer"

    def test_typo_matches_on_four_char_prefix(self):
        assert resolve_skill("wingmand", CATALOG).name == "wingman"

    def test_abbreviation_matches_catalog_name(self):
        assert resolve_skill("win", CATALOG).name == "wingman"

    def test_short_catalog_name_matches_longer_request(self):
        catalog = [Skill("gh", "GitHub helper.", "~/skills/gh/SKILL.md")]
        assert resolve_skill("ghost", catalog).name == "gh"

    def test_abbreviation_tie_goes_to_first_catalog_entry(self):
        catalog = [Skill("wingman", "", "a"), Skill("windows-setup", "", "b")]
        assert resolve_skill("win", catalog).name == "wingman"

    def test_no_match(self):
        assert resolve_skill("calendar", CATALOG) is None

    def test_tie_goes_to_first_catalog_entry(self):
        catalog = [Skill("deploy-prod", "", "a"), Skill("deploy-staging", "", "b")]
        assert resolve_skill("deployx", catalog).name == "deploy-prod"


class TestFindMentionedSkill:
    def test_use_x_skill(self):
        assert find_mentioned_skill("please use wingman skill now", CATALOG).name == "wingman"

    def test_x_skill_to(self):
        assert find_mentioned_skill("deploy-helper skill to push", CATALOG).name == "deploy-helper"

    def test_use_x_to(self):
        assert find_mentioned_skill("use wingman to reply to Bob", CATALOG).name == "wingman"

    def test_use_x_to_with_unknown_name(self):
        assert find_mentioned_skill("use python to parse this", CATALOG) is None

    def test_empty_catalog(self):
        assert find_mentioned_skill("use wingman skill", []) is None


# ---------------------------------------------------------------------------
# classify
# ---------------------------------------------------------------------------


class TestClassify:
    def test_fix_login_bug_is_coding(self):
        assert classify("fix the login bug").mode == DispatchMode.CODING

    def test_greeting_with_question_is_conversational(self):
        result = classify("hey, what's up?")
        assert result.mode == DispatchMode.CONVERSATIONAL
        assert result.rule == "greeting"

    def test_skill_invocation(self):
        result = classify("use deploy-helper skill to ship this", CATALOG)
        assert result.mode == DispatchMode.SKILL
        assert result.skill.name == "deploy-helper"

    def test_skill_beats_coding(self):
        result = classify("use wingman skill to fix the email file", CATALOG)
        assert result.mode == DispatchMode.SKILL

    def test_unresolved_skill_falls_through(self):
        result = classify("use calendar skill to book lunch", CATALOG)
        assert result.mode != DispatchMode.SKILL
        assert result.skill is None

    def test_coding_checked_before_trailing_question_mark(self):
        assert classify("fix login bug?").mode == DispatchMode.CODING

    def test_backticks_are_coding(self):
        assert classify("why does `foo()` hang").mode == DispatchMode.CODING

    def test_thanks_is_conversational(self):
        assert classify("thanks!").mode == DispatchMode.CONVERSATIONAL

    def test_short_fallback_is_conversational(self):
        result = classify("the weather looks lovely")
        assert result.mode == DispatchMode.CONVERSATIONAL
        assert result.rule == "short_message"

    def test_long_fallback_is_coding(self):
        text = "please look into the quarterly numbers and summarise everything for the team " * 2
        result = classify(text)
        assert result.mode == DispatchMode.CODING
        assert result.rule == "long_message"

    def test_short_text_mentioning_code_is_coding(self):
        result = classify("look at my codes")
        assert result.mode == DispatchMode.CODING

    @pytest.mark.parametrize("rule", CLASSIFICATION_RULES, ids=lambda r: r.name)
    def test_rule_table_modes_are_not_skill(self, rule):
        assert rule.mode in (DispatchMode.CODING, DispatchMode.CONVERSATIONAL)

    def test_coding_rules_precede_conversational_rules(self):
        modes = [rule.mode for rule in CLASSIFICATION_RULES]
        last_coding = max(i for i, m in enumerate(modes) if m == DispatchMode.CODING)
        first_chat = min(i for i, m in enumerate(modes) if m == DispatchMode.CONVERSATIONAL)
        assert last_coding < first_chat
