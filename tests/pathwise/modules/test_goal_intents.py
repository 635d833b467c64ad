"""
Tests for goal wizard intent detection.

Covers:
- Goal-creation intent from free chat
- "Don't know" / suggestion / estimate replies
- Confirm allow-list and the fuzzy confirm detector
- Cancel and exit commands
"""

from __future__ import annotations

import pytest

from pathwise.modules.goal_intents import (
    is_affirmative,
    is_cancel,
    is_confirm,
    is_create_goal_intent,
    is_dont_know,
    is_exit_command,
    is_fuzzy_confirm,
    is_nothing,
    is_skip,
    is_suggestion_request,
    normalize,
)


class TestNormalize:
    def test_lowercases_and_strips_punctuation(self) -> None:
        assert normalize("  Confirm!! ") == "confirm"

    def test_unifies_apostrophes(self) -> None:
        assert normalize("I don’t know") == "i don't know"


class TestCreateGoalIntent:
    @pytest.mark.parametrize(
        "text",
        ["Create a goal", "I want to save for a car", "new goal please", "I'm planning to buy a house"],
    )
    def test_detected(self, text: str) -> None:
        assert is_create_goal_intent(text)

    @pytest.mark.parametrize("text", ["How am I doing?", "show my goals", "what's a good savings rate"])
    def test_not_detected(self, text: str) -> None:
        assert not is_create_goal_intent(text)


class TestDontKnow:
    @pytest.mark.parametrize("text", ["idk", "I don't know", "not sure yet", "no idea tbh", "Dunno"])
    def test_detected(self, text: str) -> None:
        assert is_dont_know(text)

    def test_date_is_not_dont_know(self) -> None:
        assert not is_dont_know("June 2027")

    def test_suggestion_request_is_whole_reply(self) -> None:
        assert is_suggestion_request("any ideas?")
        assert not is_suggestion_request("ideas for my trip fund")


class TestShortReplies:
    def test_affirmative(self) -> None:
        assert is_affirmative("Yes")
        assert is_affirmative("sounds good!")
        assert not is_affirmative("yes but lower")

    def test_skip(self) -> None:
        assert is_skip("skip")
        assert is_skip("No")
        assert not is_skip("200")

    def test_nothing(self) -> None:
        assert is_nothing("nothing")
        assert is_nothing("Zero")
        assert not is_nothing("0")


class TestFuzzyConfirm:
    """is_fuzzy_confirm: any word starting 'confir', or >=5 shared letters in the first word."""

    @pytest.mark.parametrize(
        "text",
        ["confirm", "confirmed", "confirn", "CONFIRM!", "comfirm", "cnofirm", "confrim", "onfirm", "vonfirm", "fonfirm"],
    )
    def test_typos_accepted(self, text: str) -> None:
        assert is_fuzzy_confirm(text)

    @pytest.mark.parametrize("text", ["confirm please", "yes confirm", "confirm it", "Yes, confirm!", "ok confirmed"])
    def test_confirm_inside_longer_reply(self, text: str) -> None:
        assert is_fuzzy_confirm(text)

    def test_misspelt_first_word_with_trailing_words(self) -> None:
        assert is_fuzzy_confirm("comfirm pls")

    @pytest.mark.parametrize(
        "text",
        [
            "cancel",                # too few shared letters
            "conformations",         # too long
            "name is uniform fund",  # overlap only counts for the first word
            "target is 5000",
            "",
        ],
    )
    def test_rejected(self, text: str) -> None:
        assert not is_fuzzy_confirm(text)

    def test_is_confirm_combines_allow_list_and_fuzzy(self) -> None:
        assert is_confirm("looks good")
        assert is_confirm("yes")
        assert is_confirm("comfirm")
        assert is_confirm("confirm please")
        assert not is_confirm("target is 5000")


class TestCancel:
    @pytest.mark.parametrize("text", ["cancel", "Please cancel it", "stop", "abort!", "no"])
    def test_cancel(self, text: str) -> None:
        assert is_cancel(text)

    def test_no_inside_sentence_is_not_cancel(self) -> None:
        assert not is_cancel("no wait, target is 4000")

    def test_exit_commands_are_exact(self) -> None:
        assert is_exit_command("quit")
        assert is_exit_command("Exit.")
        assert not is_exit_command("stop the deadline at june")
