"""Unit tests for prompters."""

from unittest.mock import MagicMock, patch

import pytest

from kubeprime_cli.prompts import BatchPrompter, QuestionaryPrompter, make_prompter


@pytest.mark.cli_unit
class TestBatchPrompter:
    """Tests for BatchPrompter."""

    def test_select_default(self):
        assert BatchPrompter().select("Pick", ["a", "b"], default="b") == "b"

    def test_select_first_without_default(self):
        assert BatchPrompter().select("Pick", ["a", "b"]) == "a"

    def test_select_no_choices(self):
        assert BatchPrompter().select("Pick", []) == ""

    def test_text_and_confirm_defaults(self):
        prompter = BatchPrompter()
        assert prompter.text("Domain", default="x.nip.io") == "x.nip.io"
        assert prompter.confirm("Install?", default=False) is False


@pytest.mark.cli_unit
class TestQuestionaryPrompter:
    """Tests for QuestionaryPrompter."""

    def test_cancel_raises_keyboard_interrupt(self):
        with patch("questionary.select") as mock_select:
            mock_select.return_value = MagicMock(ask=MagicMock(return_value=None))
            with pytest.raises(KeyboardInterrupt):
                QuestionaryPrompter().select("Pick", ["a", "b"])

    def test_unknown_default_dropped(self):
        with patch("questionary.select") as mock_select:
            mock_select.return_value = MagicMock(ask=MagicMock(return_value="a"))
            QuestionaryPrompter().select("Pick", ["a", "b"], default="zzz")

        assert mock_select.call_args.kwargs["default"] is None

    def test_text_stripped(self):
        with patch("questionary.text") as mock_text:
            mock_text.return_value = MagicMock(ask=MagicMock(return_value="  gke  "))
            assert QuestionaryPrompter().text("Provider") == "gke"


@pytest.mark.cli_unit
def test_make_prompter():
    assert make_prompter(True).interactive is False
    assert make_prompter(False).interactive is True
