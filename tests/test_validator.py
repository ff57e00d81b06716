import json
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from find_words_game.services import Reason, WordDictionary, WordValidator


def test_validate_ordering(validator):
    letters = list("CABXXXXXX")
    too_short = validator.validate("ZZ", letters, min_length=3)
    assert too_short.reason is Reason.TOO_SHORT
    assert too_short.message == "Word must be at least 3 letters long"

    cannot = validator.validate("CAT", letters, min_length=3)
    assert cannot.reason is Reason.CANNOT_FORM
    assert cannot.message == "Cannot form word with available letters"

    unknown = validator.validate("BAX", letters, min_length=3)
    assert unknown.reason is Reason.NOT_A_WORD
    assert unknown.message == "Word not found in dictionary"

    assert validator.validate("cab", letters, min_length=3).valid is True


def test_can_form_word_respects_multiplicity(validator):
    assert validator.can_form_word("TAT", list("TAX")) is False
    assert validator.can_form_word("TAT", list("TATX")) is True
    assert validator.can_form_word("", list("TAT")) is False


def test_is_valid_case_insensitive(validator):
    assert validator.is_valid("Cab")
    assert not validator.is_valid("")
    assert not validator.is_valid("zzz")


def test_find_possible_words(validator):
    words = validator.find_possible_words(list("CABST"), min_length=4)
    assert words == {"CABS", "SCAB", "BATS", "TABS", "STAB", "ACTS", "CAST"}


def test_hints_are_deterministic(validator):
    hints = validator.get_hints(list("CABST"), ["cab"], max_hints=4)
    assert hints == ["ACT", "BAT", "CAT", "TAB"]
    assert validator.get_hints(list("CABST"), [], max_hints=0) == []


def test_dictionary_from_jsonl(tmp_path):
    path = tmp_path / "words.jsonl"
    lines = [json.dumps({"word": "apple"}), "not json", json.dumps({"word": "pear"}), json.dumps({"word": "x-ray"})]
    path.write_text("\n".join(lines), encoding="utf-8")
    dictionary = WordDictionary.from_file(path)
    assert len(dictionary) == 2
    assert list(dictionary) == ["APPLE", "PEAR"]
    assert "apple" in dictionary


def test_dictionary_from_plain_text(tmp_path):
    path = tmp_path / "words.txt"
    path.write_text("dog\ncat\n\n", encoding="utf-8")
    assert WordDictionary.from_file(path).contains("DOG")


def test_dictionary_missing_file(tmp_path, caplog):
    dictionary = WordDictionary.from_file(tmp_path / "absent.jsonl")
    assert len(dictionary) == 0
    assert "does not exist" in caplog.text


def test_default_dictionary_loads():
    dictionary = WordDictionary.load_default()
    assert dictionary.contains("cab")
    assert WordValidator(dictionary).is_valid("CAT")
