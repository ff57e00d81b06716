import sys
from datetime import timedelta
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from find_words_game.services.stats import collect_game_stats, format_stats_message
from find_words_game.state import GameSession, GameSettings, GameState, Word


def _session(t0, words, end_offset):
    return GameSession(
        id="game_stats",
        letters=tuple("CABTSXXXX"),
        settings=GameSettings(),
        start_time=t0,
        state=GameState.FINISHED,
        time_remaining=0,
        found_words=tuple(words),
        end_time=t0 + timedelta(seconds=end_offset),
    )


def test_collect_game_stats(t0):
    words = [
        Word(text="CAB", score=10, found_at=t0, letter_indices=(0, 1, 2)),
        Word(text="STAB", score=20, found_at=t0, letter_indices=(4, 3, 1, 2)),
        Word(text="BAT", score=10, found_at=t0, letter_indices=(2, 1, 3)),
    ]
    stats = collect_game_stats(_session(t0, words, 125))
    assert stats.total_words == 3
    assert stats.total_score == 40
    assert stats.longest_word == "STAB"
    assert stats.average_word_length == 10 / 3
    assert stats.words_by_length == {3: 2, 4: 1}
    assert stats.time_elapsed == 125
    assert stats.duration_text == "02:05"
    assert stats.words_per_minute == 1.5

    message = format_stats_message(stats)
    assert "Words found: 3" in message
    assert "By length: 3: 2, 4: 1" in message


def test_stats_for_short_empty_game(t0):
    stats = collect_game_stats(_session(t0, [], 30))
    assert stats.words_per_minute == 0.0
    assert stats.average_word_length == 0.0
    assert stats.longest_word == ""
    assert "Longest word: -" in format_stats_message(stats)
