import json
import logging
import os
from datetime import timedelta
from typing import Any, Callable, Dict, Optional

from fastapi import FastAPI, HTTPException, Request, Response
from fastapi.responses import JSONResponse

from find_words_game.config import COMBO_TIME_LIMIT_SECONDS, DICTIONARY_PATH, STATE_PATH
from find_words_game.services import Reason, WordDictionary, WordValidator
from find_words_game.services import engine
from find_words_game.services.definitions import DefinitionService
from find_words_game.services.high_scores import get_top_scores, sort_by_score
from find_words_game.services.stats import collect_game_stats, format_stats_message
from find_words_game.state import Difficulty, GameSession
from find_words_game.state.manager import GameStateManager, LiveGame
from find_words_game.state.serialization import (
    combo_statistics_to_dict,
    combo_to_dict,
    enum_index,
    high_score_to_dict,
    session_to_dict,
    settings_from_dict,
    word_to_dict,
)
from find_words_game.state.storage import SnapshotStorage
from shared.logging_utils import configure_logging

configure_logging(extra_values=[os.environ.get("OPENAI_API_KEY")])
logger = logging.getLogger(__name__)

app = FastAPI()

DICTIONARY = WordDictionary.load_default(DICTIONARY_PATH)
VALIDATOR = WordValidator(DICTIONARY)
DEFINITIONS = DefinitionService.with_default_providers()
STATE_MANAGER = GameStateManager(
    SnapshotStorage(STATE_PATH),
    combo_time_limit=timedelta(seconds=COMBO_TIME_LIMIT_SECONDS),
)


async def _read_payload(request: Request) -> Dict[str, Any]:
    body = await request.body()
    if not body:
        return {}
    try:
        payload = json.loads(body)
    except ValueError as exc:
        logger.warning("Rejected malformed request body on %s: %s", request.url.path, exc)
        raise HTTPException(status_code=400, detail="Body must be valid JSON") from exc
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="Body must be a JSON object")
    return payload


def _parse_difficulty(raw: Any) -> Difficulty:
    if isinstance(raw, str):
        try:
            return Difficulty(raw.lower())
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=f"Unknown difficulty: {raw}") from exc
    if isinstance(raw, int) and 0 <= raw < len(Difficulty):
        return list(Difficulty)[raw]
    raise HTTPException(status_code=422, detail=f"Unknown difficulty: {raw}")


def _is_tile(letter: Any) -> bool:
    return isinstance(letter, str) and len(letter) == 1 and letter.isascii() and letter.isalpha()


def _require_game(game_id: str) -> LiveGame:
    live = STATE_MANAGER.get(game_id)
    if live is None:
        raise HTTPException(status_code=404, detail="Game not found")
    return live


def _game_response(session: GameSession, **extra: Any) -> JSONResponse:
    payload = {"game": session_to_dict(session), "totalScore": session.total_score}
    payload.update(extra)
    return JSONResponse(payload)


async def _apply(game_id: str, operation: Callable[[LiveGame], GameSession]) -> JSONResponse:
    live = _require_game(game_id)
    async with live.lock:
        session = STATE_MANAGER.save(live, operation(live))
    return _game_response(session)


@app.post("/games")
async def create_game(request: Request) -> JSONResponse:
    payload = await _read_payload(request)
    settings = None
    if payload:
        raw_settings = dict(payload.get("settings") or {})
        if "difficulty" in payload:
            raw_settings["difficulty"] = payload["difficulty"]
        if "difficulty" in raw_settings:
            raw_settings["difficulty"] = enum_index(_parse_difficulty(raw_settings["difficulty"]))
        if raw_settings:
            settings = settings_from_dict(raw_settings)
    letters = payload.get("letters")
    if letters is not None and (not isinstance(letters, list) or not all(_is_tile(letter) for letter in letters)):
        raise HTTPException(status_code=422, detail="letters must be a list of single ASCII letters")
    live = STATE_MANAGER.create_game(settings, letters=letters)
    return _game_response(live.session)


@app.get("/games/{game_id}")
async def get_game(game_id: str) -> JSONResponse:
    live = _require_game(game_id)
    combo = live.combo.current_combo
    return _game_response(live.session, combo=combo_to_dict(combo) if combo else None)


@app.delete("/games/{game_id}")
async def delete_game(game_id: str) -> Response:
    live = _require_game(game_id)
    async with live.lock:
        STATE_MANAGER.drop_game(game_id)
    return Response(status_code=204)


@app.post("/games/{game_id}/start")
async def start_game(game_id: str) -> JSONResponse:
    return await _apply(game_id, lambda live: engine.start_game(live.session))


@app.post("/games/{game_id}/pause")
async def pause_game(game_id: str) -> JSONResponse:
    return await _apply(game_id, lambda live: engine.pause_game(live.session))


@app.post("/games/{game_id}/resume")
async def resume_game(game_id: str) -> JSONResponse:
    return await _apply(game_id, lambda live: engine.resume_game(live.session))


@app.post("/games/{game_id}/end")
async def end_game(game_id: str) -> JSONResponse:
    return await _apply(game_id, lambda live: engine.end_game(live.session, combo=live.combo))


@app.post("/games/{game_id}/tick")
async def tick(game_id: str, request: Request) -> JSONResponse:
    payload = await _read_payload(request)
    remaining = payload.get("timeRemaining")
    if remaining is not None and not isinstance(remaining, int):
        raise HTTPException(status_code=422, detail="timeRemaining must be an integer")

    def operation(live: LiveGame) -> GameSession:
        live.combo.check_expiry()
        if remaining is None:
            return engine.tick(live.session, combo=live.combo)
        return engine.update_timer(live.session, remaining, combo=live.combo)

    return await _apply(game_id, operation)


@app.post("/games/{game_id}/select")
async def select_letter(game_id: str, request: Request) -> JSONResponse:
    payload = await _read_payload(request)
    index = payload.get("index")
    if not isinstance(index, int):
        raise HTTPException(status_code=422, detail="index must be an integer")
    return await _apply(game_id, lambda live: engine.select_letter(live.session, index))


@app.post("/games/{game_id}/deselect")
async def deselect_letter(game_id: str) -> JSONResponse:
    return await _apply(game_id, lambda live: engine.deselect_last_letter(live.session))


@app.post("/games/{game_id}/clear")
async def clear_selection(game_id: str) -> JSONResponse:
    return await _apply(game_id, lambda live: engine.clear_selection(live.session))


@app.post("/games/{game_id}/submit")
async def submit_word(game_id: str, request: Request) -> JSONResponse:
    payload = await _read_payload(request)
    live = _require_game(game_id)
    async with live.lock:
        session = live.session
        word = payload.get("word")
        if isinstance(word, str) and word.strip():
            selected = engine.select_word(session, word)
            if selected is None:
                validation = VALIDATOR.validate(
                    word.strip().upper(), session.letters, session.settings.difficulty.min_word_length
                )
                reason = validation.reason or Reason.CANNOT_FORM
                session = STATE_MANAGER.save(live, engine.clear_selection(session))
                return _game_response(
                    session,
                    success=False,
                    message=validation.message or "Cannot form word with available letters",
                    reason=reason.value,
                    word=None,
                    combo=None,
                    events=[{"kind": engine.EventKind.ERROR.value, "value": 0, "detail": reason.value}],
                )
            session = selected
        result = engine.commit_word(session, VALIDATOR, combo=live.combo)
        session = STATE_MANAGER.save(live, result.session)

    found = result.word
    if result.success and found is not None:
        # The word is already saved; the lookup must not hold the game lock.
        enriched = await engine.lookup_definition(
            found,
            session.settings,
            definitions=DEFINITIONS,
            learned_words=STATE_MANAGER.storage,
        )
        if enriched is not None:
            found = enriched
            async with live.lock:
                session = live.session
                updated = engine.attach_definition(session, enriched)
                if updated is not session and STATE_MANAGER.get(game_id) is live:
                    session = STATE_MANAGER.save(live, updated)
    return _game_response(
        session,
        success=result.success,
        message=result.message,
        reason=result.reason.value if result.reason else None,
        word=word_to_dict(found) if found else None,
        combo=combo_to_dict(result.combo) if result.combo else None,
        events=[{"kind": event.kind.value, "value": event.value, "detail": event.detail} for event in result.events],
    )


@app.get("/games/{game_id}/hints")
async def get_hints(game_id: str, limit: int = 3) -> JSONResponse:
    live = _require_game(game_id)
    if not live.session.settings.show_hints:
        return JSONResponse({"hints": []})
    return JSONResponse({"hints": engine.get_hints(live.session, VALIDATOR, max_hints=max(limit, 0))})


@app.get("/games/{game_id}/stats")
async def get_stats(game_id: str) -> JSONResponse:
    live = _require_game(game_id)
    stats = collect_game_stats(live.session)
    return JSONResponse(
        {
            "totalWords": stats.total_words,
            "totalScore": stats.total_score,
            "longestWord": stats.longest_word,
            "averageWordLength": stats.average_word_length,
            "wordsByLength": {str(length): count for length, count in stats.words_by_length.items()},
            "timeElapsed": stats.time_elapsed,
            "duration": stats.duration_text,
            "wordsPerMinute": stats.words_per_minute,
            "combo": combo_statistics_to_dict(live.combo.statistics()),
            "summary": format_stats_message(stats),
        }
    )


@app.get("/high_scores")
async def list_high_scores(difficulty: Optional[str] = None) -> JSONResponse:
    scores = STATE_MANAGER.high_scores()
    if difficulty is not None:
        scores = get_top_scores(scores, _parse_difficulty(difficulty))
    else:
        scores = sort_by_score(scores)
    return JSONResponse(
        {"scores": [{**high_score_to_dict(score), "duration": score.formatted_duration} for score in scores]}
    )


@app.get("/")
async def root() -> JSONResponse:
    return JSONResponse({"message": "Find Words service. See /healthz for status."})


@app.get("/healthz")
async def healthz_get():
    return {"status": "ok"}


@app.head("/healthz", include_in_schema=False)
async def healthz_head():
    return Response(status_code=200)
