from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Any, Optional

import pytest

from app.client.controller import (
    ALPHABET_MISSING,
    LOAD_ALPHABETS_FAILED,
    LOAD_LETTERS_FAILED,
    NO_LETTERS_TO_PRACTICE,
    PROGRESS_NOT_SAVED,
    START_PRACTICE_FAILED,
    TIMEOUT_MESSAGE,
    SessionController,
    View,
)
from app.client.fallback import BuiltinFallbackData, EmptyFallbackData
from app.core.errors import NotFoundError, TransportFailure
from app.modules.alphabets.models import (
    AlphabetRead,
    AlphabetType,
    LetterRead,
    PracticeSessionRead,
    SessionType,
)

NOW = datetime(2025, 1, 1, 12, 0)


def make_alphabet(id: int = 10, type: AlphabetType = AlphabetType.POLISH) -> AlphabetRead:
    return AlphabetRead(
        id=id, type=type, name=f"{type.value} alphabet", description=None,
        total_letters=32, created_at=NOW,
    )


def make_letters(alphabet_id: int, glyphs: str) -> list[LetterRead]:
    return [
        LetterRead(
            id=alphabet_id * 100 + i, alphabet_id=alphabet_id, letter=g, name=g,
            order_position=i + 1, created_at=NOW,
        )
        for i, g in enumerate(glyphs)
    ]


class FakeApi:
    """In-memory backend double; each attribute can be a value or an exception."""

    def __init__(self) -> None:
        self.alphabets: Any = [make_alphabet()]
        self.letters: dict[int, Any] = {10: make_letters(10, "ABĆ")}
        self.sampled: dict[int, Any] = {}
        self.create_error: Optional[Exception] = None
        self.update_error: Optional[Exception] = None
        self.sessions: dict[int, PracticeSessionRead] = {}
        self.updates: list[tuple[int, dict]] = []
        self.gate: Optional[asyncio.Event] = None
        self.entered = asyncio.Event()
        self.delay = 0.0

    async def _wait(self) -> None:
        self.entered.set()
        if self.gate is not None:
            await self.gate.wait()
        if self.delay:
            await asyncio.sleep(self.delay)

    @staticmethod
    def _result(value):
        if isinstance(value, Exception):
            raise value
        return value

    async def list_alphabets(self):
        await self._wait()
        return self._result(self.alphabets)

    async def list_letters_by_alphabet(self, alphabet_id):
        await self._wait()
        return self._result(self.letters.get(alphabet_id, []))

    async def sample_letters(self, alphabet_id):
        await self._wait()
        value = self.sampled.get(alphabet_id)
        if value is None:
            value = list(reversed(self.letters.get(alphabet_id, [])))
        return self._result(value)

    async def create_session(self, alphabet_id, session_type, total_cards):
        await self._wait()
        if self.create_error is not None:
            raise self.create_error
        session = PracticeSessionRead(
            id=len(self.sessions) + 1, alphabet_id=alphabet_id,
            session_type=SessionType(session_type), total_cards=total_cards,
            started_at=NOW,
        )
        self.sessions[session.id] = session
        return session

    async def update_session(self, session_id, **changes):
        self.updates.append((session_id, changes))
        if self.update_error is not None:
            raise self.update_error
        current = self.sessions.get(session_id)
        if current is None:
            return None
        updated = current.model_copy(update=changes)
        self.sessions[session_id] = updated
        return updated


@pytest.fixture
def api() -> FakeApi:
    return FakeApi()


@pytest.fixture
def ctrl(api) -> SessionController:
    return SessionController(api, BuiltinFallbackData(), timeout=0.5, answer_delay=0)


async def open_letters(ctrl: SessionController) -> None:
    await ctrl.load_alphabets()
    await ctrl.select_alphabet(ctrl.alphabets[0])


# -- alphabets ---------------------------------------------------------------


async def test_load_alphabets_replaces_fallback(ctrl, api):
    await ctrl.load_alphabets()

    assert ctrl.alphabets == api.alphabets
    assert not ctrl.using_fallback
    assert ctrl.error is None


async def test_empty_alphabet_result_keeps_fallback(ctrl, api):
    api.alphabets = []
    await ctrl.load_alphabets()

    assert [a.type for a in ctrl.alphabets] == [
        AlphabetType.FRENCH, AlphabetType.GERMAN, AlphabetType.HEBREW, AlphabetType.GEORGIAN,
    ]
    assert ctrl.using_fallback
    assert ctrl.error is None


async def test_unreachable_backend_shows_fallback_with_error(ctrl, api):
    api.alphabets = TransportFailure("connection refused")
    await ctrl.load_alphabets()

    assert len(ctrl.alphabets) == 4
    assert ctrl.using_fallback
    assert ctrl.error == LOAD_ALPHABETS_FAILED


async def test_timeout_keeps_previous_successful_load(ctrl, api):
    await ctrl.load_alphabets()
    loaded = list(ctrl.alphabets)

    api.delay = 5
    ctrl.timeout = 0.01
    await ctrl.retry()

    assert ctrl.error == TIMEOUT_MESSAGE
    assert ctrl.alphabets == loaded
    assert not ctrl.using_fallback
    assert not ctrl.is_loading


async def test_retry_clears_error_after_recovery(ctrl, api):
    api.alphabets = TransportFailure("down")
    await ctrl.load_alphabets()
    assert ctrl.error is not None

    api.alphabets = [make_alphabet()]
    await ctrl.retry()

    assert ctrl.error is None
    assert not ctrl.using_fallback


async def test_empty_fallback_provider(api):
    api.alphabets = TransportFailure("down")
    ctrl = SessionController(api, EmptyFallbackData(), timeout=0.5, answer_delay=0)
    await ctrl.load_alphabets()

    assert ctrl.alphabets == []
    assert not ctrl.using_fallback
    assert ctrl.error == LOAD_ALPHABETS_FAILED


# -- letters -----------------------------------------------------------------


async def test_select_alphabet_loads_letters(ctrl, api):
    await open_letters(ctrl)

    assert ctrl.view == View.LETTERS
    assert ctrl.selected_alphabet.id == 10
    assert [l.letter for l in ctrl.letters] == ["A", "B", "Ć"]
    assert not ctrl.using_fallback


async def test_letter_failure_uses_fixture_letters(ctrl, api):
    api.alphabets = [make_alphabet(id=3, type=AlphabetType.HEBREW)]
    api.letters[3] = TransportFailure("down")
    await open_letters(ctrl)

    assert [l.name for l in ctrl.letters] == ["Aleph", "Bet", "Gimel"]
    assert ctrl.using_fallback
    assert ctrl.error == LOAD_LETTERS_FAILED


async def test_letter_retry_failure_keeps_server_letters(ctrl, api):
    await open_letters(ctrl)
    loaded = list(ctrl.letters)

    api.letters[10] = TransportFailure("down")
    await ctrl.retry()

    assert ctrl.letters == loaded
    assert not ctrl.using_fallback
    assert ctrl.error == LOAD_LETTERS_FAILED


async def test_empty_letter_result_uses_fixture_letters(ctrl, api):
    api.alphabets = [make_alphabet(id=1, type=AlphabetType.FRENCH)]
    await open_letters(ctrl)

    assert [l.letter for l in ctrl.letters] == ["A", "B", "C"]
    assert ctrl.using_fallback
    assert ctrl.error is None


async def test_stale_letter_result_is_dropped(ctrl, api):
    await ctrl.load_alphabets()
    api.gate = asyncio.Event()
    api.entered.clear()

    task = asyncio.create_task(ctrl.select_alphabet(ctrl.alphabets[0]))
    await api.entered.wait()
    assert ctrl.is_loading

    ctrl.go_back()
    api.gate.set()
    await task

    assert ctrl.view == View.ALPHABETS
    assert ctrl.letters == []
    assert ctrl.selected_alphabet is None
    assert not ctrl.is_loading


async def test_letter_detail_and_back(ctrl):
    await open_letters(ctrl)
    letter = ctrl.letters[1]

    ctrl.select_letter(letter)
    assert ctrl.view == View.LETTER_DETAIL
    assert ctrl.selected_letter == letter

    ctrl.go_back()
    assert ctrl.view == View.LETTERS
    assert ctrl.selected_letter is None
    assert len(ctrl.letters) == 3

    ctrl.go_back()
    assert ctrl.view == View.ALPHABETS
    assert ctrl.selected_alphabet is None
    assert ctrl.letters == []


async def test_invalid_transitions_raise(ctrl):
    with pytest.raises(RuntimeError):
        ctrl.select_letter(make_letters(10, "A")[0])
    with pytest.raises(RuntimeError):
        await ctrl.start_practice()


# -- practice ----------------------------------------------------------------


async def test_practice_round_reports_progress(ctrl, api):
    await open_letters(ctrl)
    await ctrl.start_practice()

    assert ctrl.view == View.PRACTICE
    session = ctrl.current_session
    assert session is not None
    assert session.total_cards == 3
    assert [l.letter for l in ctrl.practice_letters] == ["Ć", "B", "A"]
    assert ctrl.current_letter.letter == "Ć"
    assert not ctrl.show_answer

    ctrl.reveal_answer()
    assert ctrl.show_answer
    assert await ctrl.answer(True) is None
    assert ctrl.current_index == 1
    assert not ctrl.show_answer

    assert await ctrl.answer(False) is None
    summary = await ctrl.answer(True)

    assert summary is not None
    assert (summary.correct, summary.total) == (2, 3)
    assert summary.session_id == session.id
    assert summary.saved
    assert ctrl.notice == "Practice completed! Score: 2/3"
    assert ctrl.view == View.LETTERS
    assert ctrl.current_session is None

    counts = [(c["completed_cards"], c["correct_answers"]) for _, c in api.updates]
    assert counts == [(1, 1), (2, 1), (3, 2)]
    assert "completed_at" not in api.updates[0][1]
    assert api.updates[-1][1]["completed_at"] is not None
    assert api.sessions[session.id].completed_at is not None


async def test_practice_walks_full_sample_after_letter_fallback(ctrl, api):
    api.alphabets = [make_alphabet(id=1, type=AlphabetType.FRENCH)]
    api.letters[1] = TransportFailure("blip")
    await open_letters(ctrl)
    assert len(ctrl.letters) == 3
    assert ctrl.using_fallback

    api.sampled[1] = make_letters(1, "FEDCBA")
    await ctrl.start_practice()

    assert [l.letter for l in ctrl.practice_letters] == list("FEDCBA")
    assert ctrl.current_session.total_cards == 6
    assert not ctrl.using_fallback


async def test_unfinished_round_summary_is_not_saved(ctrl, api):
    await open_letters(ctrl)
    await ctrl.start_practice()
    api.update_error = TransportFailure("down")

    for _ in range(2):
        await ctrl.answer(True)
    summary = await ctrl.answer(True)

    assert summary.session_id is not None
    assert not summary.saved


async def test_empty_sample_uses_fixtures_without_session(ctrl, api):
    api.alphabets = [make_alphabet(id=3, type=AlphabetType.HEBREW)]
    await open_letters(ctrl)
    api.sampled[3] = []

    await ctrl.start_practice()

    assert ctrl.view == View.PRACTICE
    assert ctrl.current_session is None
    assert ctrl.using_fallback
    assert [l.name for l in ctrl.practice_letters] == ["Aleph", "Bet", "Gimel"]
    assert api.sessions == {}


async def test_empty_sample_without_fixtures_stays_on_letters(ctrl, api):
    await open_letters(ctrl)
    api.sampled[10] = []

    await ctrl.start_practice()

    assert ctrl.view == View.LETTERS
    assert ctrl.error == NO_LETTERS_TO_PRACTICE
    assert ctrl.practice_letters == []
    assert api.sessions == {}


async def test_stale_practice_start_is_dropped(ctrl, api):
    await open_letters(ctrl)
    api.gate = asyncio.Event()
    api.entered.clear()

    task = asyncio.create_task(ctrl.start_practice())
    await api.entered.wait()
    ctrl.select_letter(ctrl.letters[0])
    ctrl.go_back()
    api.gate.set()
    await task

    assert ctrl.view == View.LETTERS
    assert ctrl.practice_letters == []
    assert ctrl.current_session is None
    assert not ctrl.is_loading


async def test_practice_with_missing_alphabet(ctrl, api):
    api.alphabets = [make_alphabet(id=2, type=AlphabetType.GERMAN)]
    await open_letters(ctrl)
    api.sampled[2] = make_letters(2, "ABC")
    api.create_error = NotFoundError("alphabet", 2)

    await ctrl.start_practice()

    assert ctrl.error == ALPHABET_MISSING
    assert ctrl.view == View.PRACTICE
    assert ctrl.current_session is None
    assert ctrl.using_fallback
    assert [l.letter for l in ctrl.practice_letters] == ["A", "Ä", "B"]

    await ctrl.answer(True)
    assert api.updates == []


async def test_practice_start_failure_without_fixtures_stays_on_letters(ctrl, api):
    await open_letters(ctrl)
    api.create_error = TransportFailure("down")

    await ctrl.start_practice()

    assert ctrl.view == View.LETTERS
    assert ctrl.error == START_PRACTICE_FAILED


async def test_practice_start_timeout_message(ctrl, api):
    api.alphabets = [make_alphabet(id=4, type=AlphabetType.GEORGIAN)]
    await open_letters(ctrl)
    ctrl.timeout = 0.01
    api.delay = 5

    await ctrl.start_practice()

    assert ctrl.error == TIMEOUT_MESSAGE
    assert ctrl.view == View.PRACTICE
    assert len(ctrl.practice_letters) == 3


async def test_progress_failure_does_not_stop_practice(ctrl, api):
    await open_letters(ctrl)
    await ctrl.start_practice()
    api.update_error = TransportFailure("down")

    await ctrl.answer(True)

    assert ctrl.error == PROGRESS_NOT_SAVED
    assert ctrl.current_index == 1
    assert ctrl.stats.total == 1


async def test_answers_ignored_while_pending(api):
    ctrl = SessionController(api, BuiltinFallbackData(), timeout=0.5, answer_delay=0.05)
    await open_letters(ctrl)
    await ctrl.start_practice()

    await asyncio.gather(ctrl.answer(True), ctrl.answer(True))

    assert ctrl.stats.total == 1
    assert ctrl.current_index == 1


async def test_back_during_answer_delay_discards_session(api):
    ctrl = SessionController(api, BuiltinFallbackData(), timeout=0.5, answer_delay=0.05)
    await open_letters(ctrl)
    await ctrl.start_practice()

    task = asyncio.create_task(ctrl.answer(True))
    await asyncio.sleep(0)
    ctrl.go_back()

    assert await task is None
    assert ctrl.view == View.LETTERS
    assert ctrl.current_session is None
    assert ctrl.practice_letters == []


async def test_reveal_toggles(ctrl):
    await open_letters(ctrl)
    await ctrl.start_practice()

    ctrl.reveal_answer()
    ctrl.reveal_answer()
    assert not ctrl.show_answer
