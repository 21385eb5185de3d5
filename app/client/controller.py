"""View-state controller for the alphabet trainer client.

The controller owns what a front-end shows: which view is active, the data
behind it, the practice walkthrough and any recoverable error. It holds no
rendering code; the terminal front-end in app.client.cli and the tests drive
it through its async methods.

Views form a small tree::

    alphabets -> letters -> letter-detail
                         -> practice

Every navigation bumps a generation counter. A boundary call that resolves
after the user has moved on compares its starting generation with the
current one and drops its result instead of overwriting the newer view.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Optional, Protocol, TypeVar

from app.client.fallback import (
    FALLBACK_PRACTICE_SIZE,
    BuiltinFallbackData,
    FallbackDataProvider,
)
from app.core.config import settings
from app.core.errors import AlphabetAppError, NotFoundError, TransportFailure
from app.core.logging import get_logger
from app.modules.alphabets.models import (
    AlphabetRead,
    LetterRead,
    PracticeSessionRead,
    SessionType,
)


logger = get_logger(__name__)

T = TypeVar("T")

TIMEOUT_MESSAGE = (
    "Request timed out. Please check your internet connection or try again later."
)
LOAD_ALPHABETS_FAILED = (
    "Failed to load data. Please check your internet connection or try again later."
)
LOAD_LETTERS_FAILED = (
    "Failed to load letters. Please check your internet connection or try again later."
)
START_PRACTICE_FAILED = (
    "Failed to start practice session. "
    "Please check your internet connection or try again later."
)
ALPHABET_MISSING = (
    "This alphabet is not available on the server. Practicing with offline letters."
)
PROGRESS_NOT_SAVED = "Practice progress could not be saved."
NO_LETTERS_TO_PRACTICE = "This alphabet has no letters to practice yet."


class View(str, Enum):
    ALPHABETS = "alphabets"
    LETTERS = "letters"
    LETTER_DETAIL = "letter-detail"
    PRACTICE = "practice"


class AlphabetApi(Protocol):
    async def list_alphabets(self) -> list[AlphabetRead]: ...

    async def list_letters_by_alphabet(self, alphabet_id: int) -> list[LetterRead]: ...

    async def sample_letters(self, alphabet_id: int) -> list[LetterRead]: ...

    async def create_session(
        self, alphabet_id: int, session_type: SessionType, total_cards: int
    ) -> PracticeSessionRead: ...

    async def update_session(
        self, session_id: int, **changes: Any
    ) -> Optional[PracticeSessionRead]: ...


@dataclass(frozen=True)
class PracticeStats:
    correct: int = 0
    total: int = 0


@dataclass(frozen=True)
class PracticeSummary:
    correct: int
    total: int
    session_id: Optional[int] = None
    # The server acknowledged completed_at for this session
    saved: bool = False

    @property
    def message(self) -> str:
        return f"Practice completed! Score: {self.correct}/{self.total}"


class SessionController:
    def __init__(
        self,
        api: AlphabetApi,
        fallback: Optional[FallbackDataProvider] = None,
        *,
        timeout: Optional[float] = None,
        answer_delay: Optional[float] = None,
        session_type: SessionType | str | None = None,
    ) -> None:
        self.api = api
        self.fallback = fallback if fallback is not None else BuiltinFallbackData()
        self.timeout = timeout if timeout is not None else settings.client.timeout_seconds
        self.answer_delay = (
            answer_delay
            if answer_delay is not None
            else settings.client.answer_delay_seconds
        )
        self.session_type = SessionType(
            session_type or settings.client.practice_session_type
        )

        self.view = View.ALPHABETS
        self.selected_alphabet: Optional[AlphabetRead] = None
        self.selected_letter: Optional[LetterRead] = None
        self.current_session: Optional[PracticeSessionRead] = None
        self.error: Optional[str] = None
        self.notice: Optional[str] = None

        self.alphabets: list[AlphabetRead] = []
        self.letters: list[LetterRead] = []
        self.practice_letters: list[LetterRead] = []
        self.alphabets_from_fallback = False
        self.letters_from_fallback = False
        self.practice_from_fallback = False

        self.current_index = 0
        self.show_answer = False
        self.stats = PracticeStats()

        self._generation = 0
        self._pending = 0
        self._answer_pending = False

    # -- derived state -----------------------------------------------------

    @property
    def is_loading(self) -> bool:
        return self._pending > 0

    @property
    def using_fallback(self) -> bool:
        """Whether the data behind the current view is offline fixture data."""
        if self.view == View.ALPHABETS:
            return self.alphabets_from_fallback
        if self.view == View.PRACTICE:
            return self.practice_from_fallback
        return self.letters_from_fallback

    @property
    def current_letter(self) -> Optional[LetterRead]:
        if self.view != View.PRACTICE or not self.practice_letters:
            return None
        return self.practice_letters[self.current_index]

    # -- loading -----------------------------------------------------------

    async def load_alphabets(self) -> None:
        """Fetch the alphabet list, keeping fixture or earlier data on failure."""
        if not self.alphabets:
            self.alphabets = self.fallback.alphabets()
            self.alphabets_from_fallback = bool(self.alphabets)

        generation = self._generation
        self.error = None
        try:
            result = await self._call(self.api.list_alphabets())
        except AlphabetAppError as e:
            logger.warning("Failed to load alphabets: %s", e, extra={"view": self.view.value})
            if not self._is_stale(generation):
                self.error = _failure_message(e, LOAD_ALPHABETS_FAILED)
            return

        # The alphabet list does not depend on the view, so a late result is still applied
        if result:
            self.alphabets = result
            self.alphabets_from_fallback = False

    async def load_letters(self, alphabet_id: int) -> None:
        generation = self._generation
        self.error = None
        try:
            result = await self._call(self.api.list_letters_by_alphabet(alphabet_id))
        except AlphabetAppError as e:
            if self._is_stale(generation):
                logger.debug("Dropping stale letter failure for alphabet %s", alphabet_id)
                return
            logger.warning(
                "Failed to load letters: %s", e, extra={"alphabet_id": alphabet_id}
            )
            self.error = _failure_message(e, LOAD_LETTERS_FAILED)
            server_letters_loaded = (
                self.letters
                and not self.letters_from_fallback
                and self.letters[0].alphabet_id == alphabet_id
            )
            if not server_letters_loaded:
                self.letters = self.fallback.letters(alphabet_id)
                self.letters_from_fallback = bool(self.letters)
            return

        if self._is_stale(generation):
            logger.debug("Dropping stale letter list for alphabet %s", alphabet_id)
            return
        if result:
            self.letters = result
            self.letters_from_fallback = False
        else:
            self.letters = self.fallback.letters(alphabet_id)
            self.letters_from_fallback = bool(self.letters)

    async def retry(self) -> None:
        if self.view == View.ALPHABETS:
            await self.load_alphabets()
        elif self.view == View.LETTERS and self.selected_alphabet is not None:
            await self.load_letters(self.selected_alphabet.id)

    # -- navigation --------------------------------------------------------

    async def select_alphabet(self, alphabet: AlphabetRead) -> None:
        if self.view != View.ALPHABETS:
            raise RuntimeError(f"Cannot select an alphabet from the {self.view.value} view")
        self._navigate(View.LETTERS)
        self.selected_alphabet = alphabet
        self.letters = []
        self.letters_from_fallback = False
        await self.load_letters(alphabet.id)

    def select_letter(self, letter: LetterRead) -> None:
        if self.view != View.LETTERS:
            raise RuntimeError(f"Cannot select a letter from the {self.view.value} view")
        self._navigate(View.LETTER_DETAIL)
        self.selected_letter = letter

    def go_back(self) -> None:
        if self.view == View.LETTER_DETAIL:
            self._navigate(View.LETTERS)
            self.selected_letter = None
        elif self.view == View.LETTERS:
            self._navigate(View.ALPHABETS)
            self.selected_alphabet = None
            self.letters = []
            self.letters_from_fallback = False
        elif self.view == View.PRACTICE:
            # The server-side session is left as is
            self._navigate(View.LETTERS)
            self.current_session = None
            self.practice_letters = []
            self.practice_from_fallback = False
            self.current_index = 0
            self.show_answer = False
        else:
            return
        self.error = None

    # -- practice ----------------------------------------------------------

    async def start_practice(self) -> None:
        """Walk a shuffled copy of the whole alphabet under a new session.

        The session is sized from the shuffled letters, so the walk always
        covers every stored letter. Any failure falls back to the first few
        fixture letters without a server-side session.
        """
        if self.view != View.LETTERS or self.selected_alphabet is None:
            raise RuntimeError("Practice can only start from the letters view")
        alphabet = self.selected_alphabet
        generation = self._generation
        self.error = None

        self._pending += 1
        try:
            sampled = await self._call(self.api.sample_letters(alphabet.id))
            session: Optional[PracticeSessionRead] = None
            if sampled:
                session = await self._call(
                    self.api.create_session(alphabet.id, self.session_type, len(sampled))
                )
        except AlphabetAppError as e:
            if self._is_stale(generation):
                return
            logger.warning(
                "Failed to start practice: %s", e, extra={"alphabet_id": alphabet.id}
            )
            if isinstance(e, NotFoundError):
                self.error = ALPHABET_MISSING
            else:
                self.error = _failure_message(e, START_PRACTICE_FAILED)
            offline = self.fallback.letters(alphabet.id)[:FALLBACK_PRACTICE_SIZE]
            if offline:
                self._begin_practice(offline, session=None, from_fallback=True)
            return
        finally:
            self._pending -= 1

        if self._is_stale(generation):
            session_id = session.id if session is not None else "-"
            logger.debug(
                "Practice start superseded; session %s left unused",
                session_id,
                extra={"session_id": session_id},
            )
            return
        if session is not None:
            self._begin_practice(sampled, session=session, from_fallback=False)
            return

        offline = self.fallback.letters(alphabet.id)[:FALLBACK_PRACTICE_SIZE]
        if offline:
            logger.info(
                "No letters stored for alphabet %s; practicing offline",
                alphabet.id,
                extra={"alphabet_id": alphabet.id},
            )
            self._begin_practice(offline, session=None, from_fallback=True)
        else:
            self.error = NO_LETTERS_TO_PRACTICE

    def reveal_answer(self) -> None:
        if self.view == View.PRACTICE and self.practice_letters:
            self.show_answer = not self.show_answer

    async def answer(self, is_correct: bool) -> Optional[PracticeSummary]:
        """Score the current card.

        Returns a summary once the last card has been scored and the view is
        back on the letter list; None otherwise.
        """
        if self.view != View.PRACTICE or not self.practice_letters:
            return None
        if self._answer_pending:
            return None

        self._answer_pending = True
        generation = self._generation
        self.stats = PracticeStats(
            correct=self.stats.correct + (1 if is_correct else 0),
            total=self.stats.total + 1,
        )
        is_last = self.current_index >= len(self.practice_letters) - 1
        try:
            await asyncio.gather(
                self._report_progress(is_last),
                asyncio.sleep(self.answer_delay),
            )
        finally:
            self._answer_pending = False

        if self._is_stale(generation):
            return None
        if not is_last:
            self.current_index += 1
            self.show_answer = False
            return None

        session = self.current_session
        summary = PracticeSummary(
            correct=self.stats.correct,
            total=self.stats.total,
            session_id=session.id if session else None,
            saved=session is not None and session.is_completed,
        )
        logger.info(
            "Practice finished: %s", summary.message, extra={"session_id": summary.session_id or "-"}
        )
        self.go_back()
        self.notice = summary.message
        return summary

    # -- internals ---------------------------------------------------------

    def _begin_practice(
        self,
        letters: list[LetterRead],
        *,
        session: Optional[PracticeSessionRead],
        from_fallback: bool,
    ) -> None:
        self._navigate(View.PRACTICE)
        self.practice_letters = list(letters)
        self.current_session = session
        self.practice_from_fallback = from_fallback
        self.current_index = 0
        self.show_answer = False
        self.stats = PracticeStats()
        self.notice = None

    async def _report_progress(self, is_last: bool) -> None:
        session = self.current_session
        if session is None:
            return
        changes: dict[str, Any] = {
            "completed_cards": self.stats.total,
            "correct_answers": self.stats.correct,
        }
        if is_last:
            changes["completed_at"] = datetime.now(timezone.utc)
        try:
            updated = await self._call(self.api.update_session(session.id, **changes))
        except AlphabetAppError as e:
            logger.warning(
                "Could not save progress: %s", e, extra={"session_id": session.id}
            )
            if self.current_session is session:
                self.error = PROGRESS_NOT_SAVED
            return
        if updated is None:
            logger.warning(
                "Session %s no longer exists", session.id, extra={"session_id": session.id}
            )
        elif self.current_session is session:
            self.current_session = updated

    async def _call(self, awaitable: Awaitable[T]) -> T:
        self._pending += 1
        try:
            return await asyncio.wait_for(awaitable, timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise TransportFailure("Request timed out", timed_out=True) from e
        finally:
            self._pending -= 1

    def _navigate(self, view: View) -> None:
        self._generation += 1
        self.view = view
        self.notice = None

    def _is_stale(self, generation: int) -> bool:
        return generation != self._generation


def _failure_message(error: AlphabetAppError, default: str) -> str:
    if isinstance(error, TransportFailure) and error.timed_out:
        return TIMEOUT_MESSAGE
    return default
