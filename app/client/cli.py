from __future__ import annotations

import argparse
import asyncio

from app.client.api import AlphabetApiClient
from app.client.controller import SessionController, View
from app.core.errors import TransportFailure
from app.core.logging import setup_logging
from app.modules.alphabets.models import AlphabetRead, AlphabetType, LetterRead


class OfflineApi:
    """Stands in for the backend when it should not be contacted at all."""

    async def _fail(self, *args, **kwargs):
        raise TransportFailure("Offline mode")

    list_alphabets = _fail
    list_letters_by_alphabet = _fail
    sample_letters = _fail
    create_session = _fail
    update_session = _fail

    async def aclose(self) -> None:
        return None


def _print_status(ctrl: SessionController) -> None:
    if ctrl.error:
        print(f"! {ctrl.error}")
    if ctrl.using_fallback:
        print("! Showing fallback data due to connection issues. Some features may be limited.")


def _format_alphabet(a: AlphabetRead) -> str:
    desc = f" - {a.description}" if a.description else ""
    return f"[{a.type.value}] {a.name} ({a.total_letters} letters){desc}"


def _format_letter(letter: LetterRead) -> str:
    pron = f" {letter.pronunciation}" if letter.pronunciation else ""
    return f"{letter.order_position:>3}. {letter.letter}  {letter.name}{pron}"


async def _open_alphabet(ctrl: SessionController, alphabet_type: str) -> bool:
    await ctrl.load_alphabets()
    wanted = AlphabetType(alphabet_type)
    match = next((a for a in ctrl.alphabets if a.type == wanted), None)
    if match is None:
        _print_status(ctrl)
        print(f"No {wanted.value} alphabet available.")
        return False
    await ctrl.select_alphabet(match)
    return True


async def _ask(prompt: str) -> str:
    return (await asyncio.to_thread(input, prompt)).strip().lower()


async def _run_practice(ctrl: SessionController) -> int:
    await ctrl.start_practice()
    _print_status(ctrl)
    if ctrl.view != View.PRACTICE or not ctrl.practice_letters:
        print("No practice letters available.")
        return 1

    while ctrl.view == View.PRACTICE:
        letter = ctrl.current_letter
        if letter is None:
            break
        total = len(ctrl.practice_letters)
        print(
            f"\nCard {ctrl.current_index + 1} of {total}"
            f"  (score {ctrl.stats.correct}/{ctrl.stats.total})"
        )
        print(f"    {letter.letter}")
        reply = await _ask("What is this letter? [enter] show answer, q quit: ")
        if reply == "q":
            ctrl.go_back()
            print("Practice abandoned.")
            return 0
        ctrl.reveal_answer()
        print(f"  -> {letter.name}" + (f"  {letter.pronunciation}" if letter.pronunciation else ""))
        if letter.pronunciation_guide:
            print(f"     {letter.pronunciation_guide}")
        reply = await _ask("Did you get it right? [y/n]: ")
        summary = await ctrl.answer(reply.startswith("y"))
        if ctrl.error:
            print(f"! {ctrl.error}")
        if summary is not None:
            print(f"\n{summary.message}")
            if not summary.saved:
                print("(not saved to the server)")
    return 0


async def _run(args: argparse.Namespace) -> int:
    api = OfflineApi() if args.fallback_only else AlphabetApiClient(args.base_url)
    ctrl = SessionController(api, timeout=args.timeout, answer_delay=args.delay)
    try:
        if args.cmd == "alphabets":
            await ctrl.load_alphabets()
            _print_status(ctrl)
            for a in ctrl.alphabets:
                print(_format_alphabet(a))
            return 0
        if not await _open_alphabet(ctrl, args.type):
            return 1
        if args.cmd == "letters":
            _print_status(ctrl)
            if not ctrl.letters:
                print("No letters available for this alphabet.")
            for letter in ctrl.letters:
                print(_format_letter(letter))
            return 0
        if args.cmd == "practice":
            return await _run_practice(ctrl)
        return 2
    finally:
        await api.aclose()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="alphabet-trainer", description="Alphabet flashcards in the terminal"
    )
    parser.add_argument("--base-url", help="Backend URL (defaults to CLIENT_API_BASE_URL)")
    parser.add_argument(
        "--fallback-only",
        action="store_true",
        help="Do not contact the backend; use the built-in letters",
    )
    parser.add_argument("--timeout", type=float, default=None, help="Per-request timeout in seconds")
    parser.add_argument("--delay", type=float, default=None, help="Pause after each answer in seconds")
    parser.add_argument("--log-level", default="WARNING")
    sub = parser.add_subparsers(dest="cmd", required=True)

    sub.add_parser("alphabets", help="List available alphabets")

    types = [t.value for t in AlphabetType]
    lp = sub.add_parser("letters", help="List the letters of one alphabet")
    lp.add_argument("--type", "-t", required=True, choices=types)

    pp = sub.add_parser("practice", help="Run a flashcard round")
    pp.add_argument("--type", "-t", required=True, choices=types)

    args = parser.parse_args(argv)
    setup_logging(args.log_level)
    return asyncio.run(_run(args))


if __name__ == "__main__":
    raise SystemExit(main())
