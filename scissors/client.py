"""Interactive terminal client for the rock paper scissors server."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Any, Callable

from websockets.exceptions import ConnectionClosed, InvalidHandshake, InvalidURI
from websockets.sync.client import connect as _ws_connect

from .events import (
    ClientState,
    Event,
    EventType,
    GameResultsData,
    Move,
    MoveData,
    decode_event,
    encode_event,
)

log = logging.getLogger(__name__)

DEFAULT_URL = "ws://localhost:3000/ws"

_MOVES = {"1": Move.ROCK, "2": Move.PAPER, "3": Move.SCISSORS}
_RESULT_LINES = {
    "win": "   🏆 You WIN!\n",
    "lose": "   😞 You lose!\n",
    "tie": "   🤝 It's a TIE!\n",
}


def _read_stdin_line() -> str | None:
    return sys.stdin.readline() or None


def _write_stdout(text: str) -> None:
    sys.stdout.write(text)
    sys.stdout.flush()


def _shout(move: Any) -> str:
    return str(getattr(move, "value", move)).upper()


class Client:
    """Drives the menus and reacts to events from the server."""

    def __init__(
        self,
        conn: Any,
        read_line: Callable[[], str | None] | None = None,
        write: Callable[[str], None] | None = None,
    ) -> None:
        self.conn = conn
        self.state = ClientState.IDLE
        self.quit = False
        self._read_line = read_line or _read_stdin_line
        self._write = write or _write_stdout

    def _ask(self, prompt: str) -> str | None:
        self._write(prompt)
        line = self._read_line()
        return None if line is None else line.strip()

    def listen_for_events(self) -> None:
        """Handle incoming events until the connection closes or sends garbage."""
        while not self.quit:
            try:
                event = decode_event(self.conn.recv())
            except (ConnectionClosed, ValueError) as exc:
                log.info("Connection closed: %s", exc)
                break
            self.handle_event(event)

    def handle_event(self, event: Event) -> None:
        if event.type == EventType.PARTNER_FOUND:
            self.state = ClientState.IN_GAME
            self._write("🎉 Partner found! Get ready to play!\n")
        elif event.type == EventType.START_GAME:
            self.state = ClientState.MAKING_MOVE
            self._write("\n🎮 New round starting!\n")
            self.prompt_for_move()
        elif event.type == EventType.GAME_RESULTS:
            self.state = ClientState.VIEWING_RESULTS
            self.handle_game_results(event)
        elif event.type == EventType.BOTH_MOVES_RECEIVED:
            self.state = ClientState.WAITING_FOR_RESULT
            self._write("⏳ Both moves received, waiting for results...\n")

    def handle_game_results(self, event: Event) -> None:
        """Show the round's outcome and ask whether to play again."""
        data = event.data.to_dict() if hasattr(event.data, "to_dict") else event.data
        results = GameResultsData.from_dict(data)
        self._write(
            "\n📊 ROUND RESULTS:\n"
            f"   Your move: {_shout(results.your_move)}\n"
            f"   Opponent move: {_shout(results.opponent_move)}\n"
            + _RESULT_LINES.get(results.result, "")
        )
        choice = self._ask(
            "\nWhat would you like to do?\n1. Play again\n2. Leave game\nEnter your choice (1-2): "
        )
        if choice is None:
            return
        if choice == "1":
            self.send_event(Event(EventType.PLAY_AGAIN))
            self._write("⏳ Waiting for next round...\n")
            return
        if choice == "2":
            self.send_event(Event(EventType.LEAVE_GAME))
            self._write("👋 Left the game. Thanks for playing!\n")
        else:
            self._write("Invalid choice, leaving game...\n")
            self.send_event(Event(EventType.LEAVE_GAME))
        self.state = ClientState.IDLE
        self.show_main_menu()

    def prompt_for_move(self) -> None:
        """Ask for a move until a valid one is entered, then submit it."""
        while True:
            choice = self._ask(
                "\nMake your move:\n1. ROCK 🗿\n2. PAPER 📄\n3. SCISSORS ✂️\n"
                "Enter your choice (1-3): "
            )
            if choice is None:
                return
            move = _MOVES.get(choice)
            if move is not None:
                break
            self._write("Invalid choice! Please enter 1, 2, or 3.\n")
        self._write(f"You chose: {_shout(move)}\n")
        self.send_event(Event(EventType.MOVE_SUBMITTED, MoveData(move)))
        self.state = ClientState.WAITING_FOR_RESULT
        self._write("⏳ Move submitted! Waiting for opponent...\n")

    def send_event(self, event: Event) -> None:
        """Send an event; a failed send is logged, not raised."""
        try:
            self.conn.send(encode_event(event))
        except (ConnectionClosed, OSError) as exc:
            log.warning("Failed to send event: %s", exc)

    def show_main_menu(self) -> None:
        """Offer matchmaking or quitting; does nothing unless idle."""
        while self.state == ClientState.IDLE:
            choice = self._ask(
                "\n🎮 Rock Paper Scissors Game\n1. Find a partner to play\n2. Quit\n"
                "Enter your choice (1-2): "
            )
            if choice is None:
                return
            if choice == "1":
                self.state = ClientState.FINDING_PARTNER
                self.send_event(Event(EventType.FIND_PARTNER))
                self._write("🔍 Looking for a partner...\n")
                return
            if choice == "2":
                self._write("👋 Goodbye!\n")
                self.quit = True
                self.conn.close()
                return
            self._write("Invalid choice! Please enter 1 or 2.\n")


def connect(server_url: str) -> Any:
    """Open a connection to the server; raise ConnectionError on failure."""
    try:
        return _ws_connect(server_url)
    except (OSError, InvalidURI, InvalidHandshake) as exc:
        raise ConnectionError(f"failed to connect to server: {exc}") from exc


def run(server_url: str = DEFAULT_URL) -> None:
    """Connect, show the menu and play until the connection ends."""
    conn = connect(server_url)
    try:
        client = Client(conn)
        client._write("🔗 Connected to Rock Paper Scissors server!\n")
        client.show_main_menu()
        if not client.quit:
            client.listen_for_events()
    finally:
        conn.close()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="scissors-client", description="Play rock paper scissors against a partner."
    )
    parser.add_argument("--url", default=DEFAULT_URL, help="server WebSocket URL")
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")
    try:
        run(args.url)
    except ConnectionError as exc:
        log.error("%s", exc)
        return 1
    except KeyboardInterrupt:
        pass
    return 0