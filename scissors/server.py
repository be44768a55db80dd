"""Matchmaking and round evaluation server for rock paper scissors."""

from __future__ import annotations

import argparse
import asyncio
import logging
import time
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any
from urllib.parse import urlsplit

from websockets.asyncio.server import serve as _ws_serve
from websockets.exceptions import ConnectionClosed

from .events import (
    Event,
    EventType,
    GameResultsData,
    Move,
    MoveData,
    PartnerFoundData,
    ServerState,
    encode_event,
    decode_event,
)

log = logging.getLogger(__name__)

WS_PATH = "/ws"
DEFAULT_PORT = 3000

_BEATS = {
    Move.ROCK: Move.SCISSORS,
    Move.PAPER: Move.ROCK,
    Move.SCISSORS: Move.PAPER,
}


def determine_result(player_move: Move | str, opponent_move: Move | str) -> str:
    """Return "win", "lose" or "tie" from the first player's point of view."""
    if player_move == opponent_move:
        return "tie"
    for move, beaten in _BEATS.items():
        if player_move == move and opponent_move == beaten:
            return "win"
    return "lose"


@dataclass
class Player:
    """A connected player and the connection used to reach it."""

    id: str
    conn: Any


@dataclass
class GameSession:
    """Two matched players and the moves of the current round."""

    id: str
    state: ServerState
    player1: Player
    player2: Player
    moves: dict[str, Move | str] = field(default_factory=dict)

    def _includes(self, player: Player) -> bool:
        return player.id in (self.player1.id, self.player2.id)


class Server:
    """Holds the waiting player, active game sessions and connected players."""

    def __init__(self) -> None:
        self.waiting_player: Player | None = None
        self.game_sessions: dict[str, GameSession] = {}
        self.players: dict[str, Player] = {}
        self._lock = asyncio.Lock()
        self._last_stamp = 0

    def _new_id(self, prefix: str) -> str:
        self._last_stamp = max(time.time_ns(), self._last_stamp + 1)
        return f"{prefix}_{self._last_stamp}"

    def _find_game(self, player: Player) -> GameSession | None:
        return next((g for g in self.game_sessions.values() if g._includes(player)), None)

    async def handle_connection(self, websocket: Any) -> None:
        """Serve one connection until it closes or sends something unreadable."""
        player = Player(self._new_id("player"), websocket)
        async with self._lock:
            self.players[player.id] = player
        log.info("Player %s connected", player.id)

        try:
            async for message in websocket:
                try:
                    event = decode_event(message)
                except ValueError as exc:
                    log.info("Player %s disconnected: %s", player.id, exc)
                    break
                await self.handle_event(player, event)
            else:
                log.info("Player %s disconnected", player.id)
        except ConnectionClosed as exc:
            log.info("Player %s disconnected: %s", player.id, exc)
        finally:
            async with self._lock:
                self.players.pop(player.id, None)

    async def handle_event(self, player: Player, event: Event) -> None:
        """Dispatch a client event; unknown types are ignored."""
        if event.type == EventType.FIND_PARTNER:
            await self.handle_find_partner(player)
        elif event.type == EventType.MOVE_SUBMITTED:
            await self.handle_move_submitted(player, event)
        elif event.type == EventType.PLAY_AGAIN:
            await self.handle_play_again(player)
        elif event.type == EventType.LEAVE_GAME:
            await self.handle_leave_game(player)

    async def handle_find_partner(self, player: Player) -> None:
        async with self._lock:
            waiting = self.waiting_player
            if waiting is None:
                self.waiting_player = player
                log.info("Player %s is waiting for a partner", player.id)
                return

            game_id = self._new_id("game")
            game = GameSession(
                id=game_id,
                state=ServerState.GAME_SESSION,
                player1=waiting,
                player2=player,
            )
            self.game_sessions[game_id] = game

            partner_data = PartnerFoundData(game_id=game_id)
            await self.send_event(waiting, Event(EventType.PARTNER_FOUND, partner_data))
            await self.send_event(player, Event(EventType.PARTNER_FOUND, partner_data))

            await self.send_event(waiting, Event(EventType.START_GAME))
            await self.send_event(player, Event(EventType.START_GAME))

            game.state = ServerState.COLLECTING_MOVES
            self.waiting_player = None
            log.info("Game %s started between %s and %s", game_id, waiting.id, player.id)

    async def handle_move_submitted(self, player: Player, event: Event) -> None:
        async with self._lock:
            game = self._find_game(player)
            if game is None:
                log.info("No game found for player %s", player.id)
                return

            move = MoveData.from_dict(event.data).move
            game.moves[player.id] = move
            log.info("Player %s submitted move: %s", player.id, getattr(move, "value", move))

            if len(game.moves) == 2:
                game.state = ServerState.EVALUATING_ROUND
                await self.evaluate_round(game)

    async def evaluate_round(self, game: GameSession) -> None:
        """Send each player the round's outcome and reset for the next round."""
        move1 = game.moves.get(game.player1.id, "")
        move2 = game.moves.get(game.player2.id, "")

        await self.send_event(
            game.player1,
            Event(
                EventType.GAME_RESULTS,
                GameResultsData(move1, move2, determine_result(move1, move2)),
            ),
        )
        await self.send_event(
            game.player2,
            Event(
                EventType.GAME_RESULTS,
                GameResultsData(move2, move1, determine_result(move2, move1)),
            ),
        )

        game.moves = {}
        game.state = ServerState.GAME_SESSION
        log.info(
            "Game %s round completed: %s vs %s",
            game.id,
            getattr(move1, "value", move1),
            getattr(move2, "value", move2),
        )

    async def handle_play_again(self, player: Player) -> None:
        async with self._lock:
            game = self._find_game(player)
            if game is None:
                return
            game.state = ServerState.COLLECTING_MOVES
            await self.send_event(game.player1, Event(EventType.START_GAME))
            await self.send_event(game.player2, Event(EventType.START_GAME))

    async def handle_leave_game(self, player: Player) -> None:
        async with self._lock:
            game = self._find_game(player)
            if game is not None:
                del self.game_sessions[game.id]
            if self.waiting_player is not None and self.waiting_player.id == player.id:
                self.waiting_player = None

    async def send_event(self, player: Player, event: Event) -> None:
        """Send an event; a failed send is logged, not raised."""
        try:
            await player.conn.send(encode_event(event))
        except (ConnectionClosed, OSError) as exc:
            log.warning("Failed to send event to player %s: %s", player.id, exc)


def _only_game_path(connection: Any, request: Any) -> Any:
    if urlsplit(request.path).path != WS_PATH:
        return connection.respond(HTTPStatus.NOT_FOUND, "404 page not found\n")
    return None


async def serve(host: str | None = None, port: int = DEFAULT_PORT) -> None:
    """Run the game server until cancelled."""
    server = Server()
    log.info("Rock Paper Scissors server starting on %s:%d", host or "", port)
    async with _ws_serve(server.handle_connection, host, port, process_request=_only_game_path):
        await asyncio.get_running_loop().create_future()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="scissors-server", description="Rock paper scissors game server."
    )
    parser.add_argument("--host", default="", help="interface to bind (default: all)")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="port to listen on")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")
    try:
        asyncio.run(serve(args.host or None, args.port))
    except KeyboardInterrupt:
        pass
    except OSError as exc:
        log.error("%s", exc)
        return 1
    return 0