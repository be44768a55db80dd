import logging

import pytest

from scissors.events import (
    Event,
    EventType,
    GameResultsData,
    Move,
    MoveData,
    PartnerFoundData,
    ServerState,
    decode_event,
)
from scissors.server import Player, Server, determine_result


class FakeConn:
    def __init__(self, incoming=()):
        self.incoming = list(incoming)
        self.sent = []

    async def send(self, message):
        self.sent.append(message)

    def __aiter__(self):
        return self._messages()

    async def _messages(self):
        for message in self.incoming:
            yield message


class BrokenConn:
    async def send(self, message):
        raise OSError("broken pipe")


def received(player):
    return [decode_event(m) for m in player.conn.sent]


async def matched(server):
    p1 = Player("p1", FakeConn())
    p2 = Player("p2", FakeConn())
    await server.handle_find_partner(p1)
    await server.handle_find_partner(p2)
    game = next(iter(server.game_sessions.values()))
    p1.conn.sent.clear()
    p2.conn.sent.clear()
    return p1, p2, game


@pytest.mark.parametrize(
    "mine, theirs, expected",
    [
        (Move.ROCK, Move.ROCK, "tie"),
        (Move.ROCK, Move.PAPER, "lose"),
        (Move.ROCK, Move.SCISSORS, "win"),
        (Move.PAPER, Move.ROCK, "win"),
        (Move.PAPER, Move.PAPER, "tie"),
        (Move.PAPER, Move.SCISSORS, "lose"),
        (Move.SCISSORS, Move.ROCK, "lose"),
        (Move.SCISSORS, Move.PAPER, "win"),
        (Move.SCISSORS, Move.SCISSORS, "tie"),
    ],
)
def test_determine_result(mine, theirs, expected):
    assert determine_result(mine, theirs) == expected


def test_determine_result_unknown_move_loses():
    assert determine_result("lizard", Move.ROCK) == "lose"


@pytest.mark.asyncio
async def test_first_player_waits():
    server = Server()
    p1 = Player("p1", FakeConn())
    await server.handle_find_partner(p1)
    assert server.waiting_player is p1
    assert p1.conn.sent == []
    assert server.game_sessions == {}


@pytest.mark.asyncio
async def test_second_player_starts_game():
    server = Server()
    p1 = Player("p1", FakeConn())
    p2 = Player("p2", FakeConn())
    await server.handle_find_partner(p1)
    await server.handle_find_partner(p2)

    assert server.waiting_player is None
    assert len(server.game_sessions) == 1
    game = next(iter(server.game_sessions.values()))
    assert game.player1 is p1 and game.player2 is p2
    assert game.state is ServerState.COLLECTING_MOVES

    for player in (p1, p2):
        events = received(player)
        assert [e.type for e in events] == [EventType.PARTNER_FOUND, EventType.START_GAME]
        assert PartnerFoundData.from_dict(events[0].data).game_id == game.id


@pytest.mark.asyncio
async def test_round_results_sent_to_both():
    server = Server()
    p1, p2, game = await matched(server)
    await server.handle_move_submitted(p1, Event(EventType.MOVE_SUBMITTED, MoveData(Move.ROCK).to_dict()))
    assert received(p1) == []
    await server.handle_move_submitted(p2, Event(EventType.MOVE_SUBMITTED, MoveData(Move.SCISSORS).to_dict()))

    [r1] = received(p1)
    [r2] = received(p2)
    assert r1.type is EventType.GAME_RESULTS
    assert GameResultsData.from_dict(r1.data) == GameResultsData(Move.ROCK, Move.SCISSORS, "win")
    assert GameResultsData.from_dict(r2.data) == GameResultsData(Move.SCISSORS, Move.ROCK, "lose")
    assert game.moves == {}
    assert game.state is ServerState.GAME_SESSION


@pytest.mark.asyncio
async def test_move_without_game_is_ignored():
    server = Server()
    loner = Player("loner", FakeConn())
    await server.handle_move_submitted(loner, Event(EventType.MOVE_SUBMITTED, {"move": "rock"}))
    assert loner.conn.sent == []
    assert server.game_sessions == {}


@pytest.mark.asyncio
async def test_play_again_restarts_both():
    server = Server()
    p1, p2, game = await matched(server)
    game.state = ServerState.GAME_SESSION
    await server.handle_play_again(p2)
    assert game.state is ServerState.COLLECTING_MOVES
    assert [e.type for e in received(p1)] == [EventType.START_GAME]
    assert [e.type for e in received(p2)] == [EventType.START_GAME]


@pytest.mark.asyncio
async def test_leave_game_removes_session():
    server = Server()
    p1, _p2, _game = await matched(server)
    await server.handle_leave_game(p1)
    assert server.game_sessions == {}


@pytest.mark.asyncio
async def test_leave_while_waiting_clears_waiting():
    server = Server()
    p1 = Player("p1", FakeConn())
    await server.handle_find_partner(p1)
    await server.handle_leave_game(p1)
    assert server.waiting_player is None


@pytest.mark.asyncio
async def test_unknown_event_is_ignored():
    server = Server()
    p1 = Player("p1", FakeConn())
    await server.handle_event(p1, Event("dance"))
    assert server.waiting_player is None
    assert p1.conn.sent == []


@pytest.mark.asyncio
async def test_handle_event_dispatches_find_partner():
    server = Server()
    p1 = Player("p1", FakeConn())
    await server.handle_event(p1, Event(EventType.FIND_PARTNER))
    assert server.waiting_player is p1


@pytest.mark.asyncio
async def test_connection_registers_and_unregisters():
    server = Server()
    conn = FakeConn(['{"type":"find_partner"}'])
    await server.handle_connection(conn)
    assert server.waiting_player.conn is conn
    assert server.waiting_player.id.startswith("player_")
    assert server.players == {}


@pytest.mark.asyncio
async def test_connection_stops_on_bad_message():
    server = Server()
    conn = FakeConn(["not json", '{"type":"find_partner"}'])
    await server.handle_connection(conn)
    assert server.waiting_player is None
    assert server.players == {}


@pytest.mark.asyncio
async def test_failed_send_is_logged(caplog):
    server = Server()
    player = Player("p1", BrokenConn())
    with caplog.at_level(logging.WARNING, logger="scissors.server"):
        await server.send_event(player, Event(EventType.START_GAME))
    assert "Failed to send event to player p1" in caplog.text


@pytest.mark.asyncio
async def test_evaluate_round_with_missing_move():
    server = Server()
    p1, p2, game = await matched(server)
    game.moves = {p1.id: Move.PAPER}
    await server.evaluate_round(game)
    [r2] = received(p2)
    result = GameResultsData.from_dict(r2.data)
    assert result.opponent_move is Move.PAPER
    assert result.result == "lose"