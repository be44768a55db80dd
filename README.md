# scissors

A two-player rock paper scissors game played over WebSockets. The package
has a server that pairs players as they arrive and a terminal client that
connects to it.

## Installation

```
pip install .
```

## Running the server

```
scissors-server [--host HOST] [--port PORT]
```

The server listens on all interfaces and on port 3000 by default. It
accepts WebSocket connections only on the path `/ws`. Requests for any
other path get a 404 response. Each connection is logged at INFO level.

The first player to ask for a partner waits. The next player to ask is
matched with them. Both then get `partner_found` and `start_game`. When
both moves for a round are in, each player gets a `game_results` message.
A message that is not valid JSON, or not a JSON object, closes that
player's connection.

To run the server from Python, use `scissors.server.serve(host, port)`. It
is a coroutine that runs until it is cancelled. The `Server` class holds
the matchmaking state. `determine_result(player_move, opponent_move)`
returns `"win"`, `"lose"` or `"tie"` from the first player's side.

## Playing

```
scissors-client [--url URL]
```

The client connects to `ws://localhost:3000/ws` by default and shows a
menu:

1. Find a partner to play
2. Quit

When a partner is found, you pick 1 (ROCK), 2 (PAPER) or 3 (SCISSORS).
When the round ends, the client shows both moves and whether you won,
lost or tied. You can then play again or leave the game. Any other answer
at that point leaves the game. If the client cannot connect, it logs the
error and exits with status 1.

The `scissors.client.Client` class takes a connection and, if you want,
`read_line` and `write` callables that replace standard input and output.
`connect(server_url)` opens a connection and raises `ConnectionError` if
it fails. `run(server_url)` plays a whole session.

## Protocol

Messages are JSON objects of the form `{"type": ..., "data": ...}`. The
`data` field is left out when it is empty.

Client to server: `find_partner`, `move_submitted` (data
`{"move": "rock" | "paper" | "scissors"}`), `play_again`, `leave_game`.

Server to client: `partner_found` (data `{"game_id": ...}`), `start_game`,
`game_results` (data `{"your_move": ..., "opponent_move": ...,
"result": "win" | "lose" | "tie"}`). The client also understands
`both_moves_received`, but the server never sends it.

The `scissors.events` module defines these messages as the `Event`,
`MoveData`, `GameResultsData` and `PartnerFoundData` dataclasses. To build
your own client, use `encode_event` and `decode_event`. `decode_event`
raises `ValueError` if the text is not an event.

## Limitations

- All state lives in memory. Games and players are lost when the server
  stops.
- There are no scores and no history. Each round stands alone.
- When one player leaves or disconnects, the other player is not told.
- The client does not reconnect after it loses its connection.

## Development

```
pip install -e .[test]
pytest
```