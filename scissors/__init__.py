"""Rock paper scissors over WebSockets: matchmaking server, terminal client and message format."""

__version__ = "0.1.0"