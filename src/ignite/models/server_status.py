from dataclasses import dataclass


@dataclass(frozen=True)
class ServerStatus:
    """
    Live status of the game server as reported by one A2S_INFO query.

    Attributes:
        online: True when the server answered the query
        name: Server name shown in the server browser
        map: Current map
        game: Game description reported by the server
        players: Connected players
        max_players: Player slots
    """
    online: bool
    name: str = "Unknown"
    map: str = "N/A"
    game: str = "Unknown"
    players: int = 0
    max_players: int = 0

    @classmethod
    def offline(cls) -> "ServerStatus":
        """Status used when the server did not answer"""
        return cls(online=False)
