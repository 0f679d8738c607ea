class LeagueHistoryError(Exception):
    """Base class for errors surfaced to callers of the history service."""


class InvalidRequestError(LeagueHistoryError, ValueError):
    """Raised for bad input before any remote call is made."""


class LeagueNotFoundError(LeagueHistoryError):
    """The starting league could not be fetched, so there is no lineage to walk."""

    def __init__(self, league_id: str):
        self.league_id = league_id
        super().__init__(f"League {league_id} could not be fetched from Sleeper")
