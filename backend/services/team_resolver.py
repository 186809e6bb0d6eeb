"""Team name to portfolio resolution."""

from typing import Optional


class TeamResolver:
    """Maps a free-text team name onto a portfolio.

    ``team_portfolios`` is an ordered tuple of ``(team, portfolios)`` pairs.
    The order matters: when several teams fuzzy-match, the first one wins.
    """

    def __init__(self, team_portfolios: tuple):
        self._teams = tuple(team_portfolios)
        self._exact = {}
        for team, portfolios in self._teams:
            self._exact.setdefault(team, portfolios)

    def resolve_portfolio(self, team_name: Optional[str]) -> Optional[str]:
        """Resolve a team name to its primary portfolio.

        Tries an exact lookup first, then a case-insensitive substring match
        in both directions against every known team, in table order.
        """
        if not team_name:
            return None

        portfolios = self._exact.get(team_name)
        if portfolios:
            return portfolios[0]

        normalized = team_name.lower().strip()
        if not normalized:
            return None

        for mapped_team, mapped_portfolios in self._teams:
            mapped = mapped_team.lower()
            if normalized in mapped or mapped in normalized:
                return mapped_portfolios[0]

        return None

    def teams_for_portfolio(self, portfolio: str) -> list:
        return [team for team, portfolios in self._teams if portfolio in portfolios]

    def all_portfolios(self) -> list:
        return sorted({p for _, portfolios in self._teams for p in portfolios})

    def all_teams(self) -> list:
        return sorted(team for team, _ in self._teams)
