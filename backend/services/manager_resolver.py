"""Manager group and person-name based portfolio resolution."""

from collections import namedtuple
from typing import Optional

PersonMatch = namedtuple("PersonMatch", ["portfolio", "manager_group"])


class ManagerResolver:
    """Resolves portfolios from manager groups or people's display names.

    ``manager_portfolios`` is an ordered tuple of ``(manager_group, portfolio)``
    pairs such as ``("Ankur_Reportees", "CORE")``.
    """

    def __init__(self, manager_portfolios: tuple, suffix: str = "_Reportees"):
        self._managers = tuple(manager_portfolios)
        self._lookup = dict(self._managers)
        self._suffix = suffix

    def resolve_portfolio_for_manager_group(self, manager_group: Optional[str]) -> Optional[str]:
        if not manager_group:
            return None
        return self._lookup.get(manager_group)

    def manager_group_for_name(self, full_name: Optional[str]) -> Optional[str]:
        """Guess the manager group a person belongs to from their name.

        The first name is compared against each manager's name (the group key
        without its suffix). A manager name appearing anywhere in the full
        name also counts. The first table entry that matches wins.
        """
        if not full_name or not full_name.strip():
            return None

        lowered = full_name.lower()
        first_name = lowered.split()[0]

        for manager_group, _ in self._managers:
            manager_name = manager_group.replace(self._suffix, "").lower()
            if not manager_name:
                continue
            if first_name == manager_name:
                return manager_group
            if manager_name in lowered:
                return manager_group

        return None

    def resolve_portfolio_for_person(self, facts) -> Optional[PersonMatch]:
        """Resolve a portfolio from the assignee, falling back to the reporter.

        Args:
            facts: IssueFacts for the issue being classified.

        Returns:
            PersonMatch(portfolio, manager_group) or None
        """
        for name in (facts.assignee_name, facts.reporter_name):
            manager_group = self.manager_group_for_name(name)
            if not manager_group:
                continue
            portfolio = self.resolve_portfolio_for_manager_group(manager_group)
            if portfolio:
                return PersonMatch(portfolio, manager_group)
        return None

    def all_portfolios(self) -> list:
        return sorted(set(self._lookup.values()))

    def all_manager_groups(self) -> list:
        return sorted(self._lookup)
