"""Tests for team and manager resolvers."""

from services.extractors import IssueFacts
from services.manager_resolver import ManagerResolver
from services.team_resolver import TeamResolver


TEAMS = (
    ("Core Flows", ("CORE",)),
    ("Platform Infrastructure", ("Platform", "DevOps")),
    ("Platform", ("Platform",)),
    ("UI Experience", ("UI",)),
)

MANAGERS = (
    ("Ankur_Reportees", "CORE"),
    ("Raman_Reportees", "Platform"),
    ("Ramakrishna_Reportees", "CORE"),
    ("Krishna_Reportees", "AI/ML"),
)


class TestTeamResolver:
    """Test team name to portfolio resolution."""

    def test_exact_match_returns_first_portfolio(self):
        resolver = TeamResolver(TEAMS)
        assert resolver.resolve_portfolio("Platform Infrastructure") == "Platform"

    def test_case_insensitive(self):
        """Should match regardless of case and surrounding whitespace."""
        resolver = TeamResolver(TEAMS)
        assert resolver.resolve_portfolio("  ui EXPERIENCE ") == "UI"

    def test_case_variants_agree(self):
        resolver = TeamResolver(TEAMS)
        assert resolver.resolve_portfolio("CORE FLOWS") == resolver.resolve_portfolio("core flows")

    def test_input_contained_in_team(self):
        """Should match a fragment of a known team name."""
        resolver = TeamResolver(TEAMS)
        assert resolver.resolve_portfolio("flows") == "CORE"

    def test_team_contained_in_input(self):
        """Should match when a known team name appears inside the input."""
        resolver = TeamResolver(TEAMS)
        assert resolver.resolve_portfolio("Core Flows - Squad B") == "CORE"

    def test_table_order_breaks_ties(self):
        """Should pick the first table entry when several match."""
        table = (("Data Team", ("CORE",)), ("Data", ("AI/ML",)))
        assert TeamResolver(table).resolve_portfolio("data") == "CORE"
        assert TeamResolver(tuple(reversed(table))).resolve_portfolio("data") == "AI/ML"

    def test_no_match(self):
        resolver = TeamResolver(TEAMS)
        assert resolver.resolve_portfolio("Finance") is None
        assert resolver.resolve_portfolio("") is None
        assert resolver.resolve_portfolio("   ") is None
        assert resolver.resolve_portfolio(None) is None

    def test_helpers(self):
        resolver = TeamResolver(TEAMS)
        assert resolver.teams_for_portfolio("DevOps") == ["Platform Infrastructure"]
        assert resolver.all_portfolios() == ["CORE", "DevOps", "Platform", "UI"]
        assert resolver.all_teams()[0] == "Core Flows"


class TestManagerResolver:
    """Test manager group and person-name resolution."""

    def test_manager_group_lookup(self):
        resolver = ManagerResolver(MANAGERS)
        assert resolver.resolve_portfolio_for_manager_group("Krishna_Reportees") == "AI/ML"
        assert resolver.resolve_portfolio_for_manager_group("Unknown_Reportees") is None
        assert resolver.resolve_portfolio_for_manager_group(None) is None

    def test_first_name_match(self):
        resolver = ManagerResolver(MANAGERS)
        assert resolver.manager_group_for_name("Ankur Sharma") == "Ankur_Reportees"

    def test_contained_name_match(self):
        """Should match a manager name appearing later in the full name."""
        resolver = ManagerResolver(MANAGERS)
        assert resolver.manager_group_for_name("V. Krishna Rao") == "Krishna_Reportees"

    def test_first_table_entry_wins(self):
        """Containment is checked per entry in order, so earlier entries win."""
        resolver = ManagerResolver(MANAGERS)
        # "ramakrishna" contains "krishna" but Ramakrishna is listed first
        assert resolver.manager_group_for_name("Ramakrishna P") == "Ramakrishna_Reportees"

    def test_no_match(self):
        resolver = ManagerResolver(MANAGERS)
        assert resolver.manager_group_for_name("Jordan Lee") is None
        assert resolver.manager_group_for_name("") is None
        assert resolver.manager_group_for_name(None) is None

    def test_person_prefers_assignee(self):
        resolver = ManagerResolver(MANAGERS)
        facts = IssueFacts(assignee_name="Ankur S", reporter_name="Krishna K")
        match = resolver.resolve_portfolio_for_person(facts)
        assert match.portfolio == "CORE"
        assert match.manager_group == "Ankur_Reportees"

    def test_person_falls_back_to_reporter(self):
        resolver = ManagerResolver(MANAGERS)
        facts = IssueFacts(assignee_name="Jordan Lee", reporter_name="Krishna K")
        assert resolver.resolve_portfolio_for_person(facts).portfolio == "AI/ML"

    def test_person_without_match(self):
        resolver = ManagerResolver(MANAGERS)
        assert resolver.resolve_portfolio_for_person(IssueFacts()) is None

    def test_helpers(self):
        resolver = ManagerResolver(MANAGERS)
        assert resolver.all_portfolios() == ["AI/ML", "CORE", "Platform"]
        assert "Raman_Reportees" in resolver.all_manager_groups()
