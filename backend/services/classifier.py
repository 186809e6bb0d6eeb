"""Portfolio classification cascades.

Both dashboards classify bugs through the same generic evaluator: an ordered
list of named rules, each returning a portfolio or None. The first rule that
returns a portfolio wins; if none does, the cascade's fallback label is used.

Two strategies exist and must stay separate:

- triage: the engineering org taxonomy (CORE, UI, Platform, ...), built from
  team, person and manager-group lookups with a DevOps project override.
- backlog: manager-owned buckets ("Jegadeesh Core", "Mujtaba", ...), built from
  the bucket predicate table in the reference data.
"""

from collections import namedtuple
from dataclasses import asdict, dataclass
from typing import Optional

from services.extractors import IssueFacts, extract_facts
from services.manager_resolver import ManagerResolver
from services.team_resolver import TeamResolver

Rule = namedtuple("Rule", ["name", "resolve"])

FALLBACK_RULE = "fallback"


@dataclass(frozen=True)
class Classification:
    portfolio: str
    team: Optional[str]
    manager_group: Optional[str]
    rule: str


class Cascade:
    """Evaluates an ordered list of rules against IssueFacts."""

    def __init__(self, name: str, rules: list, fallback: str):
        self.name = name
        self.rules = tuple(rules)
        self.fallback = fallback

    def evaluate(self, facts: IssueFacts) -> tuple:
        """Return ``(portfolio, rule_name)`` for the first rule that fires."""
        for rule in self.rules:
            portfolio = rule.resolve(facts)
            if portfolio:
                return portfolio, rule.name
        return self.fallback, FALLBACK_RULE

    def trace(self, facts: IssueFacts) -> list:
        """Evaluate every rule and report what each one would return."""
        return [{"rule": rule.name, "portfolio": rule.resolve(facts)} for rule in self.rules]


def in_devops_project(facts: IssueFacts, project_key: str) -> bool:
    return bool(facts.project_key) and facts.project_key.lower() == project_key.lower()


def is_devops_project(facts: IssueFacts, project_key: str, issue_prefix: str) -> bool:
    """Triage DevOps check: project key, or the issue key prefix."""
    if in_devops_project(facts, project_key):
        return True
    return bool(facts.key) and facts.key.startswith(issue_prefix)


def bucket_matches(bucket, facts: IssueFacts, devops_project_key: str) -> bool:
    """Backlog bucket predicate: guard first, then any OR'd condition."""
    if facts.manager_group and facts.manager_group in bucket.excluded_manager_groups:
        return False
    if facts.manager_group and facts.manager_group in bucket.manager_groups:
        return True
    if facts.team_id and facts.team_id in bucket.team_ids:
        return True
    if facts.team and facts.team in bucket.team_ids:
        return True
    if facts.assignee_id and facts.assignee_id in bucket.assignee_ids:
        return True
    if bucket.devops_project and in_devops_project(facts, devops_project_key):
        return True
    return False


class PortfolioClassifier:
    """Builds and runs the triage and backlog cascades from reference data."""

    def __init__(self, reference_data):
        self.reference_data = reference_data
        self.team_resolver = TeamResolver(reference_data.team_portfolios)
        self.person_resolver = ManagerResolver(
            reference_data.person_managers, suffix=reference_data.manager_suffix
        )
        self.manager_group_resolver = ManagerResolver(
            reference_data.manager_groups, suffix=reference_data.manager_suffix
        )
        self.triage = Cascade("triage", self._triage_rules(), reference_data.triage_fallback)
        self.backlog = Cascade("backlog", self._backlog_rules(), reference_data.backlog_fallback)

    def _is_devops(self, facts: IssueFacts) -> bool:
        ref = self.reference_data
        return is_devops_project(facts, ref.devops_project_key, ref.devops_issue_prefix)

    def _triage_rules(self) -> list:
        ref = self.reference_data

        def devops_project(facts):
            return ref.devops_portfolio if self._is_devops(facts) else None

        def team(facts):
            if not facts.team or facts.team == ref.unknown_team:
                return None
            return self.team_resolver.resolve_portfolio(facts.team)

        def person(facts):
            match = self.person_resolver.resolve_portfolio_for_person(facts)
            return match.portfolio if match else None

        def manager_group(facts):
            return self.manager_group_resolver.resolve_portfolio_for_manager_group(facts.manager_group)

        return [
            Rule("devops_project", devops_project),
            Rule("team", team),
            Rule("person", person),
            Rule("manager_group", manager_group),
        ]

    def _backlog_rules(self) -> list:
        rules = []
        project_key = self.reference_data.devops_project_key
        for bucket in self.reference_data.backlog_buckets:
            # bind bucket per iteration
            def resolve(facts, bucket=bucket):
                return bucket.label if bucket_matches(bucket, facts, project_key) else None

            rules.append(Rule(bucket.label, resolve))
        return rules

    def facts(self, issue: dict) -> IssueFacts:
        return extract_facts(
            issue,
            team_field=self.reference_data.team_field,
            manager_group_field=self.reference_data.manager_group_field,
        )

    def _classify(self, cascade: Cascade, issue: dict) -> Classification:
        facts = self.facts(issue)
        portfolio, rule = cascade.evaluate(facts)
        return Classification(
            portfolio=portfolio,
            team=facts.team,
            manager_group=facts.manager_group,
            rule=rule,
        )

    def classify_triage(self, issue: dict) -> Classification:
        return self._classify(self.triage, issue)

    def classify_backlog(self, issue: dict) -> Classification:
        return self._classify(self.backlog, issue)

    def explain(self, issue: dict) -> dict:
        """Describe how both cascades see an issue (used by the debug API)."""
        facts = self.facts(issue)
        result = {"facts": asdict(facts)}
        for cascade in (self.triage, self.backlog):
            portfolio, rule = cascade.evaluate(facts)
            result[cascade.name] = {
                "portfolio": portfolio,
                "rule": rule,
                "rules": cascade.trace(facts),
            }
        return result
