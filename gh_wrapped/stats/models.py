from collections.abc import Mapping
from datetime import date
from typing import Any

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import ValidationError
from pydantic import field_validator
from pydantic.alias_generators import to_camel

from gh_wrapped.stats.errors import MalformedPayloadError


class GraphQLModel(BaseModel):
    """Base for shapes returned by the GitHub GraphQL API."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )


class CountConnection(GraphQLModel):
    total_count: int = Field(ge=0)


class LanguageNode(GraphQLModel):
    name: str
    color: str | None = None


class LanguageEdge(GraphQLModel):
    size: int = Field(ge=0)
    node: LanguageNode


class LanguageConnection(GraphQLModel):
    edges: list[LanguageEdge] = Field(default_factory=list)


class RepositoryOwner(GraphQLModel):
    login: str


class Repository(GraphQLModel):
    name: str
    owner: RepositoryOwner
    primary_language: LanguageNode | None = None
    stargazer_count: int = Field(ge=0)
    url: str
    languages: LanguageConnection = Field(default_factory=LanguageConnection)


class RepositoryContributions(GraphQLModel):
    repository: Repository
    contributions: CountConnection


class ContributionDay(GraphQLModel):
    contribution_count: int = Field(ge=0)
    date: date
    weekday: int = Field(ge=0, le=6)


class ContributionWeek(GraphQLModel):
    contribution_days: list[ContributionDay]


class ContributionCalendar(GraphQLModel):
    total_contributions: int = Field(ge=0)
    weeks: list[ContributionWeek]

    @field_validator("weeks")
    @classmethod
    def dates_strictly_increase(
        cls, weeks: list[ContributionWeek]
    ) -> list[ContributionWeek]:
        previous: date | None = None
        for week in weeks:
            for day in week.contribution_days:
                if previous is not None and day.date <= previous:
                    raise ValueError(
                        f"calendar date {day.date.isoformat()} does not follow "
                        f"{previous.isoformat()}"
                    )
                previous = day.date
        return weeks


class ContributionsCollection(GraphQLModel):
    total_commit_contributions: int = Field(ge=0)
    total_pull_request_contributions: int = Field(ge=0)
    total_pull_request_review_contributions: int = Field(ge=0)
    total_issue_contributions: int = Field(ge=0)
    total_repository_contributions: int = Field(ge=0)
    contribution_calendar: ContributionCalendar
    commit_contributions_by_repository: list[RepositoryContributions] = Field(
        default_factory=list
    )


class GitHubUser(GraphQLModel):
    login: str
    name: str | None = None
    avatar_url: str
    followers: CountConnection
    repositories: CountConnection
    contributions_collection: ContributionsCollection


class RawContributionPayload(GraphQLModel):
    """The `data` object of the wrapped stats GraphQL query."""

    user: GitHubUser | None = None


def describe_validation_error(exc: ValidationError, limit: int = 3) -> str:
    problems = []
    for error in exc.errors()[:limit]:
        location = ".".join(str(part) for part in error["loc"]) or "payload"
        problems.append(f"{location}: {error['msg']}")
    remaining = exc.error_count() - len(problems)
    if remaining > 0:
        problems.append(f"and {remaining} more")
    return "; ".join(problems)


def parse_payload(data: Mapping[str, Any]) -> RawContributionPayload:
    """Validate a GraphQL `data` mapping against the payload schema.

    Raises:
        MalformedPayloadError: If a required field is missing or an
            invariant (weekday range, non-negative counts, calendar date
            order) does not hold.
    """

    if not isinstance(data, Mapping):
        raise MalformedPayloadError("GitHub stats payload must be an object")

    try:
        return RawContributionPayload.model_validate(data)
    except ValidationError as exc:
        raise MalformedPayloadError(
            f"GitHub stats payload is malformed: {describe_validation_error(exc)}"
        ) from exc


class StatsModel(BaseModel):
    """Base for derived values handed to presentation code."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )


class RepositoryStat(StatsModel):
    name: str
    owner: str
    commits: int
    stars: int
    language: str | None
    language_color: str | None
    url: str


class LanguageStat(StatsModel):
    name: str
    color: str | None
    size: int
    percentage: int


class CalendarDay(StatsModel):
    date: date
    count: int
    weekday: int


class StreakStats(StatsModel):
    current_streak: int = 0
    longest_streak: int = 0
    total_active_days: int = 0


class ProductivityAnalysis(StatsModel):
    streak_stats: StreakStats
    most_productive_day: str
    most_productive_month: str


class AggregatedStats(StatsModel):
    username: str
    name: str
    avatar_url: str
    followers: int
    public_repos: int
    total_contributions: int
    total_commits: int
    total_prs: int = Field(alias="totalPRs")
    total_reviews: int
    total_issues: int
    total_repos: int
    top_repositories: list[RepositoryStat]
    top_languages: list[LanguageStat]
    contribution_calendar: list[CalendarDay]


class DerivedStats(AggregatedStats):
    """Everything the dashboard and story slides render for one user."""

    streak_stats: StreakStats
    most_productive_day: str
    most_productive_month: str
