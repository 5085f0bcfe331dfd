from collections.abc import Sequence

from gh_wrapped.stats.errors import UserNotFoundError
from gh_wrapped.stats.models import AggregatedStats
from gh_wrapped.stats.models import CalendarDay
from gh_wrapped.stats.models import ContributionCalendar
from gh_wrapped.stats.models import LanguageStat
from gh_wrapped.stats.models import RawContributionPayload
from gh_wrapped.stats.models import RepositoryContributions
from gh_wrapped.stats.models import RepositoryStat


TOP_REPOSITORY_LIMIT = 5
TOP_LANGUAGE_LIMIT = 6


def contribution_level(count: int) -> int:
    """Map daily contribution count to a heatmap level in range 0..4."""

    if count <= 0:
        return 0
    if count <= 2:
        return 1
    if count <= 5:
        return 2
    if count <= 9:
        return 3
    return 4


def rounded_percentage(part: int, total: int) -> int:
    """Return 100 * part / total rounded half up, or 0 for an empty total."""

    if total <= 0:
        return 0
    return (200 * part + total) // (2 * total)


def top_repositories(
    contributions: Sequence[RepositoryContributions],
    limit: int = TOP_REPOSITORY_LIMIT,
) -> list[RepositoryStat]:
    """Rank repositories by the user's commit count, highest first.

    Equal commit counts keep their payload order.
    """

    ranked = sorted(
        contributions, key=lambda item: item.contributions.total_count, reverse=True
    )
    top: list[RepositoryStat] = []
    for item in ranked[:limit]:
        repository = item.repository
        primary_language = repository.primary_language
        top.append(
            RepositoryStat(
                name=repository.name,
                owner=repository.owner.login,
                commits=item.contributions.total_count,
                stars=repository.stargazer_count,
                language=primary_language.name if primary_language else None,
                language_color=primary_language.color if primary_language else None,
                url=repository.url,
            )
        )
    return top


def top_languages(
    contributions: Sequence[RepositoryContributions],
    limit: int = TOP_LANGUAGE_LIMIT,
) -> list[LanguageStat]:
    """Rank languages by byte size weighted with the user's commit count.

    Percentages are taken against the weighted size of every language,
    not only the ones that make the cut.
    """

    weighted_sizes: dict[str, int] = {}
    colors: dict[str, str | None] = {}
    for item in contributions:
        commit_weight = item.contributions.total_count
        for edge in item.repository.languages.edges:
            name = edge.node.name
            weighted_size = edge.size * commit_weight
            weighted_sizes[name] = weighted_sizes.get(name, 0) + weighted_size
            colors.setdefault(name, edge.node.color)

    total_size = sum(weighted_sizes.values())
    languages = [
        LanguageStat(
            name=name,
            color=colors[name],
            size=size,
            percentage=rounded_percentage(size, total_size),
        )
        for name, size in weighted_sizes.items()
        # Languages only seen in repositories without commits carry no usage.
        if size > 0
    ]
    languages.sort(key=lambda language: language.size, reverse=True)
    return languages[:limit]


def flatten_calendar(calendar: ContributionCalendar) -> list[CalendarDay]:
    return [
        CalendarDay(date=day.date, count=day.contribution_count, weekday=day.weekday)
        for week in calendar.weeks
        for day in week.contribution_days
    ]


def group_calendar_weeks(calendar: Sequence[CalendarDay]) -> list[list[CalendarDay]]:
    """Split a flat calendar into weeks ending on Saturday.

    The last week is closed at the end of data even when it is partial.
    """

    weeks: list[list[CalendarDay]] = []
    current_week: list[CalendarDay] = []
    for day in calendar:
        current_week.append(day)
        if day.weekday == 6:
            weeks.append(current_week)
            current_week = []
    if current_week:
        weeks.append(current_week)
    return weeks


def aggregate(payload: RawContributionPayload) -> AggregatedStats:
    """Compute totals, rankings and the flat calendar for one user.

    Raises:
        UserNotFoundError: If the payload has no user.
    """

    user = payload.user
    if user is None:
        raise UserNotFoundError("GitHub user not found")

    collection = user.contributions_collection
    repositories = collection.commit_contributions_by_repository
    return AggregatedStats(
        username=user.login,
        name=user.name or user.login,
        avatar_url=user.avatar_url,
        followers=user.followers.total_count,
        public_repos=user.repositories.total_count,
        total_contributions=collection.contribution_calendar.total_contributions,
        total_commits=collection.total_commit_contributions,
        total_prs=collection.total_pull_request_contributions,
        total_reviews=collection.total_pull_request_review_contributions,
        total_issues=collection.total_issue_contributions,
        total_repos=collection.total_repository_contributions,
        top_repositories=top_repositories(repositories),
        top_languages=top_languages(repositories),
        contribution_calendar=flatten_calendar(collection.contribution_calendar),
    )
