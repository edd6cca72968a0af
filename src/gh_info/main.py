"""CLI 엔트리포인트."""

import asyncio
import json
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from gh_info.batch import BatchAggregator
from gh_info.config import settings
from gh_info.enrichers import RepositoryResolver
from gh_info.models import BatchResponse, BatchResponseMap, ItemOutcome
from gh_info.server import run
from gh_info.sources import GitHubSource
from gh_info.storage import TTLCache

console = Console()

app = typer.Typer(
    name="gh-info",
    help="GitHub 저장소 정보와 릴리스를 조회합니다.",
    no_args_is_help=True,
)


def _build_aggregator() -> BatchAggregator:
    cache = (
        TTLCache(default_ttl=settings.cache_ttl_seconds)
        if settings.cache_enabled
        else None
    )
    source = GitHubSource(
        cache=cache,
        token=settings.github_token,
        base_url=settings.github_api_url,
        timeout=settings.request_timeout,
    )
    return BatchAggregator(
        RepositoryResolver(source),
        max_concurrency=settings.batch_concurrency,
    )


def _render_outcomes(outcomes: list[ItemOutcome]) -> None:
    """배치 결과를 Rich 테이블로 렌더링한다."""
    table = Table(show_header=True, header_style="bold cyan", expand=True)
    table.add_column("#", style="dim", width=3)
    table.add_column("저장소", style="bold")
    table.add_column("⭐ Stars", justify="right", width=10)
    table.add_column("릴리스", justify="right", width=8)
    table.add_column("최신 버전", width=16)
    table.add_column("상태")

    for i, outcome in enumerate(outcomes, 1):
        info = outcome.repo_info
        stars = f"{info.stargazers_count:,}" if info else "-"
        releases = str(len(outcome.releases)) if outcome.releases is not None else "-"
        latest = outcome.latest_release.latest_version if outcome.latest_release else "-"
        status = "[green]✓[/green]" if outcome.success else f"[red]{outcome.error}[/red]"

        repo_text = (
            f"[link={info.html_url}]{outcome.repo}[/link]" if info else outcome.repo
        )
        table.add_row(str(i), repo_text, stars, releases, latest, status)

    console.print(table)


async def _run_batch(
    repos: list[str],
    fields: list[str] | None,
    as_map: bool,
    as_json: bool,
) -> None:
    aggregator = _build_aggregator()

    if as_map:
        results_map = await aggregator.resolve_map(repos, fields)
        if as_json:
            body = BatchResponseMap(results_map=results_map).to_dict()
            console.print_json(json.dumps(body))
        else:
            _render_outcomes(list(results_map.values()))
        return

    results = await aggregator.resolve(repos, fields)
    if as_json:
        console.print_json(json.dumps(BatchResponse(results=results).to_dict()))
    else:
        _render_outcomes(results)


@app.command()
def serve(
    host: Annotated[
        str | None,
        typer.Option("--host", help="바인드 주소"),
    ] = None,
    port: Annotated[
        int | None,
        typer.Option("--port", "-p", help="바인드 포트"),
    ] = None,
) -> None:
    """HTTP 서버를 실행합니다."""
    overrides = {
        key: value
        for key, value in {"host": host, "port": port}.items()
        if value is not None
    }
    run(settings.model_copy(update=overrides))


@app.command()
def batch(
    repos: Annotated[
        list[str],
        typer.Argument(help="조회할 저장소 (owner/repo)"),
    ],
    fields: Annotated[
        list[str] | None,
        typer.Option(
            "--field",
            "-f",
            help="가져올 필드 (repo_info, releases, latest_release). 생략하면 전체.",
        ),
    ] = None,
    as_map: Annotated[
        bool,
        typer.Option("--map", help="저장소별 매핑 형식으로 조회"),
    ] = False,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="JSON으로 출력"),
    ] = False,
) -> None:
    """여러 저장소 정보를 한 번에 조회합니다."""
    try:
        asyncio.run(_run_batch(repos, fields, as_map, as_json))
    except KeyboardInterrupt:
        console.print("\n[dim]중단됨[/dim]")
        raise typer.Exit(0) from None
    except Exception as e:
        console.print(f"[red]오류 발생: {e}[/red]")
        raise typer.Exit(1) from e


if __name__ == "__main__":
    app()
