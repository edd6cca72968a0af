"""HTTP 서버 모듈."""

import logging

from aiohttp import web
from aiohttp.typedefs import Handler
from pydantic import ValidationError

from gh_info import __version__
from gh_info.batch import DEFAULT_CONCURRENCY, BatchAggregator
from gh_info.config import Settings
from gh_info.enrichers import RepositoryResolver
from gh_info.errors import BadRequestError, UpstreamError
from gh_info.models import BatchRequest, BatchResponse, BatchResponseMap, HealthResponse
from gh_info.sources import GitHubSource, Source
from gh_info.storage import TTLCache

logger = logging.getLogger(__name__)

SERVICE_NAME = "GitHub repository info service"

source_key = web.AppKey("source", Source)
aggregator_key = web.AppKey("aggregator", BatchAggregator)
cache_key = web.AppKey("cache", TTLCache)

routes = web.RouteTableDef()


@web.middleware
async def error_middleware(
    request: web.Request, handler: Handler
) -> web.StreamResponse:
    """도메인 예외를 JSON 오류 응답으로 변환한다."""
    try:
        return await handler(request)
    except BadRequestError as e:
        return web.json_response({"error": str(e)}, status=400)
    except UpstreamError as e:
        logger.warning(f"{request.method} {request.path} failed: {e.message}")
        status = 404 if e.not_found else 502
        return web.json_response({"error": e.message}, status=status)


async def _read_batch_request(request: web.Request) -> BatchRequest:
    try:
        return BatchRequest.model_validate_json(await request.read())
    except ValidationError as e:
        raise BadRequestError(f"invalid batch request: {e}") from e


def _log_batch_summary(path: str, succeeded: int, total: int) -> None:
    logger.info(f"{path} completed: {succeeded}/{total} succeeded")


@routes.get("/")
@routes.get("/health")
async def health(request: web.Request) -> web.Response:
    """헬스 체크."""
    body = HealthResponse(service=SERVICE_NAME, version=__version__)
    return web.json_response(body.model_dump())


@routes.post("/repos/batch")
async def batch_get_repos(request: web.Request) -> web.Response:
    """여러 저장소 정보를 입력 순서대로 반환한다."""
    batch = await _read_batch_request(request)
    logger.info(f"POST /repos/batch ({len(batch.repos)} repositories)")

    results = await request.app[aggregator_key].resolve(batch.repos, batch.fields)

    _log_batch_summary(request.path, sum(r.success for r in results), len(results))
    return web.json_response(BatchResponse(results=results).to_dict())


@routes.post("/repos/batch/map")
async def batch_get_repos_map(request: web.Request) -> web.Response:
    """여러 저장소 정보를 'owner/repo' 키의 딕셔너리로 반환한다."""
    batch = await _read_batch_request(request)
    logger.info(f"POST /repos/batch/map ({len(batch.repos)} repositories)")

    results_map = await request.app[aggregator_key].resolve_map(
        batch.repos, batch.fields
    )

    _log_batch_summary(
        request.path,
        sum(r.success for r in results_map.values()),
        len(batch.repos),
    )
    return web.json_response(BatchResponseMap(results_map=results_map).to_dict())


@routes.get("/repos/{owner}/{repo}")
async def get_repo_info(request: web.Request) -> web.Response:
    """저장소 기본 정보."""
    owner, repo = request.match_info["owner"], request.match_info["repo"]
    logger.info(f"GET /repos/{owner}/{repo}")
    info = await request.app[source_key].fetch_repo_info(owner, repo)
    return web.json_response(info.model_dump(mode="json"))


@routes.get("/repos/{owner}/{repo}/releases")
async def get_releases(request: web.Request) -> web.Response:
    """전체 릴리스 목록."""
    owner, repo = request.match_info["owner"], request.match_info["repo"]
    logger.info(f"GET /repos/{owner}/{repo}/releases")
    releases = await request.app[source_key].fetch_releases(owner, repo)
    return web.json_response([release.model_dump(mode="json") for release in releases])


@routes.get("/repos/{owner}/{repo}/releases/latest")
async def get_latest_release(request: web.Request) -> web.Response:
    """최신 릴리스."""
    owner, repo = request.match_info["owner"], request.match_info["repo"]
    logger.info(f"GET /repos/{owner}/{repo}/releases/latest")
    release = await request.app[source_key].fetch_latest_release(owner, repo)
    return web.json_response(release.model_dump(mode="json"))


def create_app(
    source: Source,
    cache: TTLCache | None = None,
    max_concurrency: int = DEFAULT_CONCURRENCY,
) -> web.Application:
    """소스를 주입받아 aiohttp 애플리케이션을 만든다.

    Args:
        source: 저장소 정보 소스
        cache: 종료 시 비울 캐시 (소스가 쓰는 것과 같은 인스턴스)
        max_concurrency: 배치 요청에서 동시에 처리할 저장소 수
    """
    app = web.Application(middlewares=[error_middleware])

    resolver = RepositoryResolver(source)
    aggregator = BatchAggregator(resolver, max_concurrency=max_concurrency)
    app[source_key] = source
    app[aggregator_key] = aggregator

    if cache is not None:
        app[cache_key] = cache

        async def clear_cache(app: web.Application) -> None:
            app[cache_key].clear()
            logger.info("Cache cleared")

        app.on_cleanup.append(clear_cache)

    app.add_routes(routes)
    return app


def build_app(settings: Settings) -> web.Application:
    """설정으로 캐시와 GitHub 소스를 구성해 애플리케이션을 만든다."""
    cache: TTLCache | None = None
    if settings.cache_enabled:
        cache = TTLCache(default_ttl=settings.cache_ttl_seconds)
        logger.info(f"Cache enabled, TTL: {settings.cache_ttl_seconds}s")
    else:
        logger.info("Cache disabled")

    source = GitHubSource(
        cache=cache,
        token=settings.github_token,
        base_url=settings.github_api_url,
        timeout=settings.request_timeout,
    )
    return create_app(source, cache=cache, max_concurrency=settings.batch_concurrency)


def run(settings: Settings) -> None:
    """HTTP 서버를 실행한다."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.info(f"Starting {SERVICE_NAME} on http://{settings.host}:{settings.port}")
    web.run_app(build_app(settings), host=settings.host, port=settings.port, print=None)
