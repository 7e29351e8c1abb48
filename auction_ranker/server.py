"""HTTP surface serving the ranked auction list."""
from __future__ import annotations

import asyncio
import logging
from decimal import Decimal, InvalidOperation

from aiohttp import web

from .chains.defichain import DefichainClient
from .config import AppConfig
from .services import AuctionReportService

logger = logging.getLogger(__name__)

REPORT_SERVICE = web.AppKey("report_service", AuctionReportService)


class BadRequest(ValueError):
    pass


def _parse_limit(raw: str | None) -> int:
    try:
        limit = int(raw or "")
    except ValueError:
        raise BadRequest("limit must be a positive integer") from None
    if limit <= 0:
        raise BadRequest("limit must be a positive integer")
    return limit


def _parse_min_margin(raw: str | None) -> Decimal | None:
    if raw is None or raw == "":
        return None
    try:
        value = Decimal(raw)
    except InvalidOperation:
        raise BadRequest("minMargin must be a non-negative number") from None
    if not value.is_finite() or value < 0:
        raise BadRequest("minMargin must be a non-negative number")
    return value


async def _respond(request: web.Request, raw_limit: str | None, raw_margin: str | None) -> web.Response:
    try:
        limit = _parse_limit(raw_limit)
        min_margin = _parse_min_margin(raw_margin)
    except BadRequest as e:
        return web.Response(status=400, text=str(e))

    logger.info("Auction list requested (limit=%d, min_margin=%s)", limit, min_margin)
    service = request.app[REPORT_SERVICE]
    try:
        auctions = await service.render_report(limit, min_margin)
    except Exception as e:
        logger.error("get-auction-list error: %s (cause: %s)", e, e.__cause__, exc_info=True)
        return web.Response(status=500, text="Internal Server Error")

    logger.info("Returning %d auctions", len(auctions))
    return web.json_response(auctions)


async def get_auctions(request: web.Request) -> web.Response:
    """GET /auctions?limit=<N>&minMargin=<pct>"""
    return await _respond(
        request, request.query.get("limit"), request.query.get("minMargin")
    )


async def get_auction_list(request: web.Request) -> web.Response:
    """GET /get-auction-list/{limit}?minMarginPercentage=<pct>"""
    return await _respond(
        request,
        request.match_info.get("limit"),
        request.query.get("minMarginPercentage", request.query.get("minMargin")),
    )


def cors_middleware(allow_origin: str):
    @web.middleware
    async def middleware(request: web.Request, handler):
        try:
            response = await handler(request)
        except web.HTTPException as e:
            e.headers["Access-Control-Allow-Origin"] = allow_origin
            raise
        response.headers["Access-Control-Allow-Origin"] = allow_origin
        return response

    return middleware


def create_app(service: AuctionReportService, cors_allow_origin: str = "*") -> web.Application:
    middlewares = [cors_middleware(cors_allow_origin)] if cors_allow_origin else []
    app = web.Application(middlewares=middlewares)
    app[REPORT_SERVICE] = service
    app.router.add_get("/auctions", get_auctions)
    app.router.add_get("/get-auction-list/{limit}", get_auction_list)
    return app


async def run_server(config: AppConfig) -> None:
    """Serve until cancelled."""
    service = AuctionReportService(DefichainClient(config.rpc), config)
    app = create_app(service, config.server.cors_allow_origin)

    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, config.server.host, config.server.port)
    await site.start()
    logger.info("Listening on %s:%d", config.server.host, config.server.port)

    try:
        await asyncio.Event().wait()
    finally:
        await runner.cleanup()
