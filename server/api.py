"""FastAPI server exposing the outfit engine."""

from __future__ import annotations

import logging
from datetime import date

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from logic.enrichment import enrich, enrich_items
from logic.errors import InsufficientWardrobeError, PlannerError
from logic.outfit_builder import generate_candidate
from logic.outfit_scoring import score_outfit
from logic.planner import MultiDayPlanner
from logic.usage_history import find_repeat_warning
from logic.validation import GenerateRequest, PlanRequest, ScoreRequest, WardrobeItemPayload, validation_failure
from logic.weather_resolver import WeatherResolver, describe_weather, resolve_weather
from models.taxonomy import Slot
from planner_app.config import PlannerConfig
from planner_app.logging_config import configure_logging, get_logger, log_event, operation_context
from tools.calendar_store import SQLiteCalendarStore
from tools.outfit_store import SQLiteOutfitStore

configure_logging()

LOGGER = get_logger(__name__)
config = PlannerConfig.from_env()
app = FastAPI(title="Wardrobe Planner", version="0.1.0")


def _stores() -> tuple[SQLiteOutfitStore, SQLiteCalendarStore]:
    return SQLiteOutfitStore(config.database_path), SQLiteCalendarStore(config.database_path)


@app.exception_handler(RequestValidationError)
async def invalid_request(request: Request, exc: RequestValidationError) -> JSONResponse:
    log_event(LOGGER, logging.INFO, "api_request_invalid", path=request.url.path, errors=len(exc.errors()))
    payload = validation_failure("Invalid request payload", exc.errors())
    return JSONResponse(status_code=422, content=jsonable_encoder(payload))


@app.get("/healthz")
async def healthcheck() -> dict:
    """Lightweight readiness probe."""

    return {
        "status": "ok",
        "service": "wardrobe-planner",
        "environment": config.environment or "local",
    }


@app.post("/enrich")
def enrich_item(payload: WardrobeItemPayload) -> dict:
    return enrich(payload.to_item()).to_dict()


@app.post("/score")
def score(request: ScoreRequest) -> dict:
    slots = {Slot(name): enrich(item.to_item()) for name, item in request.slots.items()}
    return score_outfit(slots).to_dict()


@app.post("/generate")
def generate(request: GenerateRequest) -> dict:
    pool = enrich_items(item.to_item() for item in request.items)
    weather = resolve_weather(
        request.weather.target_date or date.today(),
        request.weather.forecast_days(),
        request.weather.latitude,
    )
    try:
        candidate = generate_candidate(pool, weather, request.excluded_ids)
    except InsufficientWardrobeError as exc:
        raise HTTPException(
            status_code=409,
            detail={"error": "insufficient_wardrobe", "slot": exc.slot, "category": exc.category, "message": str(exc)},
        ) from exc
    return {
        "candidate": candidate.to_dict(),
        "weather": weather.snapshot(),
        "weather_summary": describe_weather(weather),
    }


@app.post("/plan")
def plan(request: PlanRequest):
    """Plan and persist outfits for the requested dates.

    Each recorded day carries a ``repeat_warning`` when the same item set was
    worn in the week before it. A run that aborts part way returns 409 with
    the partial aggregate.
    """

    items = [payload.to_item() for payload in request.items]
    items_by_id = {item.item_id: item for item in items}
    saved = [outfit.to_saved(items_by_id) for outfit in request.saved_outfits]
    history = [entry.to_entry() for entry in request.history]
    outfit_store, calendar_store = _stores()
    resolver = WeatherResolver(latitude=request.latitude if request.latitude is not None else config.default_latitude)

    with operation_context("api:plan") as correlation_id:
        planner = MultiDayPlanner(outfit_store, calendar_store, resolver)
        result = planner.plan_range(
            request.user_id, request.dates, enrich_items(items), saved, history, request.options
        )
        body = {**result.to_dict(), "correlation_id": correlation_id}
        for day, payload in zip(result.results, body["results"]):
            payload["repeat_warning"] = find_repeat_warning(history, day.target_date, day.item_ids)
        try:
            result.raise_for_error()
        except PlannerError as exc:
            log_event(LOGGER, logging.WARNING, "api_plan_aborted", correlation_id=correlation_id, error=str(exc))
            return JSONResponse(status_code=409, content=body)
        return body


def get_app() -> FastAPI:
    """Expose the FastAPI instance for ASGI servers."""

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("server.api:app", host="0.0.0.0", port=int("8080"), reload=False)
