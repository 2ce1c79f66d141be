"""FastAPI surface for the JSON records service."""
from __future__ import annotations

import asyncio
import json
import logging
import threading
from concurrent.futures import Future
from contextlib import asynccontextmanager
from typing import Any, Dict, List

from fastapi import Depends, FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from json_records.config import Settings, get_settings
from json_records.models import ErrorResponse, MessageResponse, RecordEnvelope
from json_records.records import (
    DispatchError,
    IntentDispatcher,
    MutationOutcome,
    RecordIdGenerator,
    RecordMutator,
    bind_mutator,
    loose_equals,
    parse_record_id,
)
from json_records.storage import JSONCollectionStore

logger = logging.getLogger(__name__)


class MalformedBodyError(ValueError):
    """Raised when a request body is not a JSON object."""


class RecordNotFound(LookupError):
    """Raised when no record matches the requested id."""


class PersistenceError(RuntimeError):
    """Raised when an awaited intent did not reach the data file."""


@asynccontextmanager
async def lifespan(application: FastAPI):
    get_dispatcher()
    yield
    dispatcher = getattr(application.state, "dispatcher", None)
    if dispatcher is not None:
        dispatcher.drain()
        dispatcher.shutdown()
        application.state.dispatcher = None


app = FastAPI(title="JSON Records API", lifespan=lifespan)

# Providers run in the threadpool; one lock keeps each app.state entry single.
_state_lock = threading.RLock()


def get_app_settings() -> Settings:
    with _state_lock:
        settings = getattr(app.state, "settings", None)
        if settings is None:
            settings = get_settings()
            app.state.settings = settings
        return settings


def get_collection_store() -> JSONCollectionStore:
    with _state_lock:
        store = getattr(app.state, "collection_store", None)
        if store is None:
            store = JSONCollectionStore(get_app_settings().data_file)
            app.state.collection_store = store
        return store


def get_dispatcher() -> IntentDispatcher:
    with _state_lock:
        dispatcher = getattr(app.state, "dispatcher", None)
        if dispatcher is None:
            dispatcher = bind_mutator(IntentDispatcher(), RecordMutator(get_collection_store()))
            app.state.dispatcher = dispatcher
        return dispatcher


def get_id_generator() -> RecordIdGenerator:
    with _state_lock:
        generator = getattr(app.state, "id_generator", None)
        if generator is None:
            generator = RecordIdGenerator()
            app.state.id_generator = generator
        return generator


def _reject_constant(name: str) -> Any:
    raise MalformedBodyError(f"Unexpected token {name} in JSON")


async def _read_json_object(request: Request) -> Dict[str, Any]:
    raw = await request.body()
    try:
        payload = json.loads(raw, parse_constant=_reject_constant)
    except ValueError as exc:
        if isinstance(exc, MalformedBodyError):
            raise
        raise MalformedBodyError(str(exc)) from exc
    if not isinstance(payload, dict):
        raise MalformedBodyError("Request body must be a JSON object")
    return payload


def _path_record_id(record_path: str) -> int:
    # "/data/", "/data/5" and "/data/5/extra" all address the first segment.
    return parse_record_id(record_path.split("/", 1)[0])


async def _settle(future: Future, settings: Settings) -> None:
    """Wait for the intent when configured to, otherwise answer optimistically.

    On timeout the outcome is undetermined: an intent still queued is
    cancelled and never runs, while one already running may still write
    after the client has received the 500.
    """
    if not settings.await_persistence:
        return
    try:
        results = await asyncio.wait_for(
            asyncio.wrap_future(future), timeout=settings.persistence_timeout
        )
    except asyncio.TimeoutError as exc:
        raise PersistenceError("Timed out waiting for persistence") from exc
    except DispatchError as exc:
        raise PersistenceError(str(exc)) from exc
    for outcome in results:
        if isinstance(outcome, MutationOutcome) and outcome.written is False:
            raise PersistenceError(
                f"Failed to persist {outcome.intent} for id {outcome.record_id}"
            )


@app.post("/data", status_code=201, response_model=RecordEnvelope)
async def create_record(
    request: Request,
    dispatcher: IntentDispatcher = Depends(get_dispatcher),
    ids: RecordIdGenerator = Depends(get_id_generator),
    settings: Settings = Depends(get_app_settings),
) -> RecordEnvelope:
    payload = await _read_json_object(request)
    record = {**payload, "id": ids.next_id()}
    await _settle(dispatcher.emit("create", record), settings)
    return RecordEnvelope(message="Data Saved", data=record)


@app.put("/data/{record_path:path}", response_model=RecordEnvelope)
async def update_record(
    record_path: str,
    request: Request,
    dispatcher: IntentDispatcher = Depends(get_dispatcher),
    settings: Settings = Depends(get_app_settings),
) -> RecordEnvelope:
    payload = await _read_json_object(request)
    record = {**payload, "id": _path_record_id(record_path)}
    await _settle(dispatcher.emit("update", record), settings)
    return RecordEnvelope(message="Data updated", data=record)


@app.get("/data", response_model=List[Any])
def list_records(store: JSONCollectionStore = Depends(get_collection_store)) -> List[Any]:
    return store.read_all()


@app.get("/data/{record_path:path}", response_model=Dict[str, Any])
def get_record(
    record_path: str, store: JSONCollectionStore = Depends(get_collection_store)
) -> Dict[str, Any]:
    target = _path_record_id(record_path)
    for item in store.read_all():
        if isinstance(item, dict) and loose_equals(item.get("id"), target):
            return item
    raise RecordNotFound(target)


@app.delete("/data/{record_path:path}", status_code=204, response_class=Response)
async def delete_record(
    record_path: str,
    dispatcher: IntentDispatcher = Depends(get_dispatcher),
    settings: Settings = Depends(get_app_settings),
) -> Response:
    await _settle(dispatcher.emit("delete", _path_record_id(record_path)), settings)
    return Response(status_code=204)


def _server_error(exc: Exception) -> JSONResponse:
    body = ErrorResponse(error=str(exc))
    return JSONResponse(status_code=500, content=body.model_dump())


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # Unknown paths and unsupported methods on known paths read the same.
    if exc.status_code in (404, 405):
        logger.info("Route not found: %s %s", request.method, request.url.path)
        body = MessageResponse(message="Route not found")
        return JSONResponse(status_code=404, content=body.model_dump())
    body = MessageResponse(message=str(exc.detail))
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


@app.exception_handler(RecordNotFound)
async def record_not_found_handler(request: Request, exc: RecordNotFound) -> JSONResponse:
    body = MessageResponse(message="Record not found")
    return JSONResponse(status_code=404, content=body.model_dump())


@app.exception_handler(MalformedBodyError)
async def malformed_body_handler(request: Request, exc: MalformedBodyError) -> JSONResponse:
    logger.warning("Rejected request body on %s %s: %s", request.method, request.url.path, exc)
    return _server_error(exc)


@app.exception_handler(PersistenceError)
async def persistence_error_handler(request: Request, exc: PersistenceError) -> JSONResponse:
    logger.error("Persistence failed on %s %s: %s", request.method, request.url.path, exc)
    return _server_error(exc)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _server_error(exc)
