import os
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.routing import APIRouter
from loguru import logger as log

from common import global_config
from src.api.dependencies import close_http_clients
from src.db.database import init_db
from src.db.utils.db_transaction import DatabaseOperationError
from src.utils.context import session_id
from src.utils.logging_config import new_session_id, setup_logging

# Setup logging before anything else
setup_logging()

PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


@asynccontextmanager
async def lifespan(_app: FastAPI):
    init_db()
    yield
    await close_http_clients()


# Initialize FastAPI app
app = FastAPI(lifespan=lifespan)

app.add_middleware(  # type: ignore[call-overload]
    CORSMiddleware,  # type: ignore[arg-type]
    allow_origins=global_config.server.allowed_origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)


@app.middleware("http")
async def answer_preflight(request: Request, call_next):
    # Registered after CORSMiddleware so it wraps it and sees OPTIONS first
    if request.method == "OPTIONS":
        return Response(status_code=204, headers=PREFLIGHT_HEADERS)
    return await call_next(request)


@app.middleware("http")
async def tag_session(request: Request, call_next):
    token = session_id.set(new_session_id())
    try:
        log.debug(f"{request.method} {request.url.path}")
        return await call_next(request)
    finally:
        session_id.reset(token)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(_request: Request, exc: RequestValidationError):
    messages = "; ".join(
        f"{'.'.join(str(loc) for loc in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    )
    return JSONResponse(
        status_code=400, content={"error": f"Invalid request: {messages}"}
    )


@app.exception_handler(DatabaseOperationError)
async def database_exception_handler(_request: Request, exc: DatabaseOperationError):
    return JSONResponse(status_code=500, content={"error": str(exc)})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    log.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={"error": str(exc) or "Internal server error"},
        headers={"Access-Control-Allow-Origin": "*"},
    )


# Automatically discover and include all routers
def include_all_routers():
    from src.api.routes import all_routers

    main_router = APIRouter()
    for router in all_routers:
        main_router.include_router(router)

    return main_router


app.include_router(include_all_routers())


if __name__ == "__main__":
    # Configure uvicorn to use our logging config
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=int(os.getenv("PORT", 8080)),
        log_config=None,  # Disable uvicorn's logging config
        access_log=True,  # Enable access logs
    )
