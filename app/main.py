from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette import status

from app.logging_config import ensure_logging
from app.routes.provisioning import router as provisioning_router
from app.services.setup.errors import PreconditionMissingError, RemoteCallError


@asynccontextmanager
async def lifespan(app: FastAPI):
    ensure_logging()
    yield


app = FastAPI(lifespan=lifespan)

app.include_router(provisioning_router)


@app.exception_handler(PreconditionMissingError)
async def precondition_missing_handler(request: Request, exc: PreconditionMissingError) -> JSONResponse:
    """Missing or malformed provisioning settings: 400 with {"detail": "..."}."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": str(exc)},
    )


@app.exception_handler(RemoteCallError)
async def remote_call_error_handler(request: Request, exc: RemoteCallError) -> JSONResponse:
    """Map AWS call failures to a consistent HTTP response.

    The provider message is passed through so the failing call can be identified.

    Returns:
        502 Bad Gateway with a JSON body: {"detail": "..."}
    """
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"detail": str(exc)},
    )


@app.get("/")
async def root():
    return {"message": "Hello World!"}


@app.get("/health")
async def health():
    return {"status": "ok"}
