import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from auctions import router as auctions_router
from banners import router as banners_router
from contacts import router as contacts_router
from core import settings
from core.db import Database
from prices import router as prices_router
from projects import router as projects_router

logging.basicConfig(
    level=settings.log_level(),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger("api")

API_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(app: FastAPI):
    # One pool per process, shared through app.state.
    db = Database.from_env()
    await db.connect()
    app.state.db = db
    try:
        yield
    finally:
        await db.close()


app = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins(),
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH"],
    allow_headers=["*"],
)

if settings.is_development():

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        logger.info(
            "request method=%s path=%s status=%s duration_ms=%.1f",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - started) * 1000,
        )
        return response


app.include_router(projects_router.router, prefix=API_PREFIX, tags=["projects"])
app.include_router(auctions_router.router, prefix=API_PREFIX, tags=["auctions"])
app.include_router(prices_router.router, prefix=API_PREFIX, tags=["prices"])
app.include_router(banners_router.router, prefix=API_PREFIX, tags=["banners"])
app.include_router(contacts_router.router, prefix=API_PREFIX, tags=["contacts"])

app.mount("/uploads", StaticFiles(directory=settings.uploads_dir(), check_dir=False), name="uploads")


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/")
def root() -> dict:
    return {"message": "auction showcase api"}


# Must stay last: anything not matched above is reported as an unknown route.
@app.api_route("/{path:path}", methods=["GET", "POST", "PUT", "DELETE", "PATCH"], include_in_schema=False)
async def unknown_route(request: Request, path: str) -> None:
    raise HTTPException(status_code=404, detail=f"Can't find this route {request.url.path}")
