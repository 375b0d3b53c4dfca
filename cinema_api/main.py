import asyncio
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cinema_api.database import Base, SessionLocal, engine
from cinema_api.crud.purchase_crud import purchase_crud
from cinema_api.routers.cinema_router import router as cinema_router
from cinema_api.routers.genre_router import router as genre_router
from cinema_api.routers.hall_router import router as hall_router
from cinema_api.routers.movie_router import router as movie_router
from cinema_api.routers.purchase_router import router as purchase_router
from cinema_api.routers.setting_router import router as setting_router
from cinema_api.routers.showtime_router import router as showtime_router
from cinema_api.services.errors import DomainError
from cinema_api.utils.config import settings
from cinema_api.utils.helper import utcnow
from cinema_api.utils.middleware.logger import LoggingMiddleware, setup_logging

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(title="Cinema API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(LoggingMiddleware)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    # Every domain error is something the client can correct
    logger.info("domain_error code=%s message=%s", exc.code.value, exc.message)
    return JSONResponse(
        status_code=400,
        content={"detail": exc.message, "code": exc.code.value},
    )


def sweep_expired_holds(session_factory=SessionLocal) -> int:
    """One cleanup pass. Errors are logged so the periodic loop keeps running."""
    db = session_factory()
    try:
        count = purchase_crud.release_expired_holds(db, utcnow())
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("[Cleanup] Releasing expired seat holds failed")
        return 0
    finally:
        db.close()
    if count:
        logger.info("[Cleanup] Released %s expired seat holds", count)
    return count


async def cleanup_task():
    while True:
        sweep_expired_holds()
        await asyncio.sleep(settings.EXPIRED_HOLDS_CLEANUP_SECONDS)


@app.on_event("startup")
async def startup_event():
    Base.metadata.create_all(bind=engine)
    if settings.EXPIRED_HOLDS_CLEANUP_SECONDS > 0:
        app.state.cleanup_task = asyncio.create_task(cleanup_task())


@app.on_event("shutdown")
async def shutdown_event():
    task = getattr(app.state, "cleanup_task", None)
    if task is not None:
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass


@app.get("/")
def root():
    return {"service": "cinema-api", "status": "ok"}


app.include_router(cinema_router)
app.include_router(hall_router)
app.include_router(genre_router)
app.include_router(movie_router)
app.include_router(showtime_router)
app.include_router(purchase_router)
app.include_router(setting_router)
