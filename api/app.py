"""
api/app.py
FastAPI application entry point.
Run with:  uvicorn api.app:app --port 8000
"""
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from booking.errors import BookingError, InvalidStatus, LeadNotFound, ListingNotFound, SubmissionInvalid
from booking.service import BookingService
from config.settings import settings
from monitoring import get_logger
from notifications.sender import build_sender
from pricing_engine.errors import QuoteError
from storage.sqlite_store import SQLiteStore

log = get_logger(__name__)

_BOOKING_STATUS = {
    ListingNotFound:   404,
    LeadNotFound:      404,
    SubmissionInvalid: 422,
    InvalidStatus:     422,
}


def create_app(store: Optional[SQLiteStore] = None, sender=None) -> FastAPI:
    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        description=(
            "Charter pricing and booking requests for boat listings. "
            "Quotes Hourly, Daily and Stay charters from a listing's rate catalog, "
            "records booking leads and reports them for the admin desk."
        ),
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # One store and one sender per process, shared by every request
    app.state.settings = settings
    app.state.store    = store or SQLiteStore()
    app.state.booking  = BookingService(
        store=app.state.store,
        sender=sender or build_sender(settings),
        default_commission_rate=settings.default_commission_rate,
    )

    @app.exception_handler(QuoteError)
    async def _quote_handler(request: Request, exc: QuoteError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={"success": False, "error": exc.code, "detail": exc.message},
        )

    @app.exception_handler(BookingError)
    async def _booking_handler(request: Request, exc: BookingError) -> JSONResponse:
        status_code = _BOOKING_STATUS.get(type(exc), 400)
        detail = exc.issues if isinstance(exc, SubmissionInvalid) else str(exc)
        return JSONResponse(
            status_code=status_code,
            content={"success": False, "error": exc.code, "detail": detail},
        )

    @app.exception_handler(Exception)
    async def _global_handler(request: Request, exc: Exception) -> JSONResponse:
        log.error("Unhandled error", path=request.url.path, error=str(exc))
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "Internal server error", "detail": str(exc)},
        )

    from api.routes import router
    app.include_router(router, prefix="/api/v1", tags=["Charter Quotes"])

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("api.app:app", host=settings.api_host, port=settings.api_port, log_level="info")
