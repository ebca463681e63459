"""
FastAPI main application for the Book Catalog API.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.config import config as api_config
from api.database import MISSING, BookCatalogService
from api.models import (
    BookCreatedResponse, BookDetailResponse, BookSummaryResponse, HealthResponse
)
from catalog.database import MongoDBManager
from catalog.errors import CatalogError, StorageError
from utilities.config import config
from utilities.logger import get_logger, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    setup_logging(
        log_level=config.log_level,
        log_format=config.log_format,
        log_file=config.get_log_file_path(),
        debug=config.debug
    )
    logger.info("Starting Book Catalog API")

    db_manager = MongoDBManager(
        connection_url=config.mongodb_url,
        database_name=config.mongodb_database,
        collection_name=config.mongodb_collection
    )
    try:
        await db_manager.connect(create_indexes=config.create_indexes)
    except Exception as e:
        logger.error("Failed to connect to database", error=str(e))
        raise

    app.state.db_manager = db_manager
    app.state.catalog_service = BookCatalogService(db_manager.collection)

    yield

    logger.info("Shutting down Book Catalog API")
    app.state.catalog_service = None
    await db_manager.disconnect()


def get_catalog_service(request: Request) -> BookCatalogService:
    """Return the catalog service created at startup."""
    service = getattr(request.app.state, "catalog_service", None)
    if service is None:
        raise StorageError("database service not available")
    return service


async def read_payload(request: Request) -> Dict[str, Any]:
    """
    Read a JSON or form request body as a dictionary.

    Bodies that cannot be parsed, or that are not objects, are treated as empty.
    """
    content_type = request.headers.get("content-type", "")
    try:
        if content_type.startswith(("application/x-www-form-urlencoded", "multipart/form-data")):
            form = await request.form()
            return dict(form)

        body = await request.body()
        if not body:
            return {}
        payload = await request.json()
    except ValueError:
        logger.debug("Ignoring unparseable request body", path=request.url.path)
        return {}

    return payload if isinstance(payload, dict) else {}


app = FastAPI(
    title=api_config.api_title,
    description=api_config.api_description,
    version=api_config.api_version,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=api_config.cors_origins,
    allow_credentials=api_config.cors_allow_credentials,
    allow_methods=api_config.cors_allow_methods,
    allow_headers=api_config.cors_allow_headers,
)


# Exception handlers
@app.exception_handler(CatalogError)
async def catalog_exception_handler(request: Request, exc: CatalogError):
    """Map catalog errors to plain text responses."""
    if exc.status_code >= 500:
        logger.error("Catalog request failed", error=exc.message, path=request.url.path)
    return PlainTextResponse(exc.message, status_code=exc.status_code)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions."""
    return PlainTextResponse(str(exc.detail), status_code=exc.status_code, headers=exc.headers)


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions."""
    logger.error("Unhandled exception", error=str(exc), path=request.url.path)
    return PlainTextResponse(
        "internal server error",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
    )


# Health check endpoint
@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check(request: Request):
    """Health check endpoint."""
    service = getattr(request.app.state, "catalog_service", None)
    db_status = "unavailable"
    health_info = {}
    if service:
        health_info = await service.health_check()
        db_status = health_info.get("status", "unknown")

    return HealthResponse(
        status="healthy" if db_status == "healthy" else "degraded",
        timestamp=datetime.now(timezone.utc),
        version=api_config.api_version,
        database_status=db_status,
        active_books=health_info.get("active_books"),
        deleted_books=health_info.get("deleted_books"),
        total_books=health_info.get("total_books")
    )


# Books endpoints
router = APIRouter(prefix="/books", tags=["Books"])


@router.post("", response_model=BookCreatedResponse)
async def create_book(
    payload: Dict[str, Any] = Depends(read_payload),
    service: BookCatalogService = Depends(get_catalog_service)
):
    """
    Create a book.

    - **title**: Book title (required, non-empty string)
    """
    book = await service.create_book(payload.get("title", MISSING))
    return JSONResponse(content=book.model_dump(by_alias=True))


@router.get("", response_model=List[BookSummaryResponse])
async def list_books(service: BookCatalogService = Depends(get_catalog_service)):
    """List active books with their comment counts."""
    books = await service.list_books()
    return JSONResponse(content=[book.model_dump(by_alias=True) for book in books])


@router.delete("", response_class=PlainTextResponse)
async def delete_all_books(service: BookCatalogService = Depends(get_catalog_service)):
    """Soft-delete every active book."""
    return PlainTextResponse(await service.delete_all_books())


@router.get("/{book_id}", response_model=BookDetailResponse)
async def get_book(
    book_id: str,
    service: BookCatalogService = Depends(get_catalog_service)
):
    """
    Get a single book with its comments.

    - **book_id**: Book identifier (MongoDB ObjectId)
    """
    book = await service.get_book(book_id)
    return JSONResponse(content=book.model_dump(by_alias=True))


@router.delete("/{book_id}", response_class=PlainTextResponse)
async def delete_book(
    book_id: str,
    service: BookCatalogService = Depends(get_catalog_service)
):
    """Soft-delete a single book."""
    return PlainTextResponse(await service.delete_book(book_id))


@router.post("/{book_id}", response_model=BookDetailResponse)
async def add_comment(
    book_id: str,
    payload: Dict[str, Any] = Depends(read_payload),
    service: BookCatalogService = Depends(get_catalog_service)
):
    """
    Append a comment to a book.

    - **book_id**: Book identifier (MongoDB ObjectId)
    - **comment**: Comment text (required, non-empty string)
    """
    book = await service.add_comment(book_id, payload.get("comment", MISSING))
    return JSONResponse(content=book.model_dump(by_alias=True))


app.include_router(router, prefix=api_config.api_prefix)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "api.main:app",
        host=api_config.host,
        port=api_config.port,
        reload=api_config.debug,
        log_level=api_config.log_level.lower()
    )
