import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import Body, Depends, FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, HTMLResponse, JSONResponse, PlainTextResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, ConfigDict

from config import configure_logging, settings
from library import Library
from utils.validators import parse_book_id

configure_logging()
logger = logging.getLogger(__name__)

NOT_FOUND_TEXT = "Book not found"


# --- Models ---
class BookModel(BaseModel):
    model_config = ConfigDict(extra="allow")

    # Stored records are returned as they are, so fields are not type checked
    id: int
    title: Any = None
    author: Any = None
    cover: Any = None
    status: Any = None
    dueDate: Any = None


class BookCreateModel(BaseModel):
    # A client supplied "id" is ignored, ids are always generated here
    title: Optional[str] = None
    author: Optional[str] = None
    status: Optional[str] = None
    dueDate: Optional[str] = None
    cover: Optional[str] = None


class BookCreatedModel(BaseModel):
    message: str
    book: BookModel


class HealthModel(BaseModel):
    status: str
    booksCount: int


# --- Helper Functions ---
def get_library(request: Request) -> Library:
    """Dependency returning the catalog owned by this app."""
    return request.app.state.library


def _not_found() -> PlainTextResponse:
    return PlainTextResponse(NOT_FOUND_TEXT, status_code=404)


def _error(message: str, status_code: int = 500, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **extra})


def _error_page(message: str, status_code: int) -> HTMLResponse:
    html = f"""
        <html>
          <head><title>Error</title></head>
          <body>
            <h2>{message}</h2>
            <a href="/new">Go back</a>
          </body>
        </html>
    """
    return HTMLResponse(content=html, status_code=status_code)


def create_app(library: Optional[Library] = None, static_dir: Optional[str] = None) -> FastAPI:
    """Build the application around one catalog instance."""
    pages_dir = Path(static_dir or settings.static_dir)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.library.reload()
        yield

    app = FastAPI(title=settings.app_name, version=settings.app_version, lifespan=lifespan)
    app.state.library = library or Library()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # --- JSON API ---
    @app.get("/api/books", response_model=List[BookModel], response_model_exclude_unset=True)
    def list_books(library: Library = Depends(get_library)):
        """All books as a JSON array."""
        try:
            return [b.to_dict() for b in library.list_books()]
        except Exception:
            logger.exception("Error reading books")
            return _error("Failed to load books", books=library.cache.snapshot())

    @app.post("/api/books", response_model=BookCreatedModel)
    def add_book(payload: Optional[BookCreateModel] = None, library: Library = Depends(get_library)):
        """Add a book and echo it back."""
        payload = payload or BookCreateModel()
        try:
            book = library.add_book(
                payload.title,
                payload.author,
                status=payload.status,
                due_date=payload.dueDate,
                cover=payload.cover,
            )
        except ValueError as e:
            return _error(str(e), status_code=400)
        except Exception:
            logger.exception("Error adding book via API")
            return _error("Failed to add book")
        return {"message": "Book added successfully", "book": book.to_dict()}

    @app.get("/api/health", response_model=HealthModel)
    def health(library: Library = Depends(get_library)):
        """Liveness check reporting how many books are held in memory."""
        return {"status": "OK", "booksCount": library.count()}

    # --- Single book ---
    @app.get("/books/{book_id}", response_model=BookModel, response_model_exclude_unset=True)
    def get_book(book_id: str, library: Library = Depends(get_library)):
        try:
            parsed = parse_book_id(book_id)
            book = library.find_book(parsed) if parsed is not None else None
        except Exception:
            logger.exception("Error getting book %s", book_id)
            return _error("Failed to get book")
        if book is None:
            return _not_found()
        return book.to_dict()

    @app.put("/books/{book_id}", response_model=BookModel, response_model_exclude_unset=True)
    def update_book(book_id: str, changes: Optional[Dict[str, Any]] = Body(None),
                    library: Library = Depends(get_library)):
        """Merge the submitted fields onto an existing book."""
        try:
            parsed = parse_book_id(book_id)
            book = library.update_book(parsed, changes or {}) if parsed is not None else None
        except Exception:
            logger.exception("Error updating book %s", book_id)
            return _error("Failed to update book")
        if book is None:
            return _not_found()
        return book.to_dict()

    @app.delete("/books/{book_id}")
    def delete_book(book_id: str, library: Library = Depends(get_library)):
        try:
            parsed = parse_book_id(book_id)
            removed = library.remove_book(parsed) if parsed is not None else False
        except Exception:
            logger.exception("Error deleting book %s", book_id)
            return _error("Failed to delete book")
        if not removed:
            return _not_found()
        return {"message": "Book deleted successfully"}

    # --- HTML form ---
    @app.post("/newbook")
    def add_book_form(
        title: Optional[str] = Form(None),
        author: Optional[str] = Form(None),
        status: Optional[str] = Form(None),
        duedate: Optional[str] = Form(None),
        cover: Optional[UploadFile] = File(None),
        library: Library = Depends(get_library),
    ):
        """Add a book from the new-book form and go back to the listing."""
        if cover is not None and cover.filename:
            # No persistent image storage, the placeholder cover is used instead
            logger.info("Discarding uploaded cover %s", cover.filename)
        try:
            library.add_book(title, author, status=status, due_date=duedate)
        except ValueError:
            return _error_page("Error: Title and author are required", 400)
        except Exception:
            logger.exception("Error adding book")
            return _error_page("Error adding book", 500)
        return RedirectResponse(url="/home", status_code=302)

    # --- Static pages ---
    def _page(name: str) -> FileResponse:
        path = pages_dir / name
        if not path.is_file():
            raise HTTPException(status_code=404, detail="Page not found")
        return FileResponse(path, media_type="text/html")

    @app.get("/", include_in_schema=False)
    def read_root():
        return _page("index.html")

    @app.get("/home", include_in_schema=False)
    def read_home():
        return _page("index.html")

    @app.get("/new", include_in_schema=False)
    def read_new_book_form():
        return _page("newbook.html")

    @app.get("/test", include_in_schema=False)
    def read_test_page():
        return _page("test.html")

    if pages_dir.is_dir():
        app.mount("/static", StaticFiles(directory=str(pages_dir)), name="static")

    return app


app = create_app()
