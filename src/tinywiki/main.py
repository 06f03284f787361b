"""TinyWiki FastAPI application."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from tinywiki.config import Settings, settings as default_settings
from tinywiki.core.errors import WikiError
from tinywiki.core.models import CreateForm, DeleteForm, SaveForm
from tinywiki.core.storage import PageStore, SQLPageStore
from tinywiki.core.wiki import Wiki, redirect

logger = logging.getLogger(__name__)

templates_path = Path(__file__).parent / "templates"
static_path = Path(__file__).parent / "static"


def get_wiki(request: Request) -> Wiki:
    """Return the coordinator bound to the running application."""
    return request.app.state.wiki


def create_app(
    settings: Settings | None = None,
    store: PageStore | None = None,
) -> FastAPI:
    """Build the application with its page store.

    Args:
        settings: Configuration; the environment-derived one by default.
        store: Page store to use instead of one built from ``settings``.
    """
    settings = settings or default_settings
    if store is None:
        if settings.database_url is None:
            settings.data_dir.mkdir(parents=True, exist_ok=True)
        store = SQLPageStore(
            settings.resolved_database_url,
            pool_size=settings.pool_size,
            pool_timeout=settings.pool_timeout,
            query_timeout=settings.query_timeout,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Create the schema before serving and release the pool after."""
        await store.init_schema()
        yield
        await store.dispose()

    app = FastAPI(
        title=settings.app_title,
        debug=settings.debug,
        lifespan=lifespan,
    )

    templates = Jinja2Templates(directory=str(templates_path))
    app.mount("/static", StaticFiles(directory=str(static_path)), name="static")

    app.state.settings = settings
    app.state.store = store
    app.state.wiki = Wiki(store, templates, settings.app_title)

    @app.exception_handler(WikiError)
    async def wiki_error(request: Request, exc: WikiError) -> HTMLResponse:
        logger.error(
            "%s %s failed: %s(%s)",
            request.method,
            request.url.path,
            type(exc).__name__,
            exc,
        )
        return templates.TemplateResponse(
            request,
            "error.html",
            {
                "app_title": settings.app_title,
                "title": "Error",
                "message": exc.message,
            },
            status_code=exc.status_code,
            media_type="text/html",
        )

    @app.get("/", response_class=HTMLResponse)
    async def index(request: Request):
        """Home page - list all pages."""
        return await get_wiki(request).index(request)

    @app.get("/wiki/")
    async def wiki_root():
        """Blank page names land here; send them to the index."""
        return redirect("/")

    @app.get("/wiki/{page}", response_class=HTMLResponse)
    async def view_page(request: Request, page: str):
        """View a wiki page, stored or not."""
        return await get_wiki(request).view(request, page)

    @app.post("/create", response_class=RedirectResponse)
    async def create_page(request: Request, name: str | None = Form(None)):
        """Go to the page named in the form."""
        form = CreateForm.from_fields(name=name)
        return await get_wiki(request).create(form)

    @app.post("/save", response_class=RedirectResponse)
    async def save_page(
        request: Request,
        page_id: str | None = Form(None, alias="id"),
        title: str | None = Form(None),
        markdown: str | None = Form(None),
        new_page: str | None = Form(None, alias="newPage"),
    ):
        """Save page content."""
        form = SaveForm.from_fields(
            id=page_id, title=title, markdown=markdown, new_page=new_page
        )
        return await get_wiki(request).save(form)

    @app.post("/delete", response_class=RedirectResponse)
    async def delete_page(
        request: Request, page_id: str | None = Form(None, alias="id")
    ):
        """Delete a page."""
        form = DeleteForm.from_fields(id=page_id)
        return await get_wiki(request).delete(form)

    return app
