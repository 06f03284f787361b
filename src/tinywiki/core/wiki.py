"""Page lifecycle: turns one request into store calls and one response."""

import logging
from datetime import datetime
from typing import Any, Callable

from fastapi import Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from jinja2 import TemplateError

from tinywiki.core.errors import RenderFailure
from tinywiki.core.models import CreateForm, DeleteForm, Page, PageView, SaveForm
from tinywiki.core.parser import page_url, parse_wiki_content_with_toc
from tinywiki.core.storage import PageStore

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%a %b %d %H:%M:%S %Y"


def redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url=url, status_code=303)


class Wiki:
    """Coordinates the page store, the Markdown parser and the templates.

    Handlers read fresh from the store on every request and perform at
    most one mutating store call. Failures propagate as ``WikiError``
    subclasses for the application's error handler to turn into a
    response.
    """

    def __init__(self, store: PageStore, templates: Jinja2Templates, app_title: str):
        self.store = store
        self.templates = templates
        self.app_title = app_title

    def render(self, request: Request, name: str, **context: Any) -> HTMLResponse:
        """Render a template into an HTML response."""
        try:
            return self.templates.TemplateResponse(
                request,
                name,
                {"app_title": self.app_title, **context},
                media_type="text/html",
            )
        except TemplateError as e:
            logger.exception("Template %s failed to render", name)
            raise RenderFailure(name) from e

    def page_view(
        self,
        page: Page,
        page_exists: Callable[[str], bool] | None = None,
    ) -> PageView:
        """Convert a page's Markdown and collect the template data."""
        try:
            html, toc = parse_wiki_content_with_toc(page.content, page_exists)
        except Exception as e:
            logger.exception("Markdown for %r failed to render", page.name)
            raise RenderFailure(page.name) from e

        return PageView(
            title=page.name,
            id=page.id,
            is_new_page=page.is_new,
            raw_content=page.content,
            rendered_content=html,
            toc=toc,
            timestamp=datetime.now().strftime(TIMESTAMP_FORMAT),
        )

    async def index(self, request: Request) -> HTMLResponse:
        """List every page."""
        pages = await self.store.list_names()
        return self.render(request, "index.html", title="wiki home", pages=pages)

    async def view(self, request: Request, name: str) -> HTMLResponse:
        """Show a page, or the placeholder for a name never saved."""
        page = await self.store.get_by_name(name)
        if page is None:
            logger.debug("No page %r yet, showing placeholder", name)
            page = Page.placeholder(name)

        known = set(await self.store.list_names())
        view = self.page_view(page, page_exists=known.__contains__)
        return self.render(request, "page.html", title=view.title, page=view)

    async def create(self, form: CreateForm) -> RedirectResponse:
        """Send the browser to the page so the view decides what to show."""
        name = form.name.strip()
        return redirect(page_url(name) if name else "/wiki/")

    async def save(self, form: SaveForm) -> RedirectResponse:
        """Insert a first version or overwrite the content of a page."""
        if form.new_page:
            await self.store.create(form.title, form.markdown)
        else:
            await self.store.update(form.id, form.markdown)
        return redirect(page_url(form.title))

    async def delete(self, form: DeleteForm) -> RedirectResponse:
        """Remove a page and go back to the index."""
        await self.store.delete(form.id)
        return redirect("/")
