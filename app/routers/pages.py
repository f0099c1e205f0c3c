# app/routers/pages.py
from pathlib import Path

from fastapi import APIRouter
from fastapi.responses import FileResponse, HTMLResponse, RedirectResponse

from app.core.access import DASHBOARD_PATH

router = APIRouter(tags=["Pages"], include_in_schema=False)

STATIC_DIR = Path(__file__).resolve().parent.parent / "static"

# Page title per dashboard route. Rendering is done client-side.
PAGES: dict[str, str] = {
    "/login": "Login",
    "/unauthorized": "Unauthorized",
    "/admin": "Admin",
    "/dashboard": "Dashboard",
    "/pos": "POS",
    "/items": "Items",
    "/orders": "Orders",
    "/reports": "Reports",
}

SHELL = """<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>{title}</title>
  <link rel="icon" href="/static/icon.png">
</head>
<body data-page="{page}">
  <div id="root"></div>
  <script src="/static/sw-register.js" defer></script>
</body>
</html>
"""


def _render(page: str, title: str) -> HTMLResponse:
    return HTMLResponse(SHELL.format(page=page, title=title))


@router.get("/")
def root():
    """
    Signed-in users land on the dashboard.

    The auth middleware already sent anonymous users to /login, and it
    forwards super admins from /dashboard to /admin.
    """
    return RedirectResponse(DASHBOARD_PATH)


@router.get("/sw.js")
def service_worker():
    """Service worker script used for offline caching."""
    return FileResponse(STATIC_DIR / "sw.js", media_type="application/javascript")


def _add_page(path: str, title: str) -> None:
    page = path.strip("/")

    def page_view() -> HTMLResponse:
        return _render(page, title)

    page_view.__name__ = f"{page}_page"
    router.add_api_route(path, page_view, methods=["GET"], response_class=HTMLResponse)


for _path, _title in PAGES.items():
    _add_page(_path, _title)
