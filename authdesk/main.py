import time

from fastapi import Request
from nicegui import ui, app

from authdesk.auth import create_auth_routes
from authdesk.config import STORAGE_SECRET, PORT
from authdesk.frontend import create_pages
from authdesk.init_db import seed_database
from authdesk.logger import log

if not STORAGE_SECRET:
    log.warning("STORAGE_SECRET not found! Using default.")
    STORAGE_SECRET = "change_me_please_in_prod"


# --- REQUEST LOG ---
@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed = (time.perf_counter() - started) * 1000
    log.info(
        f"Handled {request.url.path} | {response.status_code} | {elapsed:.1f} ms "
        f"| host={request.headers.get('host', '')} scheme={request.url.scheme}"
    )
    return response


def main():
    # migrations + seed data, raises (and stops startup) on failure
    seed_database()

    create_auth_routes()  # /login
    create_pages()        # /, /users

    log.info("Starting AuthDesk...")
    ui.run(
        title="AuthDesk",
        port=PORT,
        reload=False,
        show=False,
        storage_secret=STORAGE_SECRET,
        favicon="🔐",
    )


if __name__ in {"__main__", "__mp_main__"}:
    main()
