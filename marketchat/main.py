import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles

import marketchat.config.config as configs
from marketchat.api.chat.route import router as ChatRouter
from marketchat.api.deps import AuthRequired
from marketchat.api.page.route import router as PageRouter
from marketchat.api.vendor.route import router as VendorRouter
from marketchat.db.session import Base, engine
from marketchat.db import models  # noqa: F401

logging.basicConfig(
    level=configs.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).resolve().parent / "static"

app = FastAPI(title="kuanda_marketchat", version="0.1.0")
app.include_router(router=ChatRouter, prefix="/api/chat")
app.include_router(router=VendorRouter, prefix="/api/vendedor")
app.include_router(router=PageRouter)
app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")
app.mount("/uploads/chat", StaticFiles(directory=configs.CHAT_UPLOAD_DIR, check_dir=False), name="chat_uploads")


@app.on_event("startup")
def create_tables() -> None:
    configs.CHAT_UPLOAD_DIR.mkdir(parents=True, exist_ok=True)
    Base.metadata.create_all(bind=engine)
    logger.info("chat schema ready, uploads at %s", configs.CHAT_UPLOAD_DIR)


@app.exception_handler(AuthRequired)
async def auth_required_handler(request: Request, exc: AuthRequired):
    if exc.wants_json:
        return JSONResponse(status_code=401, content={"error": "Auth required"})
    return RedirectResponse("/login", status_code=303)


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})
