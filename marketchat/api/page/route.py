from pathlib import Path

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

import marketchat.config.config as configs
from marketchat.api.deps import current_user
from marketchat.model.session.session_user import SessionUser
from marketchat.service.context.session_context import destroy_session

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parents[2] / "templates"))

router = APIRouter()


@router.get("/central-mensagens", response_class=HTMLResponse)
def chat_page(request: Request, user: SessionUser = Depends(current_user)):
    return templates.TemplateResponse(request, "chat.html", {"user": user})


@router.post("/logout")
def logout(request: Request):
    session_id = request.cookies.get(configs.SESSION_COOKIE)
    if session_id:
        destroy_session(session_id)
    response = RedirectResponse("/login", status_code=303)
    response.delete_cookie(configs.SESSION_COOKIE)
    return response
