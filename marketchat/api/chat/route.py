import asyncio
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import JSONResponse

import marketchat.config.config as configs
from marketchat.api.deps import current_user
from marketchat.model.chat.chat_request import StartChatRequest, StatusUpdateRequest
from marketchat.model.chat.chat_response import SendResponse, StartChatResponse, UnreadCheckResponse
from marketchat.model.chat.contact_response import ContactItem
from marketchat.model.chat.conversation_response import ConversationItem
from marketchat.model.chat.message_response import MessageItem
from marketchat.model.order.order_response import OrderDetailResponse
from marketchat.model.session.session_user import SessionUser
from marketchat.service.chat.attachment import (
    AttachmentTooLarge,
    classify_attachment,
    generate_filename,
    remove_attachment,
    store_attachment,
)
from marketchat.service.chat.contact import list_contacts
from marketchat.service.chat.conversation import list_conversations, start_conversation
from marketchat.service.chat.message import (
    NotParticipant,
    StoredAttachment,
    list_messages,
    send_message,
    unread_summary,
)
from marketchat.service.order.order import OrderNotFound, get_order_detail, update_status_in_chat

logger = logging.getLogger(__name__)

router = APIRouter()


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@router.get("/conversas", response_model=List[ConversationItem])
async def conversations(q: str = "", user: SessionUser = Depends(current_user)):
    try:
        return await asyncio.to_thread(list_conversations, user.id, q.strip())
    except Exception:
        logger.exception("listing conversations failed user=%s", user.id)
        return []


@router.get("/mensagens/{conversation_id}", response_model=List[MessageItem])
async def messages(conversation_id: str, user: SessionUser = Depends(current_user)):
    if not conversation_id.isdigit():
        return []
    try:
        return await asyncio.to_thread(list_messages, int(conversation_id), user.id)
    except Exception:
        logger.exception("listing messages failed conversation=%s user=%s", conversation_id, user.id)
        return []


@router.post("/enviar", response_model=SendResponse)
async def send(
    conversa_id: int = Form(...),
    conteudo: str = Form(""),
    tipo_especifico: str = Form(""),
    anexo: Optional[UploadFile] = File(None),
    user: SessionUser = Depends(current_user),
):
    content = conteudo.strip()
    has_file = anexo is not None and bool(anexo.filename)
    if not has_file and not content:
        return _error(400, "Mensagem vazia")

    attachment = None
    try:
        if has_file:
            filename = generate_filename(anexo.filename, anexo.content_type)
            await asyncio.to_thread(
                store_attachment, anexo.file, filename, configs.CHAT_UPLOAD_DIR, configs.CHAT_MAX_UPLOAD_BYTES
            )
            attachment = StoredAttachment(
                url=filename,
                name=anexo.filename,
                kind=classify_attachment(anexo.content_type, tipo_especifico),
            )
        await asyncio.to_thread(send_message, conversa_id, user.id, content, attachment)
        return SendResponse(success=True)
    except AttachmentTooLarge as exc:
        return _error(413, str(exc))
    except NotParticipant:
        if attachment is not None:
            remove_attachment(attachment.url, configs.CHAT_UPLOAD_DIR)
        return _error(403, "Acesso negado")
    except Exception as exc:
        logger.exception("sending message failed conversation=%s user=%s", conversa_id, user.id)
        if attachment is not None:
            remove_attachment(attachment.url, configs.CHAT_UPLOAD_DIR)
        return _error(500, str(exc))


@router.post("/iniciar", response_model=StartChatResponse)
async def start(req: StartChatRequest, user: SessionUser = Depends(current_user)):
    if req.target_id == user.id:
        return _error(400, "Não é possível iniciar conversa consigo mesmo")
    try:
        conversation_id = await asyncio.to_thread(start_conversation, user.id, req.target_id, req.pedido_id)
        return StartChatResponse(id=conversation_id)
    except Exception as exc:
        logger.exception("starting conversation failed user=%s target=%s", user.id, req.target_id)
        return _error(500, str(exc))


@router.get("/check", response_model=UnreadCheckResponse)
async def check(user: SessionUser = Depends(current_user)):
    try:
        return await asyncio.to_thread(unread_summary, user.id)
    except Exception:
        logger.exception("unread check failed user=%s", user.id)
        return UnreadCheckResponse(unread=0, hasNew=False)


@router.get("/pedido-detalhes/{order_id}", response_model=Optional[OrderDetailResponse])
async def order_detail(order_id: str, user: SessionUser = Depends(current_user)):
    if not order_id.isdigit():
        return None
    try:
        return await asyncio.to_thread(get_order_detail, int(order_id))
    except Exception:
        logger.exception("order detail failed order=%s", order_id)
        return None


@router.post("/status", response_model=SendResponse)
async def order_status(req: StatusUpdateRequest, user: SessionUser = Depends(current_user)):
    try:
        await asyncio.to_thread(update_status_in_chat, req.pedido_id, req.status, req.conversa_id, user.id)
        return SendResponse(success=True)
    except OrderNotFound:
        logger.info("status update ignored, unknown order=%s user=%s", req.pedido_id, user.id)
        return SendResponse(success=False)
    except NotParticipant:
        return _error(403, "Acesso negado")
    except Exception as exc:
        logger.exception("status update failed order=%s user=%s", req.pedido_id, user.id)
        return _error(500, str(exc))


@router.get("/usuarios-disponiveis", response_model=List[ContactItem])
async def contacts(user: SessionUser = Depends(current_user)):
    try:
        return await asyncio.to_thread(list_contacts, user.id)
    except Exception:
        logger.exception("listing contacts failed user=%s", user.id)
        return []
