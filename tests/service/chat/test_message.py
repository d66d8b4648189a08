import pytest
from sqlalchemy import select

import marketchat.service.chat.message as message_module
from marketchat.client.db.psql import session_scope
from marketchat.db.models.message import ActionKind, Message
from marketchat.service.chat.attachment import AttachmentKind
from marketchat.service.chat.conversation import start_conversation


@pytest.fixture
def pair(make_user):
    buyer = make_user("Ana")
    vendor = make_user("Bruno", tipo="vendedor", nome_loja="Loja do Bruno", foto="bruno.png")
    return buyer, vendor, start_conversation(buyer, vendor)


def test_send_then_list_keeps_own_message_unread(pair):
    buyer, _, conversation_id = pair

    message_module.send_message(conversation_id, buyer, "olá")
    messages = message_module.list_messages(conversation_id, buyer)

    assert len(messages) == 1
    assert messages[0].remetente_id == buyer
    assert messages[0].lida is False
    assert messages[0].is_system is False
    assert messages[0].tipo_acao == ActionKind.TEXT.value
    assert messages[0].nome == "Ana"


def test_listing_marks_counterpart_messages_read(pair):
    buyer, vendor, conversation_id = pair
    message_module.send_message(conversation_id, buyer, "quero comprar")
    message_module.send_message(conversation_id, vendor, "claro")
    message_module.send_message(conversation_id, vendor, "qual tamanho?")

    messages = message_module.list_messages(conversation_id, buyer)

    assert [m.conteudo for m in messages] == ["quero comprar", "claro", "qual tamanho?"]
    assert [m.lida for m in messages] == [False, True, True]
    assert messages[1].foto_perfil == "bruno.png"


def test_list_messages_for_non_participant_is_empty(pair, make_user):
    buyer, _, conversation_id = pair
    message_module.send_message(conversation_id, buyer, "olá")

    assert message_module.list_messages(conversation_id, make_user("Intruso")) == []
    assert message_module.list_messages(9999, buyer) == []


def test_send_message_with_attachment(pair):
    buyer, _, conversation_id = pair
    attachment = message_module.StoredAttachment(url="chat-1-1.png", name="foto.png", kind=AttachmentKind.IMAGE)

    message_module.send_message(conversation_id, buyer, "", attachment)

    with session_scope() as db:
        stored = db.execute(select(Message)).scalar_one()
        assert stored.tipo_acao == "imagem"
        assert stored.anexo_url == "chat-1-1.png"
        assert stored.anexo_nome == "foto.png"
        assert stored.anexo_tipo == "imagem"


def test_send_message_rejects_non_participant(pair, make_user):
    _, _, conversation_id = pair

    with pytest.raises(message_module.NotParticipant):
        message_module.send_message(conversation_id, make_user("Intruso"), "spam")


def test_unread_summary_counts_only_incoming(pair, make_user):
    buyer, vendor, conversation_id = pair
    other_vendor = make_user("Carla", tipo="vendedor")
    second = start_conversation(other_vendor, buyer)

    message_module.send_message(conversation_id, buyer, "oi")
    message_module.send_message(conversation_id, vendor, "oi!")
    message_module.send_message(second, other_vendor, "promoção")

    summary = message_module.unread_summary(buyer)

    assert summary.unread == 2
    assert summary.hasNew is True
    assert summary.from_ == "Carla"
    assert summary.preview == "promoção"
    assert summary.lastId is not None

    message_module.list_messages(conversation_id, buyer)
    assert message_module.unread_summary(buyer).unread == 1
    assert message_module.unread_summary(vendor).unread == 1

    message_module.list_messages(conversation_id, vendor)
    assert message_module.unread_summary(vendor).unread == 0


def test_unread_summary_without_messages(pair):
    buyer, _, _ = pair

    summary = message_module.unread_summary(buyer)

    assert summary.unread == 0
    assert summary.hasNew is False
    assert summary.preview == ""
    assert summary.from_ == "Sistema"


def test_toast_preview_mapping():
    assert message_module.toast_preview("compra", "x") == "📦 Novo Pedido Recebido!"
    assert message_module.toast_preview("status", "Status atualizado: PAGO") == "🔄 Status atualizado: PAGO"
    assert message_module.toast_preview("audio", "") == "🎤 Enviou um áudio"
    assert message_module.toast_preview("sistema", "aviso") == "aviso"
