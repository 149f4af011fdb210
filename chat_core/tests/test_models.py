import dataclasses

import pytest

from chat_core.domain.exceptions import (
    ApiError,
    BusinessError,
    GENERIC_ERROR_TEXT,
    MalformedResponseError,
    NetworkError,
    TransportError,
    describe_error,
)
from chat_core.domain.models import AttachmentRef, Message, Session


def test_models_exist():
    s = Session(user_id="alice", session_id="session_1_abc")
    assert s.created_at.tzinfo is not None
    m = Message(id="user_1", content="hi", sender="user")
    assert m.attachments is None
    assert not m.is_error
    with pytest.raises(dataclasses.FrozenInstanceError):
        m.content = "changed"


def test_attachment_is_image():
    assert AttachmentRef(name="a.png", mime_type="image/png", size_bytes=10).is_image
    assert not AttachmentRef(name="a.pdf", mime_type="application/pdf").is_image


def test_transport_error_kinds():
    assert NetworkError(code="NETWORK_ERROR", message="x").kind == "network"
    assert ApiError(code="API_ERROR", message="x", http_status=500).kind == "protocol"
    assert MalformedResponseError(code="MALFORMED_RESPONSE", message="x").kind == "malformed"
    err = ApiError(code="API_ERROR", message="x", detail="status=500 body=oops", http_status=500)
    assert isinstance(err, TransportError)
    assert isinstance(err, BusinessError)
    assert err.detail == "status=500 body=oops"
    # detail 缺省时沿用 message
    assert NetworkError(code="NETWORK_ERROR", message="refused").detail == "refused"


def test_describe_error():
    assert "Network error" in describe_error(NetworkError(code="NETWORK_ERROR", message="x"))
    assert describe_error(ApiError(code="API_ERROR", message="x", http_status=503)) == (
        "API Error: HTTP error! status: 503"
    )
    assert describe_error(MalformedResponseError(code="MALFORMED_RESPONSE", message="x")) == (
        "API Error: No answer received from API"
    )
    assert describe_error(RuntimeError("boom")) == GENERIC_ERROR_TEXT
