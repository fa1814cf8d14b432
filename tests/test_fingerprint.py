import base64
import hashlib

from flask import Flask, request

from commentbox.utils.fingerprint import (
    CLIENT_ID_LENGTH,
    client_address,
    client_id_from_request,
    derive_client_id,
)


def _expected(raw: str) -> str:
    return base64.b64encode(hashlib.sha256(raw.encode("utf-8")).digest()).decode()[:24]


def test_derive_is_deterministic():
    assert derive_client_id("1.2.3.4", "X") == derive_client_id("1.2.3.4", "X")


def test_derive_matches_plain_digest_of_concatenation():
    assert derive_client_id("1.2.3.4", "Mozilla/5.0") == _expected("1.2.3.4Mozilla/5.0")


def test_different_user_agents_give_different_ids():
    assert derive_client_id("1.2.3.4", "X") != derive_client_id("1.2.3.4", "Y")


def test_missing_inputs_use_sentinels():
    cid = derive_client_id(None, None)
    assert cid == _expected("unknown")
    assert len(cid) == CLIENT_ID_LENGTH


def test_salt_changes_identifier():
    assert derive_client_id("1.2.3.4", "X", salt="s1") != derive_client_id("1.2.3.4", "X")


def test_address_header_precedence():
    app = Flask(__name__)
    headers = {"CF-Connecting-IP": "9.9.9.9", "X-Forwarded-For": "5.5.5.5"}
    with app.test_request_context("/", headers=headers, environ_base={"REMOTE_ADDR": "127.0.0.1"}):
        assert client_address(request) == "9.9.9.9"
    with app.test_request_context("/", environ_base={"REMOTE_ADDR": "127.0.0.1"}):
        assert client_address(request) == "127.0.0.1"


def test_forwarded_for_is_not_trusted_by_default():
    app = Flask(__name__)
    ids = set()
    for i in range(3):
        with app.test_request_context("/", headers={"X-Forwarded-For": f"10.0.0.{i}", "User-Agent": "UA"},
                                      environ_base={"REMOTE_ADDR": "127.0.0.1"}):
            assert client_address(request) == "127.0.0.1"
            ids.add(client_id_from_request(request))
    assert len(ids) == 1


def test_client_id_from_request_uses_user_agent():
    app = Flask(__name__)
    with app.test_request_context("/", headers={"User-Agent": "UA-1"},
                                  environ_base={"REMOTE_ADDR": "1.2.3.4"}):
        assert client_id_from_request(request) == derive_client_id("1.2.3.4", "UA-1")
