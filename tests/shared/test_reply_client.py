"""Tests for the stdlib HTTP client of the completion proxy."""

import asyncio
import io
import json
import socket
import threading
from http.server import BaseHTTPRequestHandler, HTTPServer
from unittest.mock import MagicMock, patch
from urllib import error as urlerror

import pytest

from core.reply_chain import RemoteReplySource, ReplyRequest, ReplySourceChain
from shared.reply_client import ReplyClientError, ReplyClientTimeoutError, post_chat, post_chat_from_config


def _response(body: str, status: int = 200):
    resp = MagicMock()
    resp.status = status
    resp.read.return_value = body.encode("utf-8")
    resp.__enter__.return_value = resp
    resp.__exit__.return_value = False
    return resp


@patch("shared.reply_client.urlrequest.urlopen")
def test_post_chat_sends_command_and_history(mock_urlopen):
    mock_urlopen.return_value = _response(json.dumps({"message": "On it.", "metadata": {"source": "remote"}}))
    history = [{"type": "user", "content": "hi"}, {"type": "agent", "content": "hello"}]

    payload = post_chat("http://proxy:8080/", "Call all leads", history, path="/api/chat", timeout_s=5)

    assert payload == {"message": "On it.", "metadata": {"source": "remote"}}
    req = mock_urlopen.call_args.args[0]
    assert req.full_url == "http://proxy:8080/api/chat"
    assert req.get_method() == "POST"
    assert json.loads(req.data) == {"command": "Call all leads", "conversationHistory": history}
    assert mock_urlopen.call_args.kwargs["timeout"] == 5


@patch("shared.reply_client.urlrequest.urlopen")
def test_http_error_keeps_status(mock_urlopen):
    mock_urlopen.side_effect = urlerror.HTTPError(
        "http://proxy/api/chat", 500, "Internal Server Error", {},
        io.BytesIO(b'{"message": "Failed to get response from AI.", "metadata": {"error": true}}'),
    )

    with pytest.raises(ReplyClientError) as exc_info:
        post_chat("http://proxy", "cmd", [])

    assert exc_info.value.status == 500
    assert not isinstance(exc_info.value, ReplyClientTimeoutError)


@patch("shared.reply_client.urlrequest.urlopen")
def test_invalid_json_is_a_client_error(mock_urlopen):
    mock_urlopen.return_value = _response("<html>oops</html>")

    with pytest.raises(ReplyClientError) as exc_info:
        post_chat("http://proxy", "cmd", [])
    assert exc_info.value.status == 200


@patch("shared.reply_client.urlrequest.urlopen")
def test_timeouts_are_reported_separately(mock_urlopen):
    mock_urlopen.side_effect = socket.timeout("timed out")
    with pytest.raises(ReplyClientTimeoutError):
        post_chat("http://proxy", "cmd", [], timeout_s=0.1)

    mock_urlopen.side_effect = urlerror.URLError(socket.timeout("timed out"))
    with pytest.raises(ReplyClientTimeoutError):
        post_chat("http://proxy", "cmd", [], timeout_s=0.1)


@patch("shared.reply_client.urlrequest.urlopen")
def test_network_error_has_no_status(mock_urlopen):
    mock_urlopen.side_effect = urlerror.URLError(ConnectionRefusedError(111, "Connection refused"))

    with pytest.raises(ReplyClientError) as exc_info:
        post_chat("http://proxy", "cmd", [])
    assert exc_info.value.status is None


@patch("shared.reply_client.post_chat")
def test_post_chat_from_config_reads_reply_chain_section(mock_post_chat):
    mock_post_chat.return_value = {"message": "ok", "metadata": {}}
    with patch.dict("shared.reply_client.CONFIG", {"reply_chain": {
        "remote_base_url": "http://edge:9000", "remote_path": "/api/chat", "timeout_s": 7,
    }}):
        post_chat_from_config("cmd", [])

    kwargs = mock_post_chat.call_args.kwargs
    assert kwargs["base_url"] == "http://edge:9000"
    assert kwargs["timeout_s"] == 7.0


def test_post_chat_from_config_requires_base_url():
    with patch.dict("shared.reply_client.CONFIG", {"reply_chain": {"remote_base_url": ""}}):
        with pytest.raises(ReplyClientError):
            post_chat_from_config("cmd", [])


class _CreatedHandler(BaseHTTPRequestHandler):
    """Completion proxy stand-in that answers every POST with 201 and a valid envelope."""

    def do_POST(self):
        length = int(self.headers.get("Content-Length", 0))
        self.rfile.read(length)
        body = json.dumps({"message": "hi", "metadata": {}}).encode("utf-8")
        self.send_response(201)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args):
        pass


@pytest.fixture
def created_server():
    server = HTTPServer(("127.0.0.1", 0), _CreatedHandler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield f"http://127.0.0.1:{server.server_address[1]}"
    finally:
        server.shutdown()
        server.server_close()


def test_any_2xx_status_is_a_successful_reply(created_server):
    payload = post_chat(created_server, "Call all leads", [], timeout_s=5)
    assert payload == {"message": "hi", "metadata": {}}

    chain = ReplySourceChain([
        RemoteReplySource(post_fn=lambda command, history: post_chat(created_server, command, history, timeout_s=5))
    ])
    envelope = asyncio.run(chain.get_reply(ReplyRequest(command="Call all leads")))

    assert envelope.message == "hi"
    assert envelope.metadata == {"source": "remote"}
