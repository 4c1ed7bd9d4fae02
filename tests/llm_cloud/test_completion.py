"""Tests for the completion call behind the proxy endpoint."""

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from llm_cloud.completion import COMPLETION_TEMPERATURE, CompletionError, build_provider_messages, request_completion


def _completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def test_history_roles_are_mapped_and_command_comes_last():
    history = [
        {"type": "user", "content": "Call the leads"},
        {"type": "agent", "content": "Queued 3 calls"},
        {"type": "system", "content": "note"},
    ]

    messages = build_provider_messages("Now email them", history)

    assert messages == [
        {"role": "user", "content": "Call the leads"},
        {"role": "assistant", "content": "Queued 3 calls"},
        {"role": "assistant", "content": "note"},
        {"role": "user", "content": "Now email them"},
    ]


def test_request_completion_uses_configured_model_and_fixed_temperature():
    client = MagicMock()
    client.chat.completions.create.return_value = _completion("Calling your leads now.")

    envelope = request_completion("Call all leads", [{"type": "user", "content": "hi"}], client=client)

    assert envelope.message == "Calling your leads now."
    assert envelope.metadata == {"source": "remote"}
    kwargs = client.chat.completions.create.call_args.kwargs
    assert kwargs["temperature"] == COMPLETION_TEMPERATURE == 0.7
    assert kwargs["model"] == "gpt-3.5-turbo"
    assert kwargs["messages"][-1] == {"role": "user", "content": "Call all leads"}


@patch("llm_cloud.completion.get_client")
def test_request_completion_builds_client_when_not_given(mock_get_client):
    mock_get_client.return_value.chat.completions.create.return_value = _completion("ok")

    request_completion("cmd", [])

    mock_get_client.assert_called_once_with()


@pytest.mark.parametrize("response", [SimpleNamespace(choices=[]), _completion(""), _completion(None)])
def test_empty_provider_response_raises(response):
    client = MagicMock()
    client.chat.completions.create.return_value = response

    with pytest.raises(CompletionError):
        request_completion("cmd", [], client=client)


def test_provider_errors_propagate():
    client = MagicMock()
    client.chat.completions.create.side_effect = ConnectionError("boom")

    with pytest.raises(ConnectionError):
        request_completion("cmd", [], client=client)
