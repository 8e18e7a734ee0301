# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Unit tests for failed-response helpers."""

from __future__ import annotations

import json

import pytest
import requests

from omnibase_vault.transport import extract_vault_error_message, is_server_error

pytestmark = [pytest.mark.unit]


def _response(status: int, content: bytes = b"", reason: str = "") -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response._content = content
    response.reason = reason
    return response


class TestExtractVaultErrorMessage:
    def test_single_element_unwrapped(self) -> None:
        response = _response(
            400, json.dumps({"errors": ["invalid secret id"]}).encode()
        )

        assert extract_vault_error_message(response) == "invalid secret id"

    def test_many_elements_joined(self) -> None:
        response = _response(400, json.dumps({"errors": ["one", "two"]}).encode())

        assert extract_vault_error_message(response) == "[one, two]"

    def test_falls_back_to_body_text(self) -> None:
        response = _response(502, b"upstream connect error\n")

        assert extract_vault_error_message(response) == "upstream connect error"

    def test_empty_errors_falls_back_to_body(self) -> None:
        response = _response(
            504, json.dumps({"errors": []}).encode(), reason="Gateway Timeout"
        )

        assert extract_vault_error_message(response) == json.dumps({"errors": []})

    def test_empty_body_falls_back_to_reason(self) -> None:
        response = _response(507, reason="Insufficient Storage")

        assert extract_vault_error_message(response) == "Insufficient Storage"

    def test_no_reason(self) -> None:
        assert extract_vault_error_message(_response(505)) == "HTTP 505"


class TestIsServerError:
    @pytest.mark.parametrize("status", [500, 503, 504, 505, 507, 599])
    def test_server_statuses(self, status: int) -> None:
        assert is_server_error(status) is True

    @pytest.mark.parametrize("status", [None, 200, 400, 404, 429, 600])
    def test_other_statuses(self, status: int | None) -> None:
        assert is_server_error(status) is False
