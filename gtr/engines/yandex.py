"""Yandex Translate backend using the mobile-style JSON API."""

from __future__ import annotations

import json
import math
import re
import secrets
import sys
from typing import Any, Optional, Tuple, Union
from urllib.parse import urlencode

import requests

from gtr.engine import (
    MAX_READ_BODY,
    Capabilities,
    Engine,
    EngineError,
    LanguageIdentifier,
    TranslateInput,
    TranslateOutput,
    register,
)
from gtr.net import HttpClient, new_client, new_shared_client, truncate

TRANSLATE_BASE = "https://translate.yandex.net"
TRANSLATE_URL = TRANSLATE_BASE + "/api/v1/tr.json/translate"

_ACCEPT = "application/json, text/plain, */*"
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")

Raw = Union[str, bytes]


def new_ucid() -> str:
    """Return a fresh 32-character lower-case hex client id."""
    return secrets.token_hex(16)


def strip_digraph(code: str) -> str:
    """Drop a region or script suffix: "zh-CN" becomes "zh"."""
    code = code.strip()
    dash = code.find("-")
    return code[:dash] if dash > 0 else code


def _sprint(value: Any) -> str:
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _json_number_to_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str):
        match = _LEADING_INT.match(value)
        return int(match.group(1)) if match else None
    return None


def _load_object(raw: Raw) -> dict:
    try:
        root = json.loads(raw)
    except ValueError as exc:
        raise EngineError(f"yandex: invalid JSON: {exc}") from exc
    if not isinstance(root, dict):
        raise EngineError("yandex: invalid JSON: root is not an object")
    return root


def parse_translate_json(raw: Raw) -> str:
    """Return the translated text of a response body."""
    root = _load_object(raw)
    code = _json_number_to_int(root.get("code"))
    if code is not None and code not in (0, 200):
        message = root.get("message")
        text = message if isinstance(message, str) else _sprint(message)
        if not text.strip():
            text = f"code {code}"
        raise EngineError(f"yandex: {text}")
    value = root.get("text")
    if isinstance(value, list):
        if not value:
            raise EngineError("yandex: empty text array")
        if isinstance(value[0], str):
            return value[0]
        raise EngineError("yandex: unexpected text[0] type")
    if isinstance(value, str):
        return value
    raise EngineError("yandex: missing or invalid text field")


def _parse_lang_field(raw: Raw) -> str:
    root = _load_object(raw)
    value = root.get("lang")
    if not isinstance(value, str) or not value.strip():
        raise EngineError("yandex: missing lang in response")
    return value


def parse_detected_source_from_lang_json(raw: Raw) -> str:
    """Return the source half of the "lang" field ("de-en" gives "de")."""
    value = _parse_lang_field(raw)
    dash = value.find("-")
    if dash <= 0 or dash >= len(value) - 1:
        raise EngineError(f'yandex: unexpected lang field "{value}"')
    return value[:dash]


def _read_body(response: requests.Response) -> bytes:
    chunks = []
    size = 0
    try:
        for chunk in response.iter_content(65536):
            size += len(chunk)
            chunks.append(chunk)
            if size > MAX_READ_BODY:
                raise EngineError(f"yandex: response body exceeds {MAX_READ_BODY} bytes")
    except requests.RequestException as exc:
        raise EngineError(f"yandex: read body: {exc}") from exc
    finally:
        response.close()
    return b"".join(chunks)


class YandexEngine(Engine, LanguageIdentifier):
    """Yandex Translate; every instance carries its own client id."""

    name = "yandex"

    def __init__(self, http: Optional[HttpClient] = None) -> None:
        self.http = http if http is not None else new_client()
        self.ucid = new_ucid()

    def _translate_post(self, request: TranslateInput) -> Tuple[bytes, int]:
        source, target = strip_digraph(request.source), strip_digraph(request.target)
        pair = target if source == "auto" else f"{source}-{target}"
        params = [
            ("lang", pair),
            ("srv", "android"),
            ("text", request.text),
            ("ucid", self.ucid),
        ]
        url = TRANSLATE_URL + "?" + urlencode(params)
        if request.debug:
            print(f"yandex debug: POST {url}", file=sys.stderr)
        headers = {
            "Content-Type": "application/x-www-form-urlencoded",
            "Accept": _ACCEPT,
        }
        try:
            response = self.http.post(url, headers=headers, data="")
        except requests.RequestException as exc:
            raise EngineError(f"yandex: request: {exc}") from exc
        status = response.status_code
        return _read_body(response), status

    def translate(self, request: TranslateInput) -> TranslateOutput:
        body, status = self._translate_post(request)
        if request.dump:
            return TranslateOutput(text=body.decode("utf-8", "replace"))
        if status == 429:
            raise EngineError(f"yandex: rate limiting is in effect (HTTP {status})")
        if status >= 400:
            raise EngineError(f"yandex: HTTP {status}: {truncate(body, 200)}")
        text = parse_translate_json(body)
        if request.brief:
            text = text.strip()
        return TranslateOutput(text=text)

    def identify_language(self, text: str, host_lang: str) -> str:
        host_lang = host_lang or "en"
        if not text.strip():
            raise EngineError("yandex: empty text")
        request = TranslateInput(
            text=text, source="auto", target="en", host_lang=host_lang, brief=True
        )
        body, status = self._translate_post(request)
        if status >= 400:
            raise EngineError(f"yandex: identify HTTP {status}")
        return parse_detected_source_from_lang_json(body)


register(
    "yandex",
    lambda: YandexEngine(new_shared_client()),
    Capabilities(supports_tts=False, supports_dictionary=False),
)