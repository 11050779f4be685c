"""Apertium APy translation backend."""

from __future__ import annotations

import json
import sys
from typing import Optional, Union
from urllib.parse import urlencode

import requests

from gtr.engine import (
    MAX_READ_BODY,
    Capabilities,
    Engine,
    EngineError,
    TranslateInput,
    TranslateOutput,
    register,
)
from gtr.net import HttpClient, new_client, new_shared_client, truncate

TRANSLATE_BASE = "https://www.apertium.org"
TRANSLATE_URL = TRANSLATE_BASE + "/apy/translate"


def parse_translate_body(raw: Union[str, bytes]) -> str:
    """Return the translated text of an APy response body."""
    try:
        root = json.loads(raw)
    except ValueError as exc:
        raise EngineError(f"apertium: invalid JSON: {exc}") from exc
    if not isinstance(root, dict):
        raise EngineError("apertium: invalid JSON: root is not an object")
    if "exception" in root:
        raise EngineError(f"apertium: {root['exception']}")
    error = root.get("error")
    if isinstance(error, str) and error.strip():
        raise EngineError(f"apertium: {error}")
    data = root.get("responseData")
    if not isinstance(data, dict):
        raise EngineError("apertium: unsupported language pair or empty responseData")
    text = data.get("translatedText")
    if not isinstance(text, str) or not text.strip():
        raise EngineError("apertium: empty translatedText (pair may be unsupported)")
    return text


def _read_body(response: requests.Response) -> bytes:
    chunks = []
    size = 0
    try:
        for chunk in response.iter_content(65536):
            size += len(chunk)
            chunks.append(chunk)
            if size > MAX_READ_BODY:
                raise EngineError(f"apertium: response body exceeds {MAX_READ_BODY} bytes")
    except requests.RequestException as exc:
        raise EngineError(f"apertium: read body: {exc}") from exc
    finally:
        response.close()
    return b"".join(chunks)


class ApertiumEngine(Engine):
    """Rule-based translation through the Apertium APy service."""

    name = "apertium"

    def __init__(self, http: Optional[HttpClient] = None) -> None:
        self.http = http if http is not None else new_client()

    def translate(self, request: TranslateInput) -> TranslateOutput:
        source = request.source.strip()
        if source == "auto":
            source = "en"
        target = request.target.strip()
        url = TRANSLATE_URL + "?" + urlencode(
            [("langpair", f"{source}|{target}"), ("q", request.text)]
        )
        if request.debug:
            print(f"apertium debug: GET {url}", file=sys.stderr)
        try:
            response = self.http.get(url, headers={"Accept": "application/json, text/plain, */*"})
        except requests.RequestException as exc:
            raise EngineError(f"apertium: request: {exc}") from exc
        status = response.status_code
        body = _read_body(response)

        if request.dump:
            return TranslateOutput(text=body.decode("utf-8", "replace"))
        if status == 429:
            raise EngineError(f"apertium: rate limiting is in effect (HTTP {status})")
        if status >= 400:
            raise EngineError(f"apertium: HTTP {status}: {truncate(body, 200)}")

        text = parse_translate_body(body)
        if request.brief:
            text = text.strip()
        return TranslateOutput(text=text)


register(
    "apertium",
    lambda: ApertiumEngine(new_shared_client()),
    Capabilities(supports_tts=False, supports_dictionary=False),
)