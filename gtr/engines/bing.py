"""Bing Web Translator backend, scraping setup tokens from the translator page."""

from __future__ import annotations

import json
import re
import sys
import threading
import time
from typing import Any, NamedTuple, Optional, Tuple, Union
from urllib.parse import quote_plus, urlencode

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

TRANSLATE_BASE = "https://www.bing.com"
ORIGINS = (TRANSLATE_BASE, "https://cn.bing.com")
SETUP_CACHE_TTL = 5 * 60.0
TTS_URL = "https://www.bing.com/tspeak"
MAX_TTS_TEXT_LEN = 1500

_ACCEPT_JSON = "application/json, text/plain, */*"
_ACCEPT_HTML = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"

_RE_IG = re.compile(r'IG:"([^"]+)"')
_RE_IID = re.compile(r'data-iid="([^"]+)"')
_RE_ABUSE = re.compile(r"params_AbusePreventionHelper\s*=\s*(\[[^\]]+\]);")

_COMMON_PATCH = {
    "tl": "fil",
    "hmn": "mww",
    "ku": "kmr",
    "ckb": "ku",
    "mn": "mn-Cyrl",
    "no": "nb",
    "pt-BR": "pt",
    "zh-CN": "zh-Hans",
    "zh-TW": "zh-Hant",
}
_FROM_PATCH = {**_COMMON_PATCH, "auto": "auto-detect", "pt-PT": "pt"}
_TO_PATCH = {**_COMMON_PATCH, "pt-PT": "pt-pt"}

Raw = Union[str, bytes]


class _SetupTokens(NamedTuple):
    cookie: str
    ig: str
    iid: str
    token: str
    key: str


def _sprint(value: Any) -> str:
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return str(value)


def _read_body(response: requests.Response, label: str) -> bytes:
    chunks = []
    size = 0
    try:
        for chunk in response.iter_content(65536):
            size += len(chunk)
            chunks.append(chunk)
            if size > MAX_READ_BODY:
                raise EngineError(f"{label}: response body exceeds {MAX_READ_BODY} bytes")
    except requests.RequestException as exc:
        raise EngineError(f"{label}: read body: {exc}") from exc
    finally:
        response.close()
    return b"".join(chunks)


def patch_lang_codes(source: str, target: str) -> Tuple[str, str]:
    """Map generic language codes to the ones Bing expects."""
    return _FROM_PATCH.get(source, source), _TO_PATCH.get(target, target)


def parse_bing_response(raw: Raw) -> Tuple[str, str]:
    """Return the translation text and detected source language of a response."""
    try:
        root = json.loads(raw)
    except ValueError as exc:
        raise EngineError(f"bing: invalid JSON: {exc}") from exc
    if not isinstance(root, list):
        raise EngineError("bing: invalid JSON: root is not an array")
    if not root:
        raise EngineError("bing: unexpected JSON root")
    first = root[0]
    if not isinstance(first, dict):
        raise EngineError("bing: invalid JSON: element is not an object")

    detected = ""
    info = first.get("detectedLanguage")
    if isinstance(info, dict) and isinstance(info.get("language"), str):
        detected = info["language"]

    status = first.get("statusCode")
    if isinstance(status, (int, float)) and not isinstance(status, bool) and status == 400:
        raise EngineError("bing: does not support the specified language(s)")

    translations = first.get("translations")
    if not isinstance(translations, list) or not translations:
        raise EngineError("bing: missing translations in response")
    head = translations[0]
    if not isinstance(head, dict):
        raise EngineError("bing: malformed translations[0]")
    text = head.get("text")
    if not isinstance(text, str) or not text.strip():
        raise EngineError("bing: empty translation text")
    return text, detected


def parse_translate_response(raw: Raw) -> str:
    """Return the translation text of a response body."""
    return parse_bing_response(raw)[0]


def build_tts_url(text: str, target: str) -> str:
    """Return the Bing TTS URL for ``text`` spoken in ``target``."""
    text = text.strip()
    if not text:
        raise EngineError("bing: empty TTS text")
    if not target:
        raise EngineError("bing: empty target language for TTS")
    text = text[:MAX_TTS_TEXT_LEN]
    params = [("format", "audio/mp3"), ("language", target), ("text", text)]
    return TTS_URL + "?" + urlencode(params)


class BingEngine(Engine, LanguageIdentifier):
    """Bing Web Translator, trying www.bing.com and then cn.bing.com."""

    name = "bing"

    def __init__(self, http: Optional[HttpClient] = None) -> None:
        self.http = http if http is not None else new_client()
        self._cache: dict[str, tuple[_SetupTokens, float]] = {}
        self._cache_lock = threading.Lock()

    def setup(self, origin: str) -> _SetupTokens:
        """Fetch the translator page and scrape its cookie, IG, IID, token and key."""
        page_url = origin + "/translator"
        try:
            response = self.http.get(
                page_url, headers={"Accept": _ACCEPT_HTML, "Referer": page_url}
            )
        except requests.RequestException as exc:
            raise EngineError(f"bing setup GET: {exc}") from exc

        if response.status_code >= 400:
            snippet = response.content[:200].decode("utf-8", "replace").strip()
            response.close()
            raise EngineError(f"bing setup GET: HTTP {response.status_code}: {snippet}")

        cookie = "; ".join(f"{c.name}={c.value}" for c in response.cookies if c.name)
        html = _read_body(response, "bing setup GET").decode("utf-8", "replace")

        ig_match = _RE_IG.search(html)
        iid_match = _RE_IID.search(html)
        ig = ig_match.group(1) if ig_match else ""
        iid = iid_match.group(1) if iid_match else ""
        if not ig or not iid:
            raise EngineError("bing: could not parse IG/IID from translator page")

        token = key = ""
        abuse = _RE_ABUSE.search(html)
        if abuse:
            try:
                params = json.loads(abuse.group(1))
            except ValueError:
                params = None
            if isinstance(params, list) and len(params) >= 2:
                key = _sprint(params[0])
                token = _sprint(params[1])
        if not token or not key:
            raise EngineError("bing: could not parse token/key from translator page")
        return _SetupTokens(cookie, ig, iid, token, key)

    def _cached_setup(self, origin: str) -> _SetupTokens:
        now = time.monotonic()
        with self._cache_lock:
            entry = self._cache.get(origin)
            if entry is not None and now < entry[1]:
                return entry[0]
        tokens = self.setup(origin)
        with self._cache_lock:
            self._cache[origin] = (tokens, time.monotonic() + SETUP_CACHE_TTL)
        return tokens

    def _translate_request(
        self, origin: str, text: str, source: str, target: str, debug: bool
    ) -> Tuple[bytes, int]:
        tokens = self._cached_setup(origin)
        source, target = patch_lang_codes(source, target)

        post_url = (
            f"{origin}/ttranslatev3?IG={quote_plus(tokens.ig)}&IID={quote_plus(tokens.iid)}"
        )
        form = [
            ("fromLang", source),
            ("key", tokens.key),
            ("text", text),
            ("to", target),
            ("token", tokens.token),
        ]
        headers = {
            "Content-Type": "application/x-www-form-urlencoded",
            "Accept": _ACCEPT_JSON,
            "Referer": origin + "/translator",
        }
        if tokens.cookie:
            headers["Cookie"] = tokens.cookie
        if debug:
            print(f"bing debug: POST {post_url}", file=sys.stderr)
        try:
            response = self.http.post(post_url, headers=headers, data="&" + urlencode(form))
        except requests.RequestException as exc:
            raise EngineError(f"bing: POST: {exc}") from exc
        status = response.status_code
        return _read_body(response, "bing"), status

    def _translate_on_host(self, origin: str, request: TranslateInput) -> TranslateOutput:
        body, status = self._translate_request(
            origin, request.text, request.source, request.target, request.debug
        )
        if request.dump:
            return TranslateOutput(text=body.decode("utf-8", "replace"))
        if status == 429:
            raise EngineError(f"bing: rate limiting is in effect (HTTP {status})")
        if status >= 400:
            raise EngineError(f"bing: HTTP {status}: {truncate(body, 200)}")
        if not body.strip():
            raise EngineError("bing: empty response body")
        text = parse_translate_response(body)
        if request.brief:
            text = text.strip()
        return TranslateOutput(text=text)

    def translate(self, request: TranslateInput) -> TranslateOutput:
        errors = []
        for origin in ORIGINS:
            try:
                return self._translate_on_host(origin, request)
            except EngineError as exc:
                errors.append(f"{origin}: {exc}")
        if not errors:
            raise EngineError("bing: no host succeeded")
        raise EngineError("bing: all hosts failed: [" + "; ".join(errors) + "]")

    def identify_language(self, text: str, host_lang: str) -> str:
        host_lang = host_lang or "en"
        if not text.strip():
            raise EngineError("bing: empty text")
        last_error: Optional[EngineError] = None
        for origin in ORIGINS:
            try:
                body, status = self._translate_request(origin, text, "auto", host_lang, False)
                if status >= 400:
                    raise EngineError(f"bing: identify HTTP {status}")
                _, detected = parse_bing_response(body)
                if not detected.strip():
                    raise EngineError("bing: no detected language in response")
                return detected
            except EngineError as exc:
                last_error = exc
        raise last_error if last_error is not None else EngineError("bing: identify failed")


register(
    "bing",
    lambda: BingEngine(new_shared_client()),
    Capabilities(supports_tts=True, supports_dictionary=True),
)