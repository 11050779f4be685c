"""Google Translate backend using the public translate_a/single endpoint."""

from __future__ import annotations

import json
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

SINGLE_URL = "https://translate.googleapis.com/translate_a/single"
TTS_URL = "https://translate.googleapis.com/translate_tts"
MAX_TTS_TEXT_LEN = 1500

_ACCEPT = "application/json, text/plain, */*"
_DATA_TYPES = ("bd", "ex", "ld", "md", "rw", "rm", "ss", "t", "at", "gt")
_DICT_INDICES = (1, 5, 11, 12)

Raw = Union[str, bytes]


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


def _strip_raw(raw: Raw) -> Raw:
    return raw.strip()


def _load_json(raw: Raw) -> Any:
    try:
        return json.loads(raw)
    except ValueError as exc:
        raise EngineError(f"google: invalid JSON: {exc}") from exc


def build_single_request_url(
    text: str, source: str, target: str, host_lang: str, no_autocorrect: bool
) -> str:
    """Return the translate_a/single URL for the given request."""
    params = [("client", "gtx")]
    params += [("dt", dt) for dt in _DATA_TYPES]
    params.append(("dt", "qc" if no_autocorrect else "qca"))
    params += [
        ("hl", host_lang),
        ("ie", "UTF-8"),
        ("oe", "UTF-8"),
        ("q", text),
        ("sl", source),
        ("tl", target),
    ]
    return SINGLE_URL + "?" + urlencode(params)


def _join_sentence_translations(root: Any) -> Tuple[str, str]:
    if not isinstance(root, list) or not root:
        raise EngineError("google: unexpected JSON root shape")
    sentences = root[0]
    if not isinstance(sentences, list):
        raise EngineError("google: missing sentence list at index 0")
    text = "".join(
        seg[0]
        for seg in sentences
        if isinstance(seg, list) and seg and isinstance(seg[0], str)
    )
    phonetic = ""
    if len(sentences) >= 2:
        seg = sentences[1]
        if isinstance(seg, list) and len(seg) > 2:
            candidate = seg[2]
            if isinstance(candidate, str) and candidate.strip():
                phonetic = candidate
    return text, phonetic


def parse_translate_single_response(raw: Raw) -> Tuple[str, str]:
    """Return the joined translation and its romanization from a response body."""
    raw = _strip_raw(raw)
    if not raw:
        raise EngineError("google: empty response body")
    text, phonetic = _join_sentence_translations(_load_json(raw))
    if not text.strip():
        raise EngineError("google: could not parse translation from response")
    return text, phonetic


def parse_detected_source_language(raw: Raw) -> str:
    """Return the detected source language (index 2) of a response body."""
    root = _load_json(raw)
    if not isinstance(root, list):
        raise EngineError("google: invalid JSON: root is not an array")
    if len(root) <= 2:
        raise EngineError("google: no detected language in response")
    detected = root[2]
    if not isinstance(detected, str):
        raise EngineError("google: unexpected detected language type")
    if not detected:
        raise EngineError("google: empty detected language")
    return detected


def format_dictionary_payload(raw: Raw) -> str:
    """Return the auxiliary segments of a response as indented JSON blocks."""
    raw = _strip_raw(raw)
    if not raw:
        raise EngineError("google: empty response body")
    root = _load_json(raw)
    if not isinstance(root, list):
        raise EngineError("google: invalid JSON: root is not an array")
    blocks = [
        f"[{idx}]\n{json.dumps(root[idx], indent=2, ensure_ascii=False)}"
        for idx in _DICT_INDICES
        if idx < len(root) and root[idx] is not None
    ]
    return "\n".join(blocks).strip()


def build_tts_url(text: str, target: str) -> str:
    """Return the Google TTS URL for ``text`` spoken in ``target``."""
    text = text.strip()
    if not text:
        raise EngineError("google: empty TTS text")
    if not target:
        raise EngineError("google: empty target language for TTS")
    text = text[:MAX_TTS_TEXT_LEN]
    params = [("client", "gtx"), ("ie", "UTF-8"), ("q", text), ("tl", target)]
    return TTS_URL + "?" + urlencode(params)


class GoogleEngine(Engine, LanguageIdentifier):
    """Google Translate through its web-style endpoint."""

    name = "google"

    def __init__(self, http: Optional[HttpClient] = None) -> None:
        self.http = http if http is not None else new_client()

    def _get(self, url: str, label: str) -> requests.Response:
        try:
            return self.http.get(url, headers={"Accept": _ACCEPT})
        except requests.RequestException as exc:
            raise EngineError(f"google: {label}: {exc}") from exc

    def translate(self, request: TranslateInput) -> TranslateOutput:
        url = build_single_request_url(
            request.text,
            request.source,
            request.target,
            request.host_lang,
            request.no_autocorrect,
        )
        if request.debug:
            print(f"gtr debug: GET {url}", file=sys.stderr)
        response = self._get(url, "request")
        status = response.status_code
        body = _read_body(response, "google")

        if request.dump:
            return TranslateOutput(text=body.decode("utf-8", "replace"))
        if status == 429:
            raise EngineError(f"google: rate limiting is in effect (HTTP {status})")
        if status >= 400:
            raise EngineError(f"google: HTTP {status}: {truncate(body, 200)}")

        text, phonetic = parse_translate_single_response(body)
        if request.brief:
            text = text.strip()
            phonetic = phonetic.strip()
        dictionary = ""
        if request.dictionary:
            try:
                dictionary = format_dictionary_payload(body)
            except EngineError:
                dictionary = ""
        return TranslateOutput(text=text, phonetic=phonetic, dictionary=dictionary)

    def identify_language(self, text: str, host_lang: str) -> str:
        if not text.strip():
            raise EngineError("google: empty text")
        url = build_single_request_url(text, "auto", "en", host_lang or "en", False)
        response = self._get(url, "identify")
        status = response.status_code
        body = _read_body(response, "google")
        if status >= 400:
            raise EngineError(f"google: identify HTTP {status}")
        return parse_detected_source_language(body)


register(
    "google",
    lambda: GoogleEngine(new_shared_client()),
    Capabilities(supports_tts=True, supports_dictionary=True),
)