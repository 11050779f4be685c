import re
import string
from urllib.parse import parse_qs, urlsplit

import pytest
import responses

from gtr.engine import EngineError, TranslateInput
from gtr.engines.yandex import (
    YandexEngine,
    new_ucid,
    parse_detected_source_from_lang_json,
    parse_translate_json,
    strip_digraph,
)
from gtr.net import HttpClient

URL_PATTERN = re.compile(r"https://translate\.yandex\.net/api/v1/tr\.json/translate.*")


def _engine():
    return YandexEngine(HttpClient(user_agent=""))


def test_new_ucid_format():
    ucid = new_ucid()
    assert len(ucid) == 32
    assert all(c in string.hexdigits.lower() for c in ucid)


def test_new_ucid_unique():
    ids = {new_ucid() for _ in range(100)}
    assert len(ids) == 100


def test_new_ucid_no_dashes():
    assert "-" not in new_ucid()


def test_parse_detected_source_from_lang_json():
    raw = '{"code":200,"lang":"de-en","text":["hello"]}'
    assert parse_detected_source_from_lang_json(raw) == "de"


@pytest.mark.parametrize("raw", ['{"lang":"de"}', '{"lang":"-en"}', '{"lang":"de-"}', "{}"])
def test_parse_detected_source_errors(raw):
    with pytest.raises(EngineError):
        parse_detected_source_from_lang_json(raw)


def test_parse_translate_json_array():
    assert parse_translate_json('{"code":200,"text":["Hallo"]}') == "Hallo"


def test_parse_translate_json_string():
    assert parse_translate_json('{"text":"Hallo"}') == "Hallo"


def test_parse_translate_json_error_code_message():
    with pytest.raises(EngineError, match="yandex: invalid key"):
        parse_translate_json('{"code":401,"message":"invalid key"}')


def test_parse_translate_json_error_code_string():
    with pytest.raises(EngineError, match="yandex: blocked"):
        parse_translate_json('{"code":"403","message":"blocked"}')


@pytest.mark.parametrize(
    "raw, message",
    [
        ('{"text":[]}', "empty text array"),
        ('{"text":[1]}', "unexpected text"),
        ('{"code":200}', "missing or invalid text"),
        ("not json", "invalid JSON"),
    ],
)
def test_parse_translate_json_errors(raw, message):
    with pytest.raises(EngineError, match=message):
        parse_translate_json(raw)


@pytest.mark.parametrize(
    "code, expected", [("zh-CN", "zh"), (" en ", "en"), ("auto", "auto"), ("-x", "-x")]
)
def test_strip_digraph(code, expected):
    assert strip_digraph(code) == expected


def test_translate_success_and_query():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, URL_PATTERN, json={"code": 200, "text": [" Hallo "]})
        engine = _engine()
        out = engine.translate(
            TranslateInput(text="hello", source="en-US", target="de", brief=True)
        )
        request_url = rsps.calls[0].request.url
    assert out.text == "Hallo"
    query = parse_qs(urlsplit(request_url).query)
    assert query["lang"] == ["en-de"]
    assert query["srv"] == ["android"]
    assert query["text"] == ["hello"]
    assert query["ucid"] == [engine.ucid]


def test_translate_auto_source_uses_target_only():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, URL_PATTERN, json={"text": ["x"]})
        out = _engine().translate(TranslateInput(text="a", source="auto", target="fr"))
        request_url = rsps.calls[0].request.url
    assert out.text == "x"
    query = parse_qs(urlsplit(request_url).query)
    assert query["lang"] == ["fr"]


def test_translate_dump_returns_raw_body():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, URL_PATTERN, body='{"raw":1}', status=500)
        out = _engine().translate(TranslateInput(text="a", source="en", target="de", dump=True))
    assert out.text == '{"raw":1}'


def test_translate_rate_limited():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, URL_PATTERN, body="slow down", status=429)
        with pytest.raises(EngineError, match="rate limiting"):
            _engine().translate(TranslateInput(text="a", source="en", target="de"))


def test_translate_http_error():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, URL_PATTERN, body="boom", status=500)
        with pytest.raises(EngineError, match="HTTP 500: boom"):
            _engine().translate(TranslateInput(text="a", source="en", target="de"))


def test_identify_language():
    with responses.RequestsMock() as rsps:
        rsps.add(
            responses.POST, URL_PATTERN, json={"code": 200, "lang": "fr-en", "text": ["hi"]}
        )
        detected = _engine().identify_language("bonjour", "")
        request_url = rsps.calls[0].request.url
    assert detected == "fr"
    query = parse_qs(urlsplit(request_url).query)
    assert query["lang"] == ["en"]


def test_identify_language_http_error():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, URL_PATTERN, body="", status=403)
        with pytest.raises(EngineError, match="identify HTTP 403"):
            _engine().identify_language("bonjour", "en")


def test_identify_language_empty_text():
    with pytest.raises(EngineError, match="empty text"):
        _engine().identify_language("  ", "en")