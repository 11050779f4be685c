import pytest
import requests
import responses

from gtr.engine import EngineError, TranslateInput
from gtr.engines.bing import (
    BingEngine,
    MAX_TTS_TEXT_LEN,
    build_tts_url,
    parse_bing_response,
    parse_translate_response,
    patch_lang_codes,
)
from gtr.net import HttpClient

PAGE = (
    '<script>var params_AbusePreventionHelper = ["placeholder","token",'
    '"https://www.bing.com"];</script>\n'
    '<div>IG:"abcdef12"</div>\n'
    '<input data-iid="translator.5010" />'
)
WWW = "https://www.bing.com"
CN = "https://cn.bing.com"


def _engine():
    return BingEngine(HttpClient(session=requests.Session(), user_agent=""))


def test_parse_translate_response_ok():
    assert parse_translate_response('[{"translations":[{"text":"Hola"}]}]') == "Hola"


def test_parse_bing_response_detected():
    raw = '[{"detectedLanguage":{"language":"de","score":1},"translations":[{"text":"hello"}]}]'
    assert parse_bing_response(raw) == ("hello", "de")


def test_parse_translate_response_status400():
    with pytest.raises(EngineError, match="does not support"):
        parse_translate_response('[{"statusCode":400}]')


def test_parse_translate_response_empty_root():
    with pytest.raises(EngineError, match="unexpected JSON root"):
        parse_translate_response("[]")


def test_patch_from_to_lang():
    assert patch_lang_codes("auto", "pt-PT") == ("auto-detect", "pt-pt")


def test_patch_lang_codes_pt_pt_source():
    assert patch_lang_codes("pt-PT", "zh-CN") == ("pt", "zh-Hans")


def test_setup_regex_scraping():
    with responses.RequestsMock() as rsps:
        rsps.add(
            responses.GET,
            WWW + "/translator",
            body=PAGE,
            headers={"Set-Cookie": "SRCHHPGUSR=placeholder; path=/"},
        )
        tokens = _engine().setup(WWW)
    assert tokens.ig == "abcdef12"
    assert tokens.iid == "translator.5010"
    assert tokens.key == "placeholder"
    assert tokens.token == "token"
    assert "SRCHHPGUSR=placeholder" in tokens.cookie


def test_setup_http_error():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, WWW + "/translator", status=503)
        with pytest.raises(EngineError, match="HTTP 503"):
            _engine().setup(WWW)


def test_setup_missing_ig():
    page = '<div>no IG here</div>\n<script>var params_AbusePreventionHelper = [1,"t",""];</script>'
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, WWW + "/translator", body=page)
        with pytest.raises(EngineError, match="IG/IID"):
            _engine().setup(WWW)


def test_setup_missing_token():
    page = '<div>IG:"abc"</div><input data-iid="xyz" />'
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, WWW + "/translator", body=page)
        with pytest.raises(EngineError, match="token/key"):
            _engine().setup(WWW)


def test_translate_posts_form_and_parses():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, WWW + "/translator", body=PAGE)
        rsps.add(
            responses.POST,
            WWW + "/ttranslatev3",
            body='[{"translations":[{"text":"  Hola  "}]}]',
        )
        out = _engine().translate(
            TranslateInput(text="hello", source="auto", target="es", brief=True)
        )
        posted = rsps.calls[1].request.body
        post_url = rsps.calls[1].request.url
    assert out.text == "Hola"
    assert "fromLang=auto-detect" in posted
    assert "to=es" in posted
    assert "IG=abcdef12" in post_url


def test_translate_dump_returns_raw_body():
    body = '[{"translations":[{"text":"Hola"}]}]'
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, WWW + "/translator", body=PAGE)
        rsps.add(responses.POST, WWW + "/ttranslatev3", body=body)
        out = _engine().translate(TranslateInput(text="hi", source="en", target="es", dump=True))
    assert out.text == body


def test_translate_reuses_cached_setup():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, WWW + "/translator", body=PAGE)
        rsps.add(responses.POST, WWW + "/ttranslatev3", body='[{"translations":[{"text":"Hola"}]}]')
        engine = _engine()
        first = engine.translate(TranslateInput(text="a", source="en", target="es"))
        second = engine.translate(TranslateInput(text="b", source="en", target="es"))
        methods = [call.request.method for call in rsps.calls]
    assert first.text == "Hola"
    assert second.text == "Hola"
    assert methods == ["GET", "POST", "POST"]


def test_translate_falls_back_to_second_host():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, WWW + "/translator", status=503)
        rsps.add(responses.GET, CN + "/translator", body=PAGE)
        rsps.add(responses.POST, CN + "/ttranslatev3", body='[{"translations":[{"text":"Hallo"}]}]')
        out = _engine().translate(TranslateInput(text="hello", source="en", target="de"))
    assert out.text == "Hallo"


def test_translate_all_hosts_failed():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, WWW + "/translator", status=503)
        rsps.add(responses.GET, CN + "/translator", status=503)
        with pytest.raises(EngineError, match="all hosts failed"):
            _engine().translate(TranslateInput(text="hello", source="en", target="de"))


def test_identify_language():
    reply = '[{"detectedLanguage":{"language":"de","score":1},"translations":[{"text":"hello"}]}]'
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, WWW + "/translator", body=PAGE)
        rsps.add(responses.POST, WWW + "/ttranslatev3", body=reply)
        detected = _engine().identify_language("hallo", "")
        posted = rsps.calls[1].request.body
    assert detected == "de"
    assert "to=en" in posted


def test_identify_language_empty_text():
    with pytest.raises(EngineError, match="empty text"):
        _engine().identify_language("   ", "en")


def test_build_tts_url_ok():
    url = build_tts_url("hello", "fr")
    assert "www.bing.com/tspeak" in url
    assert "language=fr" in url
    assert "text=hello" in url


def test_build_tts_url_empty_text():
    with pytest.raises(EngineError):
        build_tts_url("", "fr")


def test_build_tts_url_empty_target():
    with pytest.raises(EngineError):
        build_tts_url("hello", "")


def test_build_tts_url_truncation():
    long = "x" * (MAX_TTS_TEXT_LEN + 100)
    url = build_tts_url(long, "de")
    assert len(url) < len(long)
    assert "x" * MAX_TTS_TEXT_LEN in url