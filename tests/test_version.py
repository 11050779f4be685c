from gtr.version import version_string


def test_release_without_commit():
    assert version_string("1.2.3", "") == "1.2.3"


def test_release_with_commit_appends_commit():
    assert version_string("1.2.3", "abc1234") == "1.2.3-abc1234"


def test_release_equal_to_commit():
    assert version_string("abc1234", "abc1234") == "abc1234"


def test_release_already_prefixed_by_commit():
    assert version_string("abc1234-dirty", "abc1234") == "abc1234-dirty"


def test_dev_with_commit_returns_commit():
    assert version_string("dev", "abc1234") == "abc1234"


def test_dev_uses_env(monkeypatch):
    monkeypatch.setenv("GTR_VERSION", "  v2.0.0 ")
    assert version_string("dev", "") == "v2.0.0"


def test_commit_takes_priority_over_env(monkeypatch):
    monkeypatch.setenv("GTR_VERSION", "v2.0.0")
    assert version_string("dev", "abc1234") == "abc1234"