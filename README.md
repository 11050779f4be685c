# gtr

A Python library for translating text through several remote backends:
Google, Bing, Yandex and Apertium. It also carries helpers for reading
defaults from `~/.gtrrc`, managing that file, collecting input text and
parsing `SRC:TL` language tokens.

The backends use undocumented HTTP endpoints, so they may stop working
without notice.

## Installation

```
pip install .
```

For the test suite:

```
pip install ".[test]"
pytest
```

## Engines and the registry

Each backend module registers itself in the default registry of
`gtr.engine` when it is imported:

| Module                  | Engine name | Class            | Language identification |
|-------------------------|-------------|------------------|-------------------------|
| `gtr.engines.google`    | `google`    | `GoogleEngine`   | yes                     |
| `gtr.engines.bing`      | `bing`      | `BingEngine`     | yes                     |
| `gtr.engines.yandex`    | `yandex`    | `YandexEngine`   | yes                     |
| `gtr.engines.apertium`  | `apertium`  | `ApertiumEngine` | no                      |

```python
import gtr.engines.google
import gtr.engines.bing
from gtr import engine
from gtr.engine import TranslateInput

print(engine.names())                 # ['bing', 'google']
name, factory = engine.lookup_fuzzy("goo")   # exact name, else shortest prefix match
eng = factory()

result = eng.translate(TranslateInput(text="Hello world", source="auto",
                                      target="fr", host_lang="en"))
print(result.text, result.phonetic)

print(eng.identify_language("Bonjour le monde", "en"))
```

`TranslateInput` fields: `text`, `source`, `target`, `host_lang`, `brief`
(trim the result), `no_autocorrect` (Google `qc` instead of `qca`), `debug`
(print the request URL to stderr), `dump` (return the raw response body as
the text) and `dictionary` (Google: fill `TranslateOutput.dictionary` with the
auxiliary JSON segments). `TranslateOutput` has `text`, `dictionary` and
`phonetic`.

`engine.capabilities_of(name)` returns the `Capabilities` an engine was
registered with (`supports_tts`, `supports_dictionary`). A `Registry` can also
be created on its own. Backend failures raise `gtr.engine.EngineError`;
responses are capped at 4 MiB.

The Bing engine tries `www.bing.com` and then `cn.bing.com`, and caches the
tokens it scrapes from the translator page for five minutes per host.
Yandex gives every engine instance a fresh random client id.

### Speech URLs

`gtr.engines.google.build_tts_url(text, target)` and
`gtr.engines.bing.build_tts_url(text, target)` return the text-to-speech URL
for a text (trimmed and cut to 1500 characters).

## HTTP

`gtr.net.new_client()` returns an `HttpClient` with its own session and a 30
second timeout. `gtr.net.new_shared_client()` returns a client on one
process-wide session that retries up to three times on connection errors and
on HTTP 429–599, backing off from 0.5 s; the registered engines use it.
`gtr.net.set_shared_timeout(seconds)` changes its timeout. When `USER_AGENT`
is set, it is sent as the User-Agent header unless a request sets one. Proxy
settings (`HTTP_PROXY`, `HTTPS_PROXY`, `NO_PROXY`) are honoured as requests
does.

## Configuration

Defaults live in `~/.gtrrc` as `KEY=value` lines; blank lines and lines
starting with `#` are skipped. Environment variables with the same names take
precedence over the file.

| Key                  | Meaning                |
|----------------------|------------------------|
| `GTR_DEFAULT_ENGINE` | default engine name    |
| `GTR_DEFAULT_TARGET` | default target code    |
| `GTR_TIMEOUT`        | HTTP timeout (seconds) |

```python
from gtr import config
from gtr.cli import config_cmd

config.default_engine()        # "auto" unless configured
config.default_target()
config.env_override("GTR_TIMEOUT")

config_cmd.run_config(["set", "GTR_DEFAULT_TARGET", "de"])   # prints "Set GTR_DEFAULT_TARGET=de"
config_cmd.run_config(["get", "GTR_DEFAULT_TARGET"])
config_cmd.run_config(["unset", "GTR_DEFAULT_TARGET"])
config_cmd.run_config(["path"])
config_cmd.run_config([])      # table of file and effective values
```

`config_set`, `config_unset` and `config_get` take an optional `path` for a
file other than `~/.gtrrc`; writes go through a temporary file that replaces
the original.

## Input and other helpers

- `gtr.cli.textinput.text_from_args_or_stdin(args, stdin, stdin_is_tty)`
  joins arguments, or reads and trims stdin (at most 1 MiB).
  `read_text_file(path)` reads a file path or `file://` URL the same way.
- `gtr.cli.langspec.parse_lang_pair_token(":en+de")` returns
  `("auto", ["en", "de"])`, or `None` for ordinary text;
  `strip_leading_lang_spec` removes such a token from the front of the
  arguments.
- `gtr.color` wraps text in ANSI colours; `init_color_out(flag)` turns
  colour off for the flag, `NO_COLOR`, or a stdout that is not a terminal.
- `gtr.pager.open_pager()` is a context manager yielding a stream into
  `$PAGER` (`less -R`, or `more` on Windows).
- `gtr.version.version_string(version, commit)` builds a version string,
  falling back to `GTR_VERSION` and the installed package metadata.

## What this package does not do

- It installs no `gtr` command and has no interactive shell; it is used
  from Python.
- There is no `auto` engine that picks Google or Bing for a language pair,
  and no table of language codes for validating, listing or describing
  languages.
- It builds speech URLs but does not download or play the audio.
- There are no local spell-checking engines.