"""Multi-engine translation library: Google, Bing, Yandex and Apertium backends, registry and config helpers."""

__version__ = "0.1.0"