"""PyDhr: DhrLang editor integration (completion, hover, toolchain bridge)."""

__version__ = "0.3.0"
