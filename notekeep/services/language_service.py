"""
Localized text lookup.

Resources live in ``notekeep/resources/lang.<code>.txt`` as ``key = text``
lines; lines starting with ``//`` are comments. Keys are case-insensitive.
"""
from __future__ import annotations

from importlib import resources
from typing import Optional

from notekeep.core.logging import get_logger

logger = get_logger(__name__)

RESOURCE_PACKAGE = "notekeep.resources"
FALLBACK_LANGUAGE = "en"


def parse_resource_lines(lines) -> dict[str, str]:
    result: dict[str, str] = {}
    for raw in lines:
        line = raw.strip()
        if not line or line.startswith("//"):
            continue
        key, sep, text = line.partition("=")
        key = key.strip()
        if not sep or not key:
            continue
        result[key.lower()] = text.strip().replace("\\n", "\n")
    return result


class LanguageServiceBase:
    """Lazily loads the resources of one language and answers lookups."""

    def __init__(self, language_code: str, fallback_language_code: str = FALLBACK_LANGUAGE) -> None:
        self.language_code = (language_code or fallback_language_code).lower()
        self.fallback_language_code = fallback_language_code
        self._texts: Optional[dict[str, str]] = None

    def load_resources(self, language_code: str) -> Optional[dict[str, str]]:
        raise NotImplementedError

    def _ensure_loaded(self) -> dict[str, str]:
        if self._texts is None:
            texts = None
            try:
                texts = self.load_resources(self.language_code)
            except Exception as exc:
                logger.warning("Could not load language %r: %s", self.language_code, exc)
            # the fallback language ships with the package, a failure here is a packaging error
            if texts is None:
                texts = self.load_resources(self.fallback_language_code) or {}
            self._texts = texts
        return self._texts

    def load_text(self, text_id: str) -> str:
        text = self._ensure_loaded().get((text_id or "").lower())
        if text is None:
            logger.warning("Could not find text resource %r", text_id)
            return ""
        return text

    def load_text_fmt(self, text_id: str, *args) -> str:
        text = self.load_text(text_id)
        try:
            return text.format(*args)
        except (IndexError, KeyError, ValueError):
            return text

    def __getitem__(self, text_id: str) -> str:
        return self.load_text(text_id)


class LanguageService(LanguageServiceBase):
    """Reads the text resources bundled with the package."""

    def load_resources(self, language_code: str) -> Optional[dict[str, str]]:
        resource = resources.files(RESOURCE_PACKAGE).joinpath(f"lang.{language_code}.txt")
        if not resource.is_file():
            return None
        return parse_resource_lines(resource.read_text(encoding="utf-8").splitlines())
