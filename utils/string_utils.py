from __future__ import annotations

import hashlib
import json
import unicodedata

__all__: list[str] = ["StringUtils"]


class StringUtils:
    """String helpers used to build translation cache keys."""

    @staticmethod
    def ensure_str(value: str | None) -> str:
        """Return the value as a string, or an empty string if None.

        Whitespace is preserved; translated text is returned to callers verbatim.
        """
        if not isinstance(value, str):
            value = str(value) if value is not None else ""
        return value

    @staticmethod
    def normalize_text(text: str) -> str:
        """Normalize text using Unicode NFC normalization."""
        return unicodedata.normalize("NFC", text)

    @staticmethod
    def generate_translation_hash_key(source_text: str, source_lang: str, target_lang: str) -> str:
        """Generate the SHA-256 cache key for a (text, source, target) triple.

        The source text is NFC-normalized first so that visually identical input
        composed differently maps to the same entry. The fields are serialized as
        a JSON array, so separators inside the text cannot make two triples collide.

        Args:
            source_text (str): Text to be translated.
            source_lang (str): Source language code, or the auto-detect sentinel.
            target_lang (str): Target language code.

        Returns:
            str: Hex digest identifying the triple.
        """
        normalized_source: str = StringUtils.normalize_text(StringUtils.ensure_str(source_text))
        key_data: str = json.dumps([normalized_source, source_lang, target_lang], ensure_ascii=False)
        return hashlib.sha256(key_data.encode("utf-8")).hexdigest()
