import json
from functools import lru_cache
from pathlib import Path
from typing import Optional

import config
from enums.text_entity import TextEntity

L10N_DIR = Path(__file__).resolve().parent.parent / "l10n"


@lru_cache(maxsize=8)
def _load(language: str) -> dict:
    with open(L10N_DIR / f"{language}.json", "r", encoding="UTF-8") as f:
        return json.loads(f.read())


class Localizator:

    @staticmethod
    def get_text(entity: TextEntity, key: str, lang: Optional[str] = None) -> str:
        """
        Get localized text for given entity and key.

        Args:
            entity: Entity type (USER, COMMON)
            key: Localization key
            lang: Optional language code (e.g., "de", "en").
                  If None, uses config.LANGUAGE (default).

        Returns:
            Localized text string
        """
        language = lang if lang is not None else config.LANGUAGE
        data = _load(language)
        if entity == TextEntity.USER:
            return data["user"][key]
        else:
            return data["common"][key]

    @staticmethod
    def get_currency_symbol(lang: Optional[str] = None):
        return Localizator.get_text(TextEntity.COMMON, f"{config.CURRENCY.value.lower()}_symbol", lang=lang)
