"""Anitopy-based tokenizer for anime release file names.

This module wraps the anitopy library and maps its element dictionary onto
:class:`ParsedName`. Season markers such as "S2" or "2nd Season" end up in
``anime_season`` and are removed from the title.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import overload

import anitopy

from aniresolve.core.parser.models import ParsedName

logger = logging.getLogger(__name__)


class AnitopyParser:
    """Tokenizer backed by anitopy.

    A name anitopy cannot take apart is kept whole as the title, so the
    resolver still gets one ParsedName per input name.

    Example:
        >>> parser = AnitopyParser()
        >>> parsed = parser.parse("[Group] Attack on Titan S2 - 05")
        >>> parsed.anime_title, parsed.anime_season, parsed.episode_number
        ('Attack on Titan', 2, 5)
    """

    @overload
    def parse(self, names: str) -> ParsedName: ...

    @overload
    def parse(self, names: Sequence[str]) -> list[ParsedName]: ...

    def parse(self, names: str | Sequence[str]) -> ParsedName | list[ParsedName]:
        """Tokenize one name or a sequence of names.

        Args:
            names: A release name, or several

        Returns:
            A ParsedName for a single name, a list in input order otherwise
        """
        if isinstance(names, str):
            return self._parse_one(names)
        return [self._parse_one(name) for name in names]

    def _parse_one(self, name: str) -> ParsedName:
        try:
            elements = anitopy.parse(name)
        except (KeyError, ValueError, TypeError, AttributeError, IndexError) as e:
            logger.warning("Anitopy failed to parse '%s': %s", name, str(e))
            return ParsedName(anime_title=name, file_name=name)

        if not elements:
            logger.debug("Anitopy found no elements in '%s'", name)
            return ParsedName(anime_title=name, file_name=name)

        parsed = ParsedName.from_fields(elements, file_name=name)
        if not parsed.anime_title:
            parsed = parsed.with_title(name)

        logger.debug(
            "Parsed '%s': title=%s season=%s episode=%s",
            name,
            parsed.anime_title,
            parsed.anime_season,
            parsed.episode_number,
        )
        return parsed
