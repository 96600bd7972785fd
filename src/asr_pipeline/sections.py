"""Lookup of notebook sections by their human-authored header."""

from __future__ import annotations

import logging
from typing import Iterable

from asr_pipeline.errors import SectionNotFoundError
from asr_pipeline.models import Section
from asr_pipeline.normalize import normalize_label

logger = logging.getLogger(__name__)


def find_section(sections: Iterable[Section], header: str, strict: bool = False) -> Section | None:
    """Return the first section whose header matches ``header``.

    Headers are compared after :func:`normalize_label` on both sides, so
    ``"Materials (Reagents):"`` matches ``"materials\\u00a0( reagents )"``.

    Args:
        sections: Sections in notebook order.
        header: Header typed by the user.
        strict: Raise instead of returning ``None`` when nothing matches.

    Returns:
        Matching section or ``None``.

    Raises:
        SectionNotFoundError: If ``strict`` is set and no section matches.
    """

    wanted = normalize_label(header)
    for section in sections:
        if normalize_label(section.section_header) == wanted:
            logger.info("Found section %r", section.section_header)
            return section

    logger.warning("Section %r not found", header)
    if strict:
        raise SectionNotFoundError(f'Section "{header}" not found')
    return None
