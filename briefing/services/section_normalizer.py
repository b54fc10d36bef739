"""Merge user overrides onto the section catalog."""

import math
from typing import Dict, Iterable, List, Optional, Sequence

from ..core.config import WORDS_PER_MINUTE
from ..models.sections import SectionOverride, SectionRuntime, SectionTemplate
from .section_catalog import DEFAULT_SECTIONS


def resolve_target_words(template: SectionTemplate, duration_minutes: float) -> int:
    if template.target_words is not None:
        return template.target_words
    # half-up, matching the word goals shown to editors
    return max(0, int(math.floor(duration_minutes * WORDS_PER_MINUTE + 0.5)))


def normalize_sections(
    overrides: Optional[Iterable[SectionOverride]] = None,
    catalog: Sequence[SectionTemplate] = DEFAULT_SECTIONS,
) -> List[SectionRuntime]:
    """Return one runtime per catalog template, in catalog order.

    Overrides for unknown ids are ignored. A later override for the same id
    replaces an earlier one. A prompt that is blank after trimming falls back
    to the template default.
    """
    known = {template.id for template in catalog}
    by_id: Dict[str, SectionOverride] = {}
    for override in overrides or ():
        if override.id in known:
            by_id[override.id] = override

    runtimes: List[SectionRuntime] = []
    for template in catalog:
        override = by_id.get(template.id)
        duration = template.duration_minutes
        prompt = template.default_prompt
        if override is not None:
            if override.duration_minutes is not None:
                duration = override.duration_minutes
            if override.prompt and override.prompt.strip():
                prompt = override.prompt.strip()
        runtimes.append(
            SectionRuntime(
                template=template,
                prompt=prompt,
                duration_minutes=duration,
                target_words=resolve_target_words(template, duration),
            )
        )
    return runtimes
