"""Rules-data access: provider port, bundled SRD data and static catalogues."""

from __future__ import annotations

from dnd_chargen.core.config import get_settings
from dnd_chargen.rules.memory import InMemoryRulesProvider
from dnd_chargen.rules.provider import RulesProvider
from dnd_chargen.rules.srd_client import SrdApiRulesProvider


def build_rules_provider() -> RulesProvider:
    """Create the rules provider selected by ``rules.source``."""
    settings = get_settings()
    if settings.rules.source == "srd_api":
        return SrdApiRulesProvider(settings.rules)
    return InMemoryRulesProvider.from_srd()


__all__ = [
    "RulesProvider",
    "InMemoryRulesProvider",
    "SrdApiRulesProvider",
    "build_rules_provider",
]
