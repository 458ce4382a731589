"""HTTP rules provider for the public D&D 5E SRD API (dnd5eapi.co).

Responses are mapped onto the rules models; choice trees are converted
from the API's ``option_set`` format into the closed option union.
Transient failures (connection errors, timeouts, 5xx) are retried with
exponential backoff via tenacity.
"""

from __future__ import annotations

from typing import Any

import requests
from tenacity import (
    Retrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from dnd_chargen.core.config import RulesSettings, get_settings
from dnd_chargen.core.constants import DEFAULT_HIT_DIE
from dnd_chargen.core.exceptions import NotFoundError, RulesDataError
from dnd_chargen.core.logging import get_logger
from dnd_chargen.models.enums import Ability, ChoiceType, ProficiencyCategory
from dnd_chargen.models.rules import (
    AbilityBonus,
    CharacterClass,
    Choice,
    ClassFeature,
    CountedReferenceOption,
    MultipleOption,
    Proficiency,
    Race,
    Reference,
    ReferenceOption,
    Spell,
    StartingEquipment,
)
from dnd_chargen.rules.provider import RulesProvider
from dnd_chargen.rules.static_data import PRIMARY_ABILITIES


logger = get_logger(__name__)


_CHOICE_TYPES = {
    "proficiencies": ChoiceType.PROFICIENCY,
    "proficiency": ChoiceType.PROFICIENCY,
    "equipment": ChoiceType.EQUIPMENT,
    "languages": ChoiceType.LANGUAGE,
    "language": ChoiceType.LANGUAGE,
}

_PROFICIENCY_TYPES = {
    "Armor": ProficiencyCategory.ARMOR,
    "Weapons": ProficiencyCategory.WEAPON,
    "Artisan's Tools": ProficiencyCategory.TOOL,
    "Gaming Sets": ProficiencyCategory.TOOL,
    "Other Tools": ProficiencyCategory.TOOL,
    "Skills": ProficiencyCategory.SKILL,
    "Saving Throws": ProficiencyCategory.SAVING_THROW,
    "Musical Instruments": ProficiencyCategory.INSTRUMENT,
}


def _is_transient(exc: BaseException) -> bool:
    if isinstance(exc, (requests.ConnectionError, requests.Timeout)):
        return True
    if isinstance(exc, requests.HTTPError) and exc.response is not None:
        return exc.response.status_code >= 500
    return False


# =============================================================================
# Payload Mapping
# =============================================================================


def _reference(data: dict[str, Any] | None) -> Reference | None:
    if not data:
        return None
    return Reference(key=data.get("index", ""), name=data.get("name", ""), url=data.get("url", ""))


def _parse_option(data: dict[str, Any] | None) -> Any:
    """Convert one API option into a choice tree node, or None if unsupported."""
    if not data:
        return None
    option_type = data.get("option_type")
    if option_type == "reference":
        return ReferenceOption(reference=_reference(data.get("item")))
    if option_type == "counted_reference":
        return CountedReferenceOption(count=data.get("count", 1), reference=_reference(data.get("of")))
    if option_type == "multiple":
        items = [_parse_option(item) for item in data.get("items", [])]
        keys = [
            item.reference.key
            for item in items
            if isinstance(item, (ReferenceOption, CountedReferenceOption)) and item.reference
        ]
        return MultipleOption(key="-".join(keys), items=items)
    if option_type == "choice":
        return parse_choice(data.get("choice"))
    return None


def parse_choice(data: dict[str, Any] | None) -> Choice | None:
    """Convert an API choice object into a :class:`Choice`.

    Option sets backed by an equipment category or resource list are not
    enumerated; they become a choice with no options, which the resolver
    renders as a placeholder.

    Args:
        data: The ``{"desc", "choose", "type", "from"}`` payload.

    Returns:
        The parsed choice, or None for an empty payload.
    """
    if not data:
        return None
    option_set = data.get("from") or {}
    options: list[Any] = []
    key = ""
    if option_set.get("option_set_type") == "options_array":
        options = [_parse_option(option) for option in option_set.get("options", [])]
    elif option_set.get("option_set_type") == "equipment_category":
        key = (option_set.get("equipment_category") or {}).get("index", "")
    return Choice(
        key=key,
        name=data.get("desc", ""),
        type=_CHOICE_TYPES.get(data.get("type", ""), ChoiceType.UNSET),
        count=data.get("choose", 1),
        options=options,
    )


def parse_race(data: dict[str, Any]) -> Race:
    """Map a ``/races/{index}`` payload to a :class:`Race`."""
    bonuses = []
    for bonus in data.get("ability_bonuses", []):
        score = bonus.get("ability_score") or {}
        ability = Ability.parse(score.get("name", "")) or Ability.parse(score.get("index", ""))
        if ability is None:
            logger.warning("Unknown ability in race bonus", race=data.get("index"), ability=score)
            continue
        bonuses.append(AbilityBonus(attribute=ability, bonus=bonus.get("bonus", 0)))

    return Race(
        key=data["index"],
        name=data.get("name", data["index"]),
        speed=data.get("speed", 30),
        ability_bonuses=bonuses,
        starting_proficiencies=[
            ref for ref in map(_reference, data.get("starting_proficiencies", [])) if ref
        ],
        starting_proficiency_options=parse_choice(data.get("starting_proficiency_options")),
        languages=[ref for ref in map(_reference, data.get("languages", [])) if ref],
    )


def parse_class(data: dict[str, Any]) -> CharacterClass:
    """Map a ``/classes/{index}`` payload to a :class:`CharacterClass`."""
    key = data["index"]
    spellcasting = data.get("spellcasting") or {}
    casting_ability = Ability.parse(
        (spellcasting.get("spellcasting_ability") or {}).get("index", "")
    )
    saving_throws = [
        ability
        for ability in (Ability.parse(st.get("index", "")) for st in data.get("saving_throws", []))
        if ability is not None
    ]
    return CharacterClass(
        key=key,
        name=data.get("name", key),
        hit_die=data.get("hit_die") or DEFAULT_HIT_DIE,
        primary_abilities=[Ability(code) for code in PRIMARY_ABILITIES.get(key, ())],
        saving_throws=saving_throws,
        proficiencies=[ref for ref in map(_reference, data.get("proficiencies", [])) if ref],
        proficiency_choices=[parse_choice(choice) for choice in data.get("proficiency_choices", [])],
        starting_equipment=[
            StartingEquipment(quantity=item.get("quantity", 1), equipment=_reference(item["equipment"]))
            for item in data.get("starting_equipment", [])
            if item.get("equipment")
        ],
        starting_equipment_choices=[
            parse_choice(choice) for choice in data.get("starting_equipment_options", [])
        ],
        spellcasting_ability=casting_ability,
    )


# =============================================================================
# Client
# =============================================================================


class SrdApiRulesProvider(RulesProvider):
    """Rules provider backed by the SRD REST API.

    Example:
        >>> provider = SrdApiRulesProvider()
        >>> provider.get_race("elf").speed
        30
    """

    def __init__(
        self,
        settings: RulesSettings | None = None,
        *,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            settings: Rules settings; defaults to the application settings.
            session: Optional pre-configured HTTP session.
        """
        self._settings = settings or get_settings().rules
        self._session = session or requests.Session()
        self._session.headers.setdefault("Accept", "application/json")

        logger.info(
            "SrdApiRulesProvider initialized",
            api_url=self._settings.api_url,
            max_retries=self._settings.max_retries,
        )

    def _get(self, path: str) -> dict[str, Any]:
        """GET a JSON document, retrying transient failures.

        Raises:
            NotFoundError: On HTTP 404.
            RulesDataError: When the request keeps failing.
        """
        url = f"{self._settings.api_url}/{path.lstrip('/')}"
        retrying = Retrying(
            retry=retry_if_exception(_is_transient),
            stop=stop_after_attempt(self._settings.max_retries),
            wait=wait_exponential(multiplier=0.5, min=0.5, max=8),
            reraise=True,
        )
        try:
            for attempt in retrying:
                with attempt:
                    response = self._session.get(url, timeout=self._settings.timeout_seconds)
                    if response.status_code == 404:
                        raise NotFoundError("Rules resource not found", entity_id=path)
                    response.raise_for_status()
                    return response.json()
        except NotFoundError:
            raise
        except (requests.RequestException, ValueError) as exc:
            logger.error("Rules request failed", url=url, error=str(exc))
            raise RulesDataError(
                f"Failed to fetch rules data: {exc}",
                resource=path,
            ) from exc
        raise RulesDataError("Rules request made no attempts", resource=path)

    def _list(self, path: str) -> list[Reference]:
        payload = self._get(path)
        return [ref for ref in map(_reference, payload.get("results", [])) if ref]

    def list_races(self) -> list[Reference]:
        return self._list("races")

    def get_race(self, key: str) -> Race:
        return parse_race(self._get(f"races/{key}"))

    def list_classes(self) -> list[Reference]:
        return self._list("classes")

    def get_class(self, key: str) -> CharacterClass:
        return parse_class(self._get(f"classes/{key}"))

    def list_spells_by_class_and_level(self, class_key: str, level: int) -> list[Spell]:
        payload = self._get(f"classes/{class_key}/spells")
        return [
            Spell(
                key=item["index"],
                name=item.get("name", item["index"]),
                level=item.get("level", 0),
                classes=[class_key],
            )
            for item in payload.get("results", [])
            if item.get("level", 0) == level
        ]

    def get_class_features(self, class_key: str, level: int) -> list[ClassFeature]:
        payload = self._get(f"classes/{class_key}/levels/{level}/features")
        return [
            ClassFeature(key=ref.key, name=ref.name, level=level, class_key=class_key)
            for ref in map(_reference, payload.get("results", []))
            if ref
        ]

    def get_proficiency(self, key: str) -> Proficiency:
        payload = self._get(f"proficiencies/{key}")
        return Proficiency(
            key=payload.get("index", key),
            name=payload.get("name", key),
            category=_PROFICIENCY_TYPES.get(payload.get("type", ""), ProficiencyCategory.OTHER),
        )


__all__ = [
    "SrdApiRulesProvider",
    "parse_choice",
    "parse_race",
    "parse_class",
]
