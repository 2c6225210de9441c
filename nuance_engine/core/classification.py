"""
Keyword Classification Rules

Each fingerprint field is classified by an ordered list of ClassificationRule
entries. classify_first returns the category of the first matching rule;
collect_all gathers every matching category in rule order.
"""

import re
from dataclasses import dataclass, field
from typing import Generic, List, Optional, Sequence, TypeVar

from ..models import (
    AntagonistType,
    EndingType,
    IncitingIncidentCategory,
    SettingTag,
    StakesType,
)

T = TypeVar("T")


@dataclass(frozen=True)
class ClassificationRule(Generic[T]):
    """A case-insensitive pattern mapped to a category."""
    pattern: str
    category: T
    regex: "re.Pattern[str]" = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "regex", re.compile(self.pattern, re.IGNORECASE))

    def matches(self, text: str) -> bool:
        return self.regex.search(text) is not None


def classify_first(text: str, rules: Sequence[ClassificationRule[T]], default: T) -> T:
    """Category of the first matching rule, or default."""
    for rule in rules:
        if rule.matches(text):
            return rule.category
    return default


def collect_all(
    text: str,
    rules: Sequence[ClassificationRule[T]],
    cap: Optional[int] = None,
) -> List[T]:
    """Categories of every matching rule in rule order, deduplicated, at most `cap`."""
    found: List[T] = []
    for rule in rules:
        if cap is not None and len(found) >= cap:
            break
        if rule.category not in found and rule.matches(text):
            found.append(rule.category)
    return found


def count_matches(text: str, pattern: "re.Pattern[str]") -> int:
    return len(pattern.findall(text or ""))


# ============================================================================
# Rule Tables
# ============================================================================

STAKES_RULES: List[ClassificationRule[StakesType]] = [
    ClassificationRule(r"\b(world|global|humanity|civilization|nation|country|war)\b", StakesType.GLOBAL),
    ClassificationRule(r"\b(systemic|institution(?:s|al)?|policy|government|corporate|structural)\b", StakesType.SYSTEMIC),
    ClassificationRule(r"\b(community|social|group|family|neighborhood|town)\b", StakesType.SOCIAL),
]

TWIST_PHRASES = re.compile(r"\b(reveals?|turns? out|twist|secretly|all along)\b", re.IGNORECASE)

ANTAGONIST_RULES: List[ClassificationRule[AntagonistType]] = [
    ClassificationRule(r"\b(inner|internal|self-?destruct(?:s|ed|ing|ive|ion)?|own worst|addiction|denial)\b", AntagonistType.SELF),
    ClassificationRule(r"\b(system|institution(?:s|al)?|bureaucra(?:cy|cies|t|ts|tic)|corporate|government|structural)\b", AntagonistType.SYSTEM),
    ClassificationRule(r"\b(relationship|marriage|partner|family dynamic|toxic)\b", AntagonistType.RELATIONSHIP),
]

ENDING_RULES: List[ClassificationRule[EndingType]] = [
    ClassificationRule(r"\b(reconcil(?:e|es|ed|ing|iation)|reunit(?:e|es|ed|ing)|forgiv(?:e|es|en|ing|eness)|forgave|heal(?:s|ed|ing)?|together again)\b", EndingType.RECONCILIATION),
    ClassificationRule(r"\b(accept(?:s|ed|ing|ance)?|come to terms|peace with|letting go)\b", EndingType.ACCEPTANCE),
    ClassificationRule(r"\b(escap(?:e|es|ed|ing)|fle(?:e|es|eing|d)|leave|run away|freedom)\b", EndingType.ESCAPE),
    ClassificationRule(r"\b(justice|punish(?:es|ed|ing|ment)?|convict(?:s|ed|ion)?|verdict|sentenced|sentencing)\b", EndingType.JUSTICE),
    ClassificationRule(r"\b(tragic(?:ally)?|death|loss|destroy(?:s|ed|ing)?|downfall)\b", EndingType.TRAGEDY),
]

INCITING_RULES: List[ClassificationRule[IncitingIncidentCategory]] = [
    ClassificationRule(r"\b(loss|death|funeral|fired|bankrupt(?:cy)?|divorc(?:e|es|ed|ing))\b", IncitingIncidentCategory.LOSS),
    ClassificationRule(r"\b(offer(?:s|ed|ing)?|opportunit(?:y|ies)|invitation|proposal|chance)\b", IncitingIncidentCategory.OFFER),
    ClassificationRule(r"\b(mistakes?|accident(?:s|al|ally)?|errors?|blunder(?:s|ed)?|slip(?:s|ped)?)\b", IncitingIncidentCategory.MISTAKE),
    ClassificationRule(r"\b(arrives?|moves? to|new town|stranger|newcomer)\b", IncitingIncidentCategory.ARRIVAL),
    ClassificationRule(r"\b(accus(?:e|es|ed|ing|ation|ations)|allegations?|charged|suspect(?:s|ed)?|blam(?:e|es|ed|ing))\b", IncitingIncidentCategory.ACCUSATION),
]

SETTING_RULES: List[ClassificationRule[SettingTag]] = [
    ClassificationRule(r"\b(urban|city|metropolis)\b", SettingTag.URBAN),
    ClassificationRule(r"\b(rural|countryside|village|farm)\b", SettingTag.RURAL),
    ClassificationRule(r"\b(office|corporate|workplace)\b", SettingTag.WORKPLACE),
    ClassificationRule(r"\b(domestic|home|apartment|house)\b", SettingTag.DOMESTIC),
    ClassificationRule(r"\b(hospital|medical|clinic)\b", SettingTag.MEDICAL),
    ClassificationRule(r"\b(school|university|campus)\b", SettingTag.EDUCATIONAL),
    ClassificationRule(r"\b(court|legal|prison|jail)\b", SettingTag.LEGAL),
]

# Maximum number of setting tags kept on a fingerprint
SETTING_TAG_CAP = 5
