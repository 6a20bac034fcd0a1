import re
from typing import List, NamedTuple


class CatalogSymptom(NamedTuple):
    id: str
    name: str
    is_common: bool


class MockCondition(NamedTuple):
    id: str
    name: str
    confidence: int  # percent match
    description: str


# Placeholder content until a real symptom / condition source exists
REGION_SYMPTOMS = [
    CatalogSymptom("1", "Pain", True),
    CatalogSymptom("2", "Swelling", True),
    CatalogSymptom("3", "Redness", True),
    CatalogSymptom("4", "Stiffness", True),
    CatalogSymptom("5", "Numbness", False),
    CatalogSymptom("6", "Tingling", False),
    CatalogSymptom("7", "Weakness", False),
    CatalogSymptom("8", "Limited movement", True),
]

MOCK_CONDITIONS = [
    MockCondition("1", "Common Cold", 85, "A viral infection of the upper respiratory tract."),
    MockCondition("2", "Influenza", 65, "A contagious respiratory illness caused by influenza viruses."),
    MockCondition("3", "Allergic Rhinitis", 45, "An allergic response to airborne allergens."),
]

SYNONYMS = {
    "ache": "pain",
    "sore": "pain",
    "hurts": "pain",
    "swollen": "swelling",
    "puffy": "swelling",
    "red": "redness",
    "stiff": "stiffness",
    "numb": "numbness",
    "pins and needles": "tingling",
    "weak": "weakness",
    "cant move": "limited movement",
}


def normalize_text(text):
    text = text.lower().replace("'", "")
    text = re.sub(r"[^a-z\s]", " ", text)
    text = re.sub(r"\s+", " ", text).strip()
    for k, v in SYNONYMS.items():
        text = re.sub(rf"\b{k}\b", v, text)
    return text


def filter_symptoms(search: str = "", common_only: bool = False) -> List[CatalogSymptom]:
    term = normalize_text(search)
    results = []
    for symptom in REGION_SYMPTOMS:
        if common_only and not symptom.is_common:
            continue
        if term and term not in symptom.name.lower():
            continue
        results.append(symptom)
    return results


def symptoms_by_ids(ids):
    wanted = set(ids)
    return [s.name for s in REGION_SYMPTOMS if s.id in wanted]
