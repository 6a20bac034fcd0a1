"""
Form state for the symptom checker wizard, kept free of any UI code so the
Streamlit page stays a thin layer over it.
"""

from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class Step(str, Enum):
    INFO = "INFO"
    SYMPTOMS = "SYMPTOMS"
    CONDITIONS = "CONDITIONS"
    DETAILS = "DETAILS"
    TREATMENT = "TREATMENT"


STEPS: List[Step] = list(Step)


def next_step(step: Step) -> Step:
    i = STEPS.index(step)
    return STEPS[min(i + 1, len(STEPS) - 1)]


def previous_step(step: Step) -> Step:
    i = STEPS.index(step)
    return STEPS[max(i - 1, 0)]


class PatientInfo(BaseModel):
    age: Optional[int] = Field(default=None, ge=0, le=120)
    gender: Optional[Literal["male", "female"]] = None

    @property
    def complete(self) -> bool:
        return self.age is not None and self.gender is not None


class SymptomList(BaseModel):
    items: List[str] = []

    def add(self, symptom: str) -> bool:
        """Append unless blank or already listed; returns whether it was added."""
        symptom = symptom.strip()
        if not symptom or symptom in self.items:
            return False
        self.items.append(symptom)
        return True

    def remove(self, index: int) -> None:
        if 0 <= index < len(self.items):
            del self.items[index]

    def __len__(self) -> int:
        return len(self.items)


def can_proceed(step: Step, patient: PatientInfo, symptoms: SymptomList) -> bool:
    if step is Step.INFO:
        return patient.complete
    if step is Step.SYMPTOMS:
        return len(symptoms) > 0
    return step is not STEPS[-1]


def compose_symptom_text(patient: PatientInfo, symptoms: SymptomList,
                         body_part: Optional[str] = None) -> str:
    text = ", ".join(symptoms.items)
    if patient.complete:
        text = f"{text} (patient: {patient.age} year old {patient.gender})"
    if body_part:
        text = f"[{body_part}] {text}"
    return text
