from __future__ import annotations

from cycle_nlu.models import Symptom, SymptomCategory

# Maps free-text symptom words to canonical symptom names.
SYMPTOM_SYNONYMS: dict[str, str] = {
    # Physical
    "cramps": "menstrual_cramps",
    "cramping": "menstrual_cramps",
    "pain": "menstrual_cramps",
    "bloating": "bloating",
    "bloated": "bloating",
    "headache": "headache",
    "tired": "fatigue",
    "exhausted": "fatigue",
    "fatigue": "fatigue",
    # Mood
    "sad": "low_mood",
    "depressed": "low_mood",
    "angry": "irritability",
    "irritable": "irritability",
    "anxious": "anxiety",
    "anxiety": "anxiety",
}

SYMPTOM_CATEGORIES: dict[str, SymptomCategory] = {
    "menstrual_cramps": SymptomCategory.PHYSICAL,
    "bloating": SymptomCategory.PHYSICAL,
    "headache": SymptomCategory.PHYSICAL,
    "fatigue": SymptomCategory.PHYSICAL,
    "breast_tenderness": SymptomCategory.PHYSICAL,
    "acne": SymptomCategory.PHYSICAL,
    "low_mood": SymptomCategory.EMOTIONAL,
    "irritability": SymptomCategory.EMOTIONAL,
    "anxiety": SymptomCategory.EMOTIONAL,
    "mood_swings": SymptomCategory.EMOTIONAL,
}


def normalize_symptom(text: str) -> Symptom:
    """Map raw symptom text to its canonical name and category.

    Unknown text is kept (lower-cased, trimmed) as the name with category
    ``other``. Never raises.
    """
    lowered = text.lower().strip()
    name = SYMPTOM_SYNONYMS.get(lowered, lowered)
    category = SYMPTOM_CATEGORIES.get(name, SymptomCategory.OTHER)
    return Symptom(name=name, category=category)
