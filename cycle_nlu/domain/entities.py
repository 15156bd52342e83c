from __future__ import annotations

import copy
import logging
from typing import Any

from cycle_nlu.domain.dates import validate_cycle_date
from cycle_nlu.domain.symptoms import normalize_symptom

logger = logging.getLogger(__name__)


def process_entities(raw_entities: Any) -> dict[str, Any]:
    """Clean the entity bag returned by the LLM.

    Symptoms are normalised; temporal dates are validated and invalid ones
    dropped. Everything else is passed through. The result is a deep copy and
    shares no container with the input.
    """
    if not isinstance(raw_entities, dict):
        return {}

    processed = copy.deepcopy(raw_entities)

    symptoms = processed.get("symptoms")
    if isinstance(symptoms, list):
        # Only free-text entries are normalised; anything else is left as the LLM sent it
        processed["symptoms"] = [
            normalize_symptom(s) if isinstance(s, str) else s for s in symptoms
        ]

    temporal = processed.get("temporal")
    if isinstance(temporal, dict):
        dates = temporal.get("dates")
        if isinstance(dates, list):
            valid_dates = []
            for raw_date in dates:
                validation = validate_cycle_date(raw_date)
                if validation.valid:
                    valid_dates.append(validation.normalized_date)
                else:
                    logger.debug("Dropping date %r: %s", raw_date, ", ".join(validation.errors))
            temporal["dates"] = valid_dates

    return processed
