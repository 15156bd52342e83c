"""NLU front end for a menstrual-health tracking assistant."""
