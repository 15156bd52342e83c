class NLUError(Exception):
    """Base exception for failures inside the NLU pipeline."""

    pass


class ClassificationError(NLUError):
    """Raised when the LLM could not classify a message (transport error, timeout)."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"Failed to process with LLM: {detail}")


class MalformedLLMResponseError(ClassificationError):
    """Raised when the LLM answers with something that is not a JSON object."""

    def __init__(self, content: str):
        self.content = content
        super().__init__(f"malformed JSON response: {content[:200]!r}")


class CorruptContextRecordError(NLUError):
    """Raised by storage when a user record exists but cannot be decoded."""

    def __init__(self, user_id: str, reason: str):
        self.user_id = user_id
        self.reason = reason
        super().__init__(f"Corrupt context record for user {user_id}: {reason}")
