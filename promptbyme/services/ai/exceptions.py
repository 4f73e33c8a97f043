"""
Custom exceptions for the AI provider layer.
"""


class AIGenerationError(Exception):
    """Generic AI generation error"""

    def __init__(self, message: str, provider: str = None, model: str = None):
        self.message = message
        self.provider = provider
        self.model = model
        super().__init__(self.message)

    def __str__(self):
        if self.provider and self.model:
            return f"[{self.provider}/{self.model}] {self.message}"
        return self.message


class AIUnsupportedModelError(AIGenerationError):
    """Model identifier does not map to any known provider"""

    def __init__(self, message: str = None, provider: str = None, model: str = None):
        if message is None:
            message = f"Unsupported model: {model}" if model else "Unsupported model"
        super().__init__(message, provider, model)


class AIProviderError(AIGenerationError):
    """Provider answered with a non-success status"""

    def __init__(self, message: str, provider: str = None, model: str = None, status_code: int = None):
        self.status_code = status_code
        super().__init__(message, provider, model)


class AIProviderUnreachableError(AIGenerationError):
    """Network or transport failure before the provider answered"""

    def __init__(self, message: str = "AI provider unreachable", provider: str = None, model: str = None):
        super().__init__(message, provider, model)


class AITimeoutError(AIProviderUnreachableError):
    """Timeout on the AI call"""

    def __init__(self, message: str = "AI request timed out", provider: str = None, model: str = None, timeout_seconds: float = None):
        self.timeout_seconds = timeout_seconds
        if timeout_seconds:
            message = f"{message} (timeout: {timeout_seconds}s)"
        super().__init__(message, provider, model)


class AIInvalidResponseError(AIProviderError):
    """Provider answered 2xx with a body we cannot read"""

    def __init__(self, message: str = "Invalid response format from AI provider", provider: str = None, model: str = None):
        super().__init__(message, provider, model)
