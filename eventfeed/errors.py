class ProviderError(Exception):
    """A provider call failed. Caught at the aggregator boundary and reported in sourceStats."""

    def __init__(self, provider, message):
        super().__init__(message)
        self.provider = provider
        self.message = message

    def __str__(self):
        return self.message


class MissingApiKey(ProviderError):
    def __init__(self, provider):
        super().__init__(provider, f"API key not configured for {provider}")


class ProviderTimeout(ProviderError):
    def __init__(self, provider, timeout):
        super().__init__(provider, f"{provider} request timed out after {timeout:g}s")
        self.timeout = timeout


class ProviderHTTPError(ProviderError):
    def __init__(self, provider, status_code, reason=""):
        message = f"{provider} returned HTTP {status_code}"
        if reason:
            message += f" ({reason})"
        super().__init__(provider, message)
        self.status_code = status_code


class RequestValidationError(ValueError):
    """
    Invalid search request. `errors` is a list of dicts with
    message, field and details keys.
    """

    def __init__(self, errors):
        super().__init__(errors[0]["message"] if errors else "Validation failed")
        self.errors = errors
