"""Exception hierarchy for the policy bot."""


class PolicyBotError(Exception):
    """Base class for all policy bot errors."""


class ConfigError(PolicyBotError):
    """Invalid configuration or missing credentials. Fatal at startup."""


class ProviderError(PolicyBotError):
    """An embedding, generation or search provider call failed or returned malformed data."""


class ConsistencyError(PolicyBotError):
    """Embedding dimensions disagree; the corpus has to be re-ingested."""


class FeatureDisabledError(PolicyBotError):
    """A search path switched off by a runtime flag was invoked."""


class RetrievalError(PolicyBotError):
    """Every retrieval path failed."""
