"""Factory for choosing a ClassificationStrategy from environment configuration."""

from __future__ import annotations

import os
import typing as typ

from slackdigest.classify.rules import RuleBasedClassifier

if typ.TYPE_CHECKING:
    from slackdigest.classify.protocol import ClassificationStrategy


def model_backend_configured() -> bool:
    """Return True when a non-empty classifier API key is present."""
    return bool(os.environ.get("SLACKDIGEST_OPENAI_API_KEY", "").strip())


def create_classification_strategy(
    *, force_rules: bool = False
) -> ClassificationStrategy:
    """Create the strategy used for a whole run.

    The model-backed strategy is chosen when ``SLACKDIGEST_OPENAI_API_KEY``
    holds a non-empty value; it also reads:

    - ``SLACKDIGEST_OPENAI_ENDPOINT``: Optional endpoint override
    - ``SLACKDIGEST_OPENAI_MODEL``: Optional model override
    - ``SLACKDIGEST_OPENAI_TEMPERATURE``: Optional temperature (0.0-2.0)
    - ``SLACKDIGEST_OPENAI_MAX_TOKENS``: Optional max tokens (positive integer)

    Otherwise, or when ``force_rules`` is set, the rule-based strategy is
    returned.

    Raises
    ------
    ClassifierConfigError
        If the model backend is selected but its configuration is invalid.

    Examples
    --------
    >>> import os
    >>> _ = os.environ.pop("SLACKDIGEST_OPENAI_API_KEY", None)
    >>> isinstance(create_classification_strategy(), RuleBasedClassifier)
    True

    """
    if force_rules or not model_backend_configured():
        return RuleBasedClassifier()

    from slackdigest.classify.config import OpenAIClassifierConfig
    from slackdigest.classify.openai_client import OpenAIClassificationModel

    return OpenAIClassificationModel(OpenAIClassifierConfig.from_env())
