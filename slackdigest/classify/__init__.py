"""Message classification and ranking.

The `ClassificationStrategy` protocol defines how a chunk of messages is
classified; `OpenAIClassificationModel` and `RuleBasedClassifier` implement
it. `Classifier` splits ingested channels into chunks, degrades failed chunks
to rules, and ranks the outcome into a `DigestResult`.

Public API
----------
Classifier
    Chunking, fallback, and ranking front end.
ClassificationStrategy
    Protocol for classification backends.
RuleBasedClassifier
    Deterministic keyword backend.
OpenAIClassificationModel
    OpenAI-compatible chat completions backend.
OpenAIClassifierConfig
    Configuration dataclass for the chat completions client.
create_classification_strategy
    Factory choosing the backend from environment configuration.
rank_items, compute_stats
    Ordering and aggregate statistics.

Examples
--------
>>> from slackdigest.classify import Classifier, RuleBasedClassifier
>>> classifier = Classifier(RuleBasedClassifier())
>>> result = await classifier.classify(channel_messages)

"""

from __future__ import annotations

from slackdigest.classify.classifier import Classifier, build_request
from slackdigest.classify.config import OpenAIClassifierConfig
from slackdigest.classify.errors import (
    ClassificationError,
    ClassifierAPIError,
    ClassifierConfigError,
    ClassifierResponseShapeError,
)
from slackdigest.classify.factory import (
    create_classification_strategy,
    model_backend_configured,
)
from slackdigest.classify.models import Classification, ClassificationRequest
from slackdigest.classify.openai_client import OpenAIClassificationModel
from slackdigest.classify.protocol import ClassificationStrategy
from slackdigest.classify.ranking import (
    CATEGORY_ORDER,
    PRIORITY_ORDER,
    compute_stats,
    rank_items,
)
from slackdigest.classify.rules import DEFAULT_RULE_SET, RuleBasedClassifier, RuleSet

__all__ = [
    "CATEGORY_ORDER",
    "DEFAULT_RULE_SET",
    "PRIORITY_ORDER",
    "Classification",
    "ClassificationError",
    "ClassificationRequest",
    "ClassificationStrategy",
    "Classifier",
    "ClassifierAPIError",
    "ClassifierConfigError",
    "ClassifierResponseShapeError",
    "OpenAIClassificationModel",
    "OpenAIClassifierConfig",
    "RuleBasedClassifier",
    "RuleSet",
    "build_request",
    "compute_stats",
    "create_classification_strategy",
    "model_backend_configured",
    "rank_items",
]
