"""ClassificationStrategy protocol shared by model-backed and rule backends."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from slackdigest.classify.models import Classification, ClassificationRequest


@typ.runtime_checkable
class ClassificationStrategy(typ.Protocol):
    """Protocol for assigning a category and priority to message batches.

    Implementations receive one chunk of requests from a single channel and
    return one classification per request they could answer. The classifier
    checks completeness, so implementations need not.

    Examples
    --------
    >>> from slackdigest.classify import ClassificationStrategy, RuleBasedClassifier
    >>> strategy: ClassificationStrategy = RuleBasedClassifier()
    >>> isinstance(strategy, ClassificationStrategy)
    True

    """

    name: str

    async def classify_batch(
        self,
        requests: cabc.Sequence[ClassificationRequest],
    ) -> list[Classification]:
        """Classify a batch of requests.

        Parameters
        ----------
        requests
            Requests of one chunk; ids are unique within the chunk.

        Returns
        -------
        list[Classification]
            Classifications keyed by request id.

        Raises
        ------
        ClassificationError
            If the backend fails or answers in an unusable shape.

        """
        ...
