"""Prompt templates for model-backed classification."""

from __future__ import annotations

import typing as typ

import msgspec

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from slackdigest.classify.models import ClassificationRequest

SYSTEM_PROMPT = """\
You triage Slack messages for a team digest. Messages may be written in Dutch \
or English. Classify every message you are given.

## Categories

- **ACTION_ITEM**: a task, request, or follow-up somebody has to act on
- **DECISION**: a decision that was taken or approved
- **ANNOUNCEMENT**: news, a release, a heads-up, or a change everybody should know
- **QUESTION**: an open question that still needs an answer
- **FYI**: anything else worth remembering

## Output Requirements

Respond with a JSON array only, one object per input message, in input order:

```json
[
  {
    "id": "message id exactly as given",
    "category": "ACTION_ITEM" | "DECISION" | "ANNOUNCEMENT" | "QUESTION" | "FYI",
    "summary": "one-line summary, at most 100 characters",
    "priority": "high" | "medium" | "low",
    "assignee": "person the item is addressed to, or null",
    "deadline": "deadline mentioned in the message, or null"
  }
]
```

## Guidelines

1. Use the thread replies and reactions as context; they often settle whether \
a question was answered or a proposal was accepted.
2. Use **high** priority only for urgent or blocking action items.
3. Write the summary in the language of the message.
4. Never skip a message and never invent ids.
"""


def build_user_prompt(requests: cabc.Sequence[ClassificationRequest]) -> str:
    """Build the user prompt for one chunk of requests.

    Parameters
    ----------
    requests
        Requests of a single chunk.

    Returns
    -------
    str
        Instructions followed by the JSON-encoded requests.

    """
    encoded = msgspec.json.encode(list(requests)).decode("utf-8")
    return "\n".join(
        [
            f"Classify the following {len(requests)} Slack messages.",
            "",
            encoded,
            "",
            "Respond with the JSON array described in the system prompt.",
        ]
    )
