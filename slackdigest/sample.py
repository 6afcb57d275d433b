"""Built-in sample workspace used by ``--dry-run``.

The sample exercises every category, a thread, reactions, and a mention so a
dry run renders a representative digest without network access. A JSON file
holding a list of :class:`~slackdigest.models.ChannelMessages` can replace it.
"""

from __future__ import annotations

import typing as typ

import msgspec

from slackdigest.common.time import utcnow
from slackdigest.models import (
    Channel,
    ChannelMessages,
    Identity,
    Message,
    Reaction,
    Reply,
)

if typ.TYPE_CHECKING:
    import datetime as dt
    from pathlib import Path

_JANE = Identity(id="U001", handle="janedoe", display_name="Jane")
_BOB = Identity(id="U002", handle="bob", display_name="Bob")
_ALICE = Identity(id="U003", handle="alice", display_name="Alice")
_CHARLIE = Identity(id="U004", handle="charlie", display_name="Charlie")
_DIANA = Identity(id="U005", handle="diana", display_name="Diana")
_ERIK = Identity(id="U006", handle="erik", display_name="Erik")
_FRANK = Identity(id="U007", handle="frank", display_name="Frank")


def _ts(now: float, seconds_ago: int) -> str:
    return f"{now - seconds_ago:.6f}"


def sample_channel_messages(now: dt.datetime | None = None) -> list[ChannelMessages]:
    """Return the built-in sample, timestamped relative to ``now``."""
    reference = (now or utcnow()).timestamp()

    def message(  # noqa: PLR0913
        author: Identity,
        text: str,
        seconds_ago: int,
        *,
        replies: tuple[tuple[Identity, str, int], ...] = (),
        reactions: tuple[tuple[str, int], ...] = (),
    ) -> Message:
        ts = _ts(reference, seconds_ago)
        return Message(
            id=ts,
            author=author,
            text=text,
            timestamp=ts,
            thread_replies=tuple(
                Reply(author=who, text=body, timestamp=_ts(reference, ago))
                for who, body, ago in replies
            ),
            reactions=tuple(
                Reaction(name=name, count=count) for name, count in reactions
            ),
        )

    return [
        ChannelMessages(
            channel=Channel(id="C001", name="engineering"),
            messages=(
                message(
                    _JANE,
                    "Kun je de v2.1 hotfix deployen naar productie vandaag? "
                    "Het is dringend.",
                    3600,
                    replies=((_BOB, "Ik pak het op, wordt voor 15:00.", 3400),),
                    reactions=(("eyes", 2),),
                ),
                message(
                    _ALICE,
                    "We hebben besloten om over te stappen naar PostgreSQL voor de "
                    "nieuwe service. Migration plan volgt volgende week.",
                    7200,
                    reactions=(("+1", 5),),
                ),
                message(
                    _BOB,
                    "Heads up: de API rate limits worden per 1 maart aangepast. "
                    "Zie docs voor details.",
                    5400,
                ),
                message(
                    _CHARLIE,
                    "Weet iemand of we al een staging environment hebben voor de "
                    "nieuwe microservice?",
                    4800,
                    replies=((_JANE, "Nog niet, staat op de roadmap voor Q2.", 4600),),
                ),
            ),
        ),
        ChannelMessages(
            channel=Channel(id="C002", name="product"),
            messages=(
                message(
                    _DIANA,
                    "<@U008> Kun je de client presentatie voorbereiden voor vrijdag? "
                    "Graag de nieuwe features meenemen.",
                    6000,
                ),
                message(
                    _ERIK,
                    "NPS score van deze maand is 72, een stijging van 8 punten. "
                    "Goed bezig team!",
                    2400,
                    reactions=(("tada", 8), ("rocket", 3)),
                ),
            ),
        ),
        ChannelMessages(
            channel=Channel(id="C003", name="general"),
            messages=(
                message(
                    _FRANK,
                    "Nieuwe collega Lisa begint maandag! Ze gaat bij het design team "
                    "zitten. Welkom!",
                    1800,
                    reactions=(("wave", 12),),
                ),
                message(
                    _JANE,
                    "Todo voor iedereen: vul je OKRs in voor Q2. "
                    "Deadline is aanstaande vrijdag.",
                    900,
                ),
            ),
        ),
    ]


def load_sample_file(path: Path) -> list[ChannelMessages]:
    """Decode a JSON list of channel messages from ``path``.

    Raises
    ------
    msgspec.ValidationError
        If the file does not match the :class:`ChannelMessages` shape.

    """
    return msgspec.json.decode(path.read_bytes(), type=list[ChannelMessages])
