"""End-to-end digest run: ingest, classify, render, store, and export.

Credentials are validated before any remote call. Clients built here are
closed when the run ends; injected clients stay open for their owner.
"""

from __future__ import annotations

import contextlib
import dataclasses as dc
import typing as typ
from pathlib import Path

import httpx

from slackdigest.classify import Classifier, create_classification_strategy
from slackdigest.classify.constants import DEFAULT_CHUNK_SIZE
from slackdigest.common.time import hours_ago, utcnow
from slackdigest.export import NotionConfig, NotionExporter, NotionExportError
from slackdigest.logging import get_logger, log_exception, log_info, log_warning
from slackdigest.reporting import (
    DigestMetadata,
    FilesystemDigestSink,
    render_digest_markdown,
)
from slackdigest.sample import load_sample_file, sample_channel_messages
from slackdigest.slack import (
    IngestionOrchestrator,
    RateLimiter,
    SlackWebClient,
    SlackWebConfig,
)
from slackdigest.slack.ratelimit import DEFAULT_MIN_INTERVAL_S

if typ.TYPE_CHECKING:
    import datetime as dt

    from slackdigest.classify.protocol import ClassificationStrategy
    from slackdigest.config import DigestConfig
    from slackdigest.models import ChannelMessages, DigestResult
    from slackdigest.reporting import DigestSink
    from slackdigest.slack import SlackWorkspaceClient

logger = get_logger(__name__)


@dc.dataclass(frozen=True, slots=True)
class DigestOptions:
    """Options for a single digest run.

    Attributes
    ----------
    hours_back
        Length of the retrieval window in hours.
    channels
        Channel names to include; ``None`` includes every member channel.
    output_dir
        Directory receiving the rendered digest.
    dry_run
        Use sample data and the rule-based strategy without network access.
    notion
        Export the digest to Notion when credentials are configured.
    sample_file
        JSON file replacing the built-in sample in dry runs.
    chunk_size
        Messages per classification request.
    classify_concurrency
        Maximum classification requests in flight.
    rate_limit_interval_s
        Minimum spacing between Slack calls.

    """

    hours_back: float = 24.0
    channels: tuple[str, ...] | None = None
    output_dir: Path = Path("output")
    dry_run: bool = False
    notion: bool = False
    sample_file: Path | None = None
    chunk_size: int = DEFAULT_CHUNK_SIZE
    classify_concurrency: int = 1
    rate_limit_interval_s: float = DEFAULT_MIN_INTERVAL_S

    @classmethod
    def from_config(
        cls, config: DigestConfig, **overrides: typ.Any  # noqa: ANN401
    ) -> DigestOptions:
        """Build options from run configuration, applying explicit overrides."""
        options = cls(
            hours_back=config.hours_back,
            channels=config.channels,
            output_dir=config.output_dir,
            chunk_size=config.chunk_size,
            classify_concurrency=config.classify_concurrency,
            rate_limit_interval_s=config.rate_limit_interval_s,
        )
        present = {
            key: value for key, value in overrides.items() if value is not None
        }
        return dc.replace(options, **present)


@dc.dataclass(frozen=True, slots=True)
class DigestRunOutcome:
    """Result of a completed digest run."""

    result: DigestResult
    output_path: Path
    export_url: str | None = None


async def _aclose_if_owned(resource: object) -> None:
    aclose = getattr(resource, "aclose", None)
    if aclose is not None:
        await aclose()


async def _ingest(
    options: DigestOptions,
    client: SlackWorkspaceClient | None,
    now: dt.datetime,
) -> list[ChannelMessages]:
    if options.dry_run:
        if options.sample_file is not None:
            log_info(
                logger, "Dry run: loading sample data from %s", options.sample_file
            )
            return load_sample_file(options.sample_file)
        log_info(logger, "Dry run: using built-in sample data")
        return sample_channel_messages(now)

    if client is None:  # pragma: no cover - guarded by run_digest
        msg = "A Slack client is required outside dry runs"
        raise RuntimeError(msg)
    orchestrator = IngestionOrchestrator.for_client(
        client, rate_limiter=RateLimiter(options.rate_limit_interval_s)
    )
    return await orchestrator.fetch_recent_messages(
        since=hours_ago(options.hours_back, now=now),
        channel_names=options.channels,
    )


async def _export(
    exporter: NotionExporter, result: DigestResult, now: dt.datetime
) -> str | None:
    try:
        url = await exporter.push_digest(result, digest_date=now.date())
    except (NotionExportError, httpx.HTTPError) as exc:
        log_exception(logger, f"Notion export failed: {exc}", exc)
        return None
    log_info(logger, "Exported digest to Notion: %s", url)
    return url


async def run_digest(  # noqa: PLR0913
    options: DigestOptions,
    *,
    slack_client: SlackWorkspaceClient | None = None,
    strategy: ClassificationStrategy | None = None,
    sink: DigestSink | None = None,
    exporter: NotionExporter | None = None,
    now: dt.datetime | None = None,
) -> DigestRunOutcome:
    """Run one digest and return its outcome.

    Parameters
    ----------
    options
        Run options.
    slack_client
        Workspace client; built from ``SLACKDIGEST_SLACK_TOKEN`` when omitted
        outside dry runs.
    strategy
        Classification strategy; chosen from the environment when omitted.
    sink
        Digest sink; a filesystem sink under ``options.output_dir`` by
        default.
    exporter
        Notion exporter; built from the environment when ``options.notion``
        is set and credentials are present.
    now
        Reference time for the window and file names.

    Raises
    ------
    SlackConfigError
        If no Slack token is configured for a live run.
    ClassifierConfigError
        If the model backend is selected with invalid settings.
    SlackError
        If ingestion fails; no digest file is written.

    """
    run_at = now or utcnow()
    async with contextlib.AsyncExitStack() as stack:
        if not options.dry_run and slack_client is None:
            web_client = SlackWebClient(SlackWebConfig.from_env())
            stack.push_async_callback(web_client.aclose)
            slack_client = web_client

        if strategy is None:
            strategy = create_classification_strategy(force_rules=options.dry_run)
            stack.push_async_callback(_aclose_if_owned, strategy)

        if options.notion and exporter is None:
            if NotionConfig.is_configured():
                exporter = NotionExporter(NotionConfig.from_env())
                stack.push_async_callback(exporter.aclose)
            else:
                log_warning(
                    logger,
                    "Skipping Notion export: SLACKDIGEST_NOTION_API_KEY or "
                    "SLACKDIGEST_NOTION_DATABASE_ID is not set",
                )

        channel_messages = await _ingest(options, slack_client, run_at)
        log_info(
            logger,
            "Fetched %d messages from %d channels",
            sum(len(entry.messages) for entry in channel_messages),
            len(channel_messages),
        )

        classifier = Classifier(
            strategy,
            chunk_size=options.chunk_size,
            max_concurrency=options.classify_concurrency,
        )
        result = await classifier.classify(channel_messages)

        markdown = render_digest_markdown(
            result, generated_at=run_at, hours_back=options.hours_back
        )
        target = sink or FilesystemDigestSink(options.output_dir)
        output_path = await target.write_digest(
            markdown,
            metadata=DigestMetadata(
                digest_date=run_at.date().isoformat(),
                hours_back=options.hours_back,
            ),
        )
        log_info(logger, "Wrote digest to %s", output_path)

        export_url = None
        if options.notion and exporter is not None:
            export_url = await _export(exporter, result, run_at)

    return DigestRunOutcome(
        result=result, output_path=output_path, export_url=export_url
    )
