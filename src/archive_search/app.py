"""Process entry point.

Loads settings from the environment, restores or builds the index, and runs a
warm-up query so load and query timings show up in the logs before an
external service layer starts forwarding requests.

Usage:
    ARCHIVE_LISTING_PATH=listing.jsonl python -m archive_search.app
"""

import logging
import time

from pydantic import ValidationError

from archive_search.config import Settings
from archive_search.errors import ArchiveSearchError, ArgumentError
from archive_search.observability import configure_logging, configure_tracing, export_metrics
from archive_search.service_layer.index_service import IndexService


logger = logging.getLogger(__name__)


def load_settings() -> Settings:
    try:
        return Settings()
    except ValidationError as exc:
        raise ArgumentError(f"Invalid configuration: {exc}") from exc


def bootstrap(settings: Settings) -> IndexService:
    """Create the index service and make an index live."""

    service = IndexService.from_settings(settings)
    service.load(force_rebuild=settings.force_rebuild)

    terms = settings.get_warmup_terms()
    if terms:
        started = time.perf_counter()
        response = service.search(terms)
        elapsed = time.perf_counter() - started
        logger.info(
            "Warm-up search for %s found %d matches in %.4fs",
            terms,
            response.total,
            elapsed,
            extra={"warmup_terms": terms, "match_count": response.total, "elapsed_seconds": round(elapsed, 4)},
        )
    return service


def main() -> int:
    try:
        settings = load_settings()
        configure_logging(level=settings.log_level, json_output=settings.log_json)
        configure_tracing()
        bootstrap(settings)
        if settings.metrics_textfile is not None:
            export_metrics(settings.metrics_textfile)
    except ArchiveSearchError:
        logger.exception("Archive search startup failed")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
