"""Per-commit metadata lookup against the forge.

Each changelog entry costs one API round trip. With more than one worker
the lookups run in a thread pool, but results always come back in the
order of the input so section membership and sorting do not depend on
which request finished first.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from changelog_py.forge.base import CommitMetadata, ForgeClient

logger = logging.getLogger(__name__)


def enrich_commits(
    shas: Sequence[str],
    client: ForgeClient,
    *,
    workers: int = 1,
) -> list[CommitMetadata]:
    """Fetch CommitMetadata for every sha, in input order.

    Args:
        shas: Commit ids, as read from the log
        client: Forge client to query
        workers: Maximum concurrent lookups

    Returns:
        One CommitMetadata per sha, aligned with ``shas``

    Raises:
        CommitMetadataError: On the first lookup that fails; no partial result
    """
    if workers <= 1 or len(shas) <= 1:
        return [_fetch(client, sha) for sha in shas]

    logger.debug("fetching %d commits with %d workers", len(shas), workers)
    with ThreadPoolExecutor(max_workers=min(workers, len(shas))) as pool:
        # map() yields in submission order and re-raises the first failure
        try:
            return list(pool.map(lambda sha: _fetch(client, sha), shas))
        except Exception:
            # drop queued lookups; only the ones already running finish
            pool.shutdown(cancel_futures=True)
            raise


def _fetch(client: ForgeClient, sha: str) -> CommitMetadata:
    info = client.get_commit_info(sha)
    logger.debug("commit %s by %s", sha, info.committer_email)
    return info
