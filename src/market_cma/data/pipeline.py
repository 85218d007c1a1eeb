"""High level orchestration helpers for loading the six Zillow datasets."""

import asyncio
from collections.abc import Mapping
from pathlib import Path

import structlog

from .files import DATASET_KEYS
from .ingest import DatasetBundleBuilder
from .models import DatasetFile, LoadedDatasetBundle

logger = structlog.get_logger(__name__)


async def load_bundle(
    paths: Mapping[str, str | Path],
    *,
    builder: DatasetBundleBuilder | None = None,
) -> LoadedDatasetBundle:
    """Parse all six files concurrently and assemble them once every parse succeeds.

    A failure in any single file aborts the whole load; no partial bundle is kept.
    """
    missing = [key for key in DATASET_KEYS if key not in paths]
    if missing:
        raise ValueError(f"Missing datasets: {', '.join(missing)}")
    builder = builder or DatasetBundleBuilder()
    pipe_log = logger.bind(operation="load_bundle")
    pipe_log.info("pipeline.bundle_start", files={key: str(paths[key]) for key in DATASET_KEYS})

    parsed = await asyncio.gather(
        *(asyncio.to_thread(builder.read_file, key, paths[key]) for key in DATASET_KEYS)
    )
    files: dict[str, DatasetFile] = dict(zip(DATASET_KEYS, parsed))
    bundle = builder.assemble(files)
    pipe_log.info("pipeline.bundle_complete", files=bundle.file_names())
    return bundle


def load_bundle_sync(paths: Mapping[str, str | Path]) -> LoadedDatasetBundle:
    """Blocking wrapper around :func:`load_bundle` for command line use."""
    return asyncio.run(load_bundle(paths))


__all__ = ["load_bundle", "load_bundle_sync"]
