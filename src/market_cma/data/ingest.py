"""Read uploaded Zillow CSV files and stitch them into a dataset bundle."""

from collections.abc import Mapping
from pathlib import Path

import structlog
from attrs import define

from . import parser
from .files import DATASET_KEYS, dataset_spec
from .models import DatasetFile, LoadedDatasetBundle
from .regions import find_common_regions

logger = structlog.get_logger(__name__)


class NoCommonRegionsError(ValueError):
    """Raised when the six datasets share no selectable region."""

    def __init__(self, file_names: Mapping[str, str]) -> None:
        super().__init__(
            "No common cities were found across the uploaded files. "
            "Please ensure they cover the same geographic areas."
        )
        self.file_names = dict(file_names)


@define(slots=True)
class DatasetBundleBuilder:
    """Coordinate reading and parsing of the six Zillow CSV uploads."""

    encoding: str = "utf-8-sig"

    def read_file(self, key: str, path: str | Path) -> DatasetFile:
        """Parse one uploaded CSV file into a :class:`DatasetFile`."""
        spec = dataset_spec(key)
        source = Path(path)
        log = logger.bind(dataset=key, filename=source.name)
        log.debug("builder.file_read_start", title=spec.title)
        try:
            payload = source.read_bytes()
        except OSError as exc:
            log.error("builder.file_read_failed", exc_info=True)
            raise parser.DatasetParseError(source.name, exc.strerror or str(exc)) from exc
        records = parser.parse_csv_bytes(payload, source.name)
        log.debug("builder.file_parsed", records=len(records))
        return DatasetFile(file_name=source.name, records=records)

    def assemble(self, files: Mapping[str, DatasetFile]) -> LoadedDatasetBundle:
        """Combine six parsed files into a bundle and reject it when no region is shared."""
        bundle = LoadedDatasetBundle.from_mapping(files)
        regions = find_common_regions(bundle.datasets())
        if not regions:
            logger.warning("builder.no_common_regions", files=bundle.file_names())
            raise NoCommonRegionsError(bundle.file_names())
        logger.info(
            "builder.bundle_ready",
            regions=len(regions),
            records={key: len(bundle.file(key).records) for key in DATASET_KEYS},
        )
        return bundle


__all__ = ["DatasetBundleBuilder", "NoCommonRegionsError"]
