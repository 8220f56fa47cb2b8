from __future__ import annotations

import logging
from typing import Any, Dict

from ..config import DatasetSpec, LabConfig, lab_config_from_state
from ..lib.fetch import DownloadError, download, extract_zip
from ..lib.files import count_lines
from ..state_store import add_warning

logger = logging.getLogger(__name__)


class DatasetsStep:
    """Fetch the lab datasets.

    Datasets are required by every lab notebook, so a required dataset that
    cannot be fetched aborts the run.
    """

    step_id = "50_datasets"
    title = "Downloading Datasets"

    def _fetch(self, cfg: LabConfig, ds: DatasetSpec) -> None:
        target = cfg.datasets_dir / ds.download_name
        download(ds.url, target, dry_run=cfg.dry_run)

        if ds.archive == "zip":
            try:
                extract_zip(target, cfg.datasets_dir, dry_run=cfg.dry_run)
            finally:
                # A corrupt archive must not linger where the next run would trust it.
                if not cfg.dry_run:
                    target.unlink(missing_ok=True)
        elif ds.archive:
            raise RuntimeError(f"Unsupported archive type {ds.archive!r} for dataset {ds.name}")

        if not cfg.dry_run:
            for name in ds.cleanup:
                (cfg.datasets_dir / name).unlink(missing_ok=True)

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = lab_config_from_state(state)
        counts: Dict[str, int] = {}

        for ds in cfg.datasets:
            path = cfg.datasets_dir / ds.filename
            if path.is_file() and path.stat().st_size > 0:
                logger.info("%s dataset already present at %s; skipping download", ds.name, path)
            else:
                logger.info("Downloading %s dataset...", ds.name)
                try:
                    self._fetch(cfg, ds)
                except DownloadError as e:
                    logger.error("%s", e)

            if cfg.dry_run:
                continue

            if not path.is_file():
                msg = f"{ds.name} dataset download failed ({ds.filename} missing). Check your internet connection."
                if ds.required:
                    raise RuntimeError(msg)
                logger.warning("%s", msg)
                add_warning(state, self.step_id, "dataset_missing", dataset=ds.name)
                continue

            counts[ds.filename] = count_lines(path)
            logger.info("%s dataset ready: %d %s", ds.name, counts[ds.filename], ds.unit)

        state.setdefault("execution", {}).setdefault("artifacts", {})["datasets"] = counts
        return state
