"""Build system: stages a build and applies it to the final dist directory."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from typing import Any

from trunk.common import BUILDING, ERROR, SUCCESS, TrunkError, remove_dir_all
from trunk.runtime import STAGE_DIR, RtcBuild

log = logging.getLogger(__name__)


class BuildSystem:
    """Drives a build: prepares the staging dir, runs the pipeline, applies the result.

    ``pipeline`` is called with no arguments and is expected to write its output
    into ``cfg.staging_dist``.
    """

    def __init__(self, cfg: RtcBuild, pipeline: Callable[[], Any]) -> None:
        self.cfg = cfg
        self.pipeline = pipeline

    def build(self) -> None:
        """Run a full build, logging its outcome."""
        log.info("%s starting build", BUILDING)
        try:
            self._do_build()
        except Exception as exc:
            log.error("%s error\n%s", ERROR, exc)
            raise
        log.info("%s success", SUCCESS)

    def _do_build(self) -> None:
        try:
            os.makedirs(self.cfg.final_dist, exist_ok=True)
        except OSError as exc:
            raise TrunkError("error creating build environment directory: dist") from exc
        try:
            self._prepare_staging_dist()
        except TrunkError as exc:
            raise TrunkError("error preparing build environment") from exc
        try:
            self.pipeline()
        except Exception as exc:
            raise TrunkError("error from HTML pipeline") from exc
        try:
            self._finalize_dist()
        except (TrunkError, OSError) as exc:
            raise TrunkError("error applying built distribution") from exc

    def _prepare_staging_dist(self) -> None:
        staging = self.cfg.staging_dist
        try:
            remove_dir_all(staging)
        except TrunkError as exc:
            raise TrunkError("error cleaning staging dist dir") from exc
        try:
            os.makedirs(staging, exist_ok=True)
        except OSError as exc:
            raise TrunkError(
                "error creating build environment directory: staging dist dir"
            ) from exc

    def _finalize_dist(self) -> None:
        log.info("applying new distribution")
        self._clean_final()
        self._move_stage_to_final()
        try:
            os.rmdir(self.cfg.staging_dist)
        except OSError as exc:
            raise TrunkError("error deleting staging dist dir") from exc

    def _move_stage_to_final(self) -> None:
        try:
            entries = list(os.scandir(self.cfg.staging_dist))
        except OSError as exc:
            raise TrunkError("error reading staging dist dir") from exc
        for entry in entries:
            target = self.cfg.final_dist / entry.name
            try:
                os.replace(entry.path, target)
            except OSError as exc:
                raise TrunkError(f"error moving {entry.path!r} to {str(target)!r}") from exc

    def _clean_final(self) -> None:
        try:
            entries = list(os.scandir(self.cfg.final_dist))
        except OSError as exc:
            raise TrunkError("error reading final dist dir") from exc
        for entry in entries:
            if entry.name == STAGE_DIR:
                continue
            try:
                if entry.is_dir(follow_symlinks=False):
                    remove_dir_all(entry.path)
                elif entry.is_symlink() or entry.is_file(follow_symlinks=False):
                    os.remove(entry.path)
            except (TrunkError, OSError) as exc:
                raise TrunkError("error cleaning final dist") from exc