"""Running the user's build hooks."""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Iterable, Mapping
from concurrent.futures import Future, ThreadPoolExecutor, as_completed

from trunk.common import TrunkError
from trunk.options import ConfigOptsHook
from trunk.runtime import RtcBuild

log = logging.getLogger(__name__)


def _hook_env(cfg: RtcBuild) -> dict[str, str]:
    return {
        **os.environ,
        "TRUNK_PROFILE": "release" if cfg.release else "debug",
        "TRUNK_HTML_FILE": os.fspath(cfg.target),
        "TRUNK_SOURCE_DIR": os.fspath(cfg.target_parent),
        "TRUNK_STAGING_DIR": os.fspath(cfg.staging_dist),
        "TRUNK_DIST_DIR": os.fspath(cfg.final_dist),
        "TRUNK_PUBLIC_URL": cfg.public_url,
    }


def _run_hook(hook: ConfigOptsHook, env: Mapping[str, str]) -> None:
    try:
        process = subprocess.Popen([hook.command, *hook.command_arguments], env=env)
    except OSError as exc:
        raise TrunkError(f"error spawning hook call for {hook.command}") from exc
    try:
        returncode = process.wait()
    except OSError as exc:
        raise TrunkError(f"error calling hook to {hook.command}") from exc
    if returncode != 0:
        raise TrunkError(f"hook call to {hook.command} returned a bad status")
    log.info("finished hook %s", hook.command)


def spawn_hooks(cfg: RtcBuild, stage: str) -> list[Future[None]]:
    """Start every hook configured for ``stage``; return a handle for each."""
    selected = [hook for hook in cfg.hooks if hook.stage == stage]
    if not selected:
        return []
    env = _hook_env(cfg)
    executor = ThreadPoolExecutor(max_workers=len(selected), thread_name_prefix="hook")
    try:
        handles = []
        for hook in selected:
            log.info("spawning hook %s (stage %s, arguments %r)", hook.command, stage,
                     hook.command_arguments)
            handles.append(executor.submit(_run_hook, hook, env))
        return handles
    finally:
        executor.shutdown(wait=False)


def wait_hooks(handles: Iterable[Future[None]]) -> None:
    """Wait for the given hooks, raising the first failure that completes."""
    for handle in as_completed(list(handles)):
        handle.result()