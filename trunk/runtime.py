"""Runtime configuration assembled from the merged option layers."""

from __future__ import annotations

import ipaddress
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Self

from trunk.common import TrunkError
from trunk.options import (
    ConfigOptsBuild,
    ConfigOptsClean,
    ConfigOptsHook,
    ConfigOptsProxy,
    ConfigOptsServe,
    ConfigOptsTools,
    ConfigOptsWatch,
    IpAddress,
)

DIST_DIR = "dist"
"""Default directory where final build artifacts are placed."""
STAGE_DIR = ".stage"
"""Directory used to stage build artifacts during an active build."""


def _quoted(path: str | os.PathLike[str]) -> str:
    text = os.fspath(path).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{text}"'


def _canonical(path: Path) -> Path:
    try:
        return path.resolve(strict=True)
    except (OSError, RuntimeError):
        raise


@dataclass(frozen=True)
class Features:
    """Cargo feature selection: either all features, or an explicit custom set."""

    all_features: bool = False
    features: str | None = None
    no_default_features: bool = False


@dataclass
class RtcBuild:
    """Runtime config for the build system."""

    target: Path
    target_parent: Path
    release: bool
    public_url: str
    filehash: bool
    final_dist: Path
    staging_dist: Path
    cargo_features: Features
    tools: ConfigOptsTools
    hooks: list[ConfigOptsHook]
    inject_autoloader: bool
    pattern_script: str | None = None
    pattern_preload: str | None = None
    pattern_params: dict[str, str] | None = None

    @classmethod
    def from_opts(
        cls,
        opts: ConfigOptsBuild,
        tools: ConfigOptsTools,
        hooks: list[ConfigOptsHook],
        inject_autoloader: bool,
    ) -> Self:
        pre_target = opts.target if opts.target is not None else Path("index.html")
        try:
            target = _canonical(Path(pre_target))
        except (OSError, RuntimeError) as exc:
            raise TrunkError(
                f"error getting canonical path to source HTML file {_quoted(pre_target)}"
            ) from exc
        target_parent = target.parent

        final_dist = Path(opts.dist) if opts.dist is not None else target_parent / DIST_DIR
        if not final_dist.exists():
            try:
                final_dist.mkdir()
            except OSError as exc:
                raise TrunkError(
                    f"error creating final dist directory {_quoted(final_dist)}"
                ) from exc
        try:
            final_dist = _canonical(final_dist)
        except (OSError, RuntimeError) as exc:
            raise TrunkError("error taking canonical path to dist dir") from exc
        staging_dist = final_dist / STAGE_DIR

        if opts.all_features and (opts.no_default_features or opts.features is not None):
            raise TrunkError(
                "Cannot combine --all-features with --no-default-features and/or --features"
            )
        if opts.all_features:
            cargo_features = Features(all_features=True)
        else:
            cargo_features = Features(
                features=opts.features, no_default_features=opts.no_default_features
            )

        return cls(
            target=target,
            target_parent=target_parent,
            release=opts.release,
            public_url=opts.public_url if opts.public_url is not None else "/",
            filehash=opts.filehash if opts.filehash is not None else True,
            final_dist=final_dist,
            staging_dist=staging_dist,
            cargo_features=cargo_features,
            tools=tools,
            hooks=list(hooks),
            inject_autoloader=inject_autoloader,
            pattern_script=opts.pattern_script,
            pattern_preload=opts.pattern_preload,
            pattern_params=opts.pattern_params,
        )


def _canonical_all(paths: list[Path] | None, kind: str) -> list[Path]:
    result = []
    for path in paths or []:
        try:
            result.append(_canonical(Path(path)))
        except (OSError, RuntimeError) as exc:
            raise TrunkError(f"invalid {kind} path provided: {_quoted(path)}") from exc
    return result


@dataclass
class RtcWatch:
    """Runtime config for the watch system."""

    build: RtcBuild
    paths: list[Path] = field(default_factory=list)
    ignored_paths: list[Path] = field(default_factory=list)

    @classmethod
    def from_opts(
        cls,
        build_opts: ConfigOptsBuild,
        opts: ConfigOptsWatch,
        tools: ConfigOptsTools,
        hooks: list[ConfigOptsHook],
        inject_autoloader: bool,
    ) -> Self:
        build = RtcBuild.from_opts(build_opts, tools, hooks, inject_autoloader)
        paths = _canonical_all(opts.watch, "watch") or [build.target_parent]
        ignored_paths = _canonical_all(opts.ignore, "ignore")
        ignored_paths.append(build.final_dist)
        return cls(build=build, paths=paths, ignored_paths=ignored_paths)


@dataclass
class RtcServe:
    """Runtime config for the serve system."""

    watch: RtcWatch
    address: IpAddress
    port: int
    open: bool
    proxy_backend: str | None
    proxy_rewrite: str | None
    proxy_ws: bool
    proxy_insecure: bool
    proxies: list[ConfigOptsProxy] | None
    no_autoreload: bool

    @classmethod
    def from_opts(
        cls,
        build_opts: ConfigOptsBuild,
        watch_opts: ConfigOptsWatch,
        opts: ConfigOptsServe,
        tools: ConfigOptsTools,
        hooks: list[ConfigOptsHook],
        proxies: list[ConfigOptsProxy] | None,
    ) -> Self:
        watch = RtcWatch.from_opts(
            build_opts, watch_opts, tools, hooks, not opts.no_autoreload
        )
        address = (
            opts.address
            if opts.address is not None
            else ipaddress.IPv4Address("127.0.0.1")
        )
        return cls(
            watch=watch,
            address=address,
            port=opts.port if opts.port is not None else 8080,
            open=opts.open,
            proxy_backend=opts.proxy_backend,
            proxy_rewrite=opts.proxy_rewrite,
            proxy_ws=opts.proxy_ws,
            proxy_insecure=opts.proxy_insecure,
            proxies=proxies,
            no_autoreload=opts.no_autoreload,
        )


@dataclass
class RtcClean:
    """Runtime config for the clean command."""

    dist: Path
    cargo: bool

    @classmethod
    def from_opts(cls, opts: ConfigOptsClean) -> Self:
        dist = Path(opts.dist) if opts.dist is not None else Path(DIST_DIR)
        return cls(dist=dist, cargo=opts.cargo)