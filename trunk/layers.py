"""Layered configuration: config file, then environment, then command line."""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Self

from trunk.common import TrunkError
from trunk.options import (
    ConfigOptsBuild,
    ConfigOptsClean,
    ConfigOptsHook,
    ConfigOptsProxy,
    ConfigOptsServe,
    ConfigOptsTools,
    ConfigOptsWatch,
)
from trunk.runtime import RtcBuild, RtcClean, RtcServe, RtcWatch

_ENV_PREFIXES = {
    "build": "TRUNK_BUILD_",
    "watch": "TRUNK_WATCH_",
    "serve": "TRUNK_SERVE_",
    "clean": "TRUNK_CLEAN_",
    "tools": "TRUNK_TOOLS_",
}


def _quoted(path: str | os.PathLike[str]) -> str:
    text = os.fspath(path).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{text}"'


def _section(data: Mapping[str, Any], key: str) -> Mapping[str, Any] | None:
    value = data.get(key)
    if value is None or isinstance(value, Mapping):
        return value
    raise ValueError(f"invalid type for `{key}`: expected a table")


def _table_list(data: Mapping[str, Any], key: str) -> list[Mapping[str, Any]] | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(v, Mapping) for v in value):
        raise ValueError(f"invalid type for `{key}`: expected an array of tables")
    return value


def _pick(lesser, greater):
    if lesser is None:
        return greater
    if greater is None:
        return lesser
    return greater.merged(lesser)


@dataclass
class ConfigOpts:
    """All configuration options from every layer."""

    build: ConfigOptsBuild | None = None
    watch: ConfigOptsWatch | None = None
    serve: ConfigOptsServe | None = None
    clean: ConfigOptsClean | None = None
    tools: ConfigOptsTools | None = None
    proxy: list[ConfigOptsProxy] | None = None
    hooks: list[ConfigOptsHook] | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Self:
        """Build the options from a parsed config document."""

        def opt(kind, key):
            section = _section(data, key)
            return None if section is None else kind.from_mapping(section)

        def many(kind, key):
            tables = _table_list(data, key)
            return None if tables is None else [kind.from_mapping(t) for t in tables]

        return cls(
            build=opt(ConfigOptsBuild, "build"),
            watch=opt(ConfigOptsWatch, "watch"),
            serve=opt(ConfigOptsServe, "serve"),
            clean=opt(ConfigOptsClean, "clean"),
            tools=opt(ConfigOptsTools, "tools"),
            proxy=many(ConfigOptsProxy, "proxy"),
            hooks=many(ConfigOptsHook, "hooks"),
        )

    @classmethod
    def from_file(cls, path: str | os.PathLike[str] | None = None) -> Self:
        """Read a config file; relative paths in it are taken relative to the file."""
        toml_path = Path(path) if path is not None else Path("Trunk.toml")
        if not toml_path.exists():
            return cls()
        if not toml_path.is_absolute():
            try:
                toml_path = toml_path.resolve(strict=True)
            except (OSError, RuntimeError) as exc:
                raise TrunkError(
                    f"error getting canonical path to Trunk config file {_quoted(toml_path)}"
                ) from exc
        try:
            raw = toml_path.read_bytes()
        except OSError as exc:
            raise TrunkError("error reading config file") from exc
        try:
            cfg = cls.from_mapping(tomllib.loads(raw.decode("utf-8")))
        except (UnicodeDecodeError, ValueError) as exc:
            raise TrunkError("error reading config file contents as TOML data") from exc

        parent = toml_path.parent

        def canonical(value: Path, what: str) -> Path:
            if value.is_absolute():
                return value
            try:
                return (parent / value).resolve(strict=True)
            except (OSError, RuntimeError) as exc:
                raise TrunkError(
                    f"error taking canonical path to {what} {_quoted(value)} "
                    f"in {_quoted(toml_path)}"
                ) from exc

        def joined(value: Path | None) -> Path | None:
            if value is None or value.is_absolute():
                return value
            return parent / value

        if cfg.build is not None:
            target = cfg.build.target
            if target is not None:
                target = canonical(target, "[build].target")
            cfg.build = replace(cfg.build, target=target, dist=joined(cfg.build.dist))
        if cfg.watch is not None:
            watch_paths = cfg.watch.watch
            if watch_paths is not None:
                watch_paths = [canonical(p, "[watch].watch") for p in watch_paths]
            ignore_paths = cfg.watch.ignore
            if ignore_paths is not None:
                ignore_paths = [canonical(p, "[watch].ignore") for p in ignore_paths]
            cfg.watch = replace(cfg.watch, watch=watch_paths, ignore=ignore_paths)
        if cfg.clean is not None:
            cfg.clean = replace(cfg.clean, dist=joined(cfg.clean.dist))
        return cfg

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Self:
        """Read options from ``TRUNK_<SECTION>_<KEY>`` environment variables."""
        environ = os.environ if environ is None else environ
        sections = {
            name: {
                key[len(prefix):].lower(): value
                for key, value in environ.items()
                if key.startswith(prefix)
            }
            for name, prefix in _ENV_PREFIXES.items()
        }
        try:
            return cls(
                build=ConfigOptsBuild.from_mapping(sections["build"]),
                watch=ConfigOptsWatch.from_mapping(sections["watch"]),
                serve=ConfigOptsServe.from_mapping(sections["serve"]),
                clean=ConfigOptsClean.from_mapping(sections["clean"]),
                tools=ConfigOptsTools.from_mapping(sections["tools"]),
            )
        except ValueError as exc:
            raise TrunkError(str(exc)) from exc

    @classmethod
    def merge(cls, lesser: ConfigOpts, greater: ConfigOpts) -> Self:
        """Merge two layers; values of ``greater`` take precedence."""
        return cls(
            build=_pick(lesser.build, greater.build),
            watch=_pick(lesser.watch, greater.watch),
            serve=_pick(lesser.serve, greater.serve),
            clean=_pick(lesser.clean, greater.clean),
            tools=_pick(lesser.tools, greater.tools),
            proxy=greater.proxy if greater.proxy is not None else lesser.proxy,
            hooks=greater.hooks if greater.hooks is not None else lesser.hooks,
        )


def _file_and_env_layers(config: str | os.PathLike[str] | None) -> ConfigOpts:
    toml_cfg = ConfigOpts.from_file(config)
    try:
        env_cfg = ConfigOpts.from_env()
    except TrunkError as exc:
        raise TrunkError("error reading trunk env var config") from exc
    return ConfigOpts.merge(toml_cfg, env_cfg)


def rtc_build(
    cli_build: ConfigOptsBuild | None = None,
    config: str | os.PathLike[str] | None = None,
) -> RtcBuild:
    """Runtime config for the build system from all config layers."""
    layer = ConfigOpts.merge(
        _file_and_env_layers(config), ConfigOpts(build=cli_build or ConfigOptsBuild())
    )
    return RtcBuild.from_opts(
        layer.build or ConfigOptsBuild(),
        layer.tools or ConfigOptsTools(),
        layer.hooks or [],
        False,
    )


def rtc_watch(
    cli_build: ConfigOptsBuild | None = None,
    cli_watch: ConfigOptsWatch | None = None,
    config: str | os.PathLike[str] | None = None,
) -> RtcWatch:
    """Runtime config for the watch system from all config layers."""
    layer = ConfigOpts.merge(
        _file_and_env_layers(config), ConfigOpts(build=cli_build or ConfigOptsBuild())
    )
    layer = ConfigOpts.merge(layer, ConfigOpts(watch=cli_watch or ConfigOptsWatch()))
    return RtcWatch.from_opts(
        layer.build or ConfigOptsBuild(),
        layer.watch or ConfigOptsWatch(),
        layer.tools or ConfigOptsTools(),
        layer.hooks or [],
        False,
    )


def rtc_serve(
    cli_build: ConfigOptsBuild | None = None,
    cli_watch: ConfigOptsWatch | None = None,
    cli_serve: ConfigOptsServe | None = None,
    config: str | os.PathLike[str] | None = None,
) -> RtcServe:
    """Runtime config for the serve system from all config layers."""
    layer = ConfigOpts.merge(
        _file_and_env_layers(config), ConfigOpts(build=cli_build or ConfigOptsBuild())
    )
    layer = ConfigOpts.merge(layer, ConfigOpts(watch=cli_watch or ConfigOptsWatch()))
    layer = ConfigOpts.merge(layer, ConfigOpts(serve=cli_serve or ConfigOptsServe()))
    return RtcServe.from_opts(
        layer.build or ConfigOptsBuild(),
        layer.watch or ConfigOptsWatch(),
        layer.serve or ConfigOptsServe(),
        layer.tools or ConfigOptsTools(),
        layer.hooks or [],
        layer.proxy,
    )


def rtc_clean(
    cli_clean: ConfigOptsClean | None = None,
    config: str | os.PathLike[str] | None = None,
) -> RtcClean:
    """Runtime config for the clean command from all config layers."""
    layer = ConfigOpts.merge(
        _file_and_env_layers(config), ConfigOpts(clean=cli_clean or ConfigOptsClean())
    )
    return RtcClean.from_opts(layer.clean or ConfigOptsClean())


def full(config: str | os.PathLike[str] | None = None) -> ConfigOpts:
    """The full configuration from the config file and environment variables."""
    return _file_and_env_layers(config)