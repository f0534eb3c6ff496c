"""Option models for each configuration layer (config file, environment, CLI)."""

from __future__ import annotations

import ipaddress
import string
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Self, TypeVar
from urllib.parse import urlsplit

HOOK_STAGES = ("pre_build", "build", "post_build")

_T = TypeVar("_T")
_URI_ALLOWED = set(string.ascii_letters + string.digits + "-._~:/?#[]@!$&'()*+,;=%")

IpAddress = ipaddress.IPv4Address | ipaddress.IPv6Address


def parse_uri(value: str) -> str:
    """Validate a URI string and return it unchanged."""
    if not isinstance(value, str):
        raise ValueError("invalid uri: expected a string")
    if not value:
        raise ValueError("empty string")
    bad = sorted({ch for ch in value if ch not in _URI_ALLOWED})
    if bad:
        raise ValueError(f"invalid uri character: {bad[0]!r}")
    try:
        parts = urlsplit(value)
        parts.port  # noqa: B018 - validates the port
    except ValueError as exc:
        raise ValueError(f"invalid uri: {exc}") from exc
    if "://" in value and not parts.netloc:
        raise ValueError("invalid uri: missing authority")
    return value


def _first(greater: _T | None, lesser: _T | None) -> _T | None:
    return greater if greater is not None else lesser


def _opt_str(data: Mapping[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is None or isinstance(value, str):
        return value
    raise ValueError(f"invalid type for `{key}`: expected a string")


def _opt_bool(data: Mapping[str, Any], key: str) -> bool | None:
    value = data.get(key)
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, str) and value in ("true", "false"):
        return value == "true"
    raise ValueError(f"invalid type for `{key}`: expected a boolean")


def _bool(data: Mapping[str, Any], key: str) -> bool:
    value = _opt_bool(data, key)
    return False if value is None else value


def _opt_path(data: Mapping[str, Any], key: str) -> Path | None:
    value = _opt_str(data, key)
    return None if value is None else Path(value)


def _opt_paths(data: Mapping[str, Any], key: str) -> list[Path] | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, str):
        value = [item for item in value.split(",") if item]
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValueError(f"invalid type for `{key}`: expected a list of paths")
    return [Path(item) for item in value]


def _opt_str_map(data: Mapping[str, Any], key: str) -> dict[str, str] | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, Mapping) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in value.items()
    ):
        raise ValueError(f"invalid type for `{key}`: expected a table of strings")
    return dict(value)


def _opt_address(data: Mapping[str, Any], key: str) -> IpAddress | None:
    value = data.get(key)
    if value is None or isinstance(value, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
        return value
    if not isinstance(value, str):
        raise ValueError(f"invalid type for `{key}`: expected an IP address")
    try:
        return ipaddress.ip_address(value)
    except ValueError as exc:
        raise ValueError(f"invalid IP address for `{key}`: {value!r}") from exc


def _opt_port(data: Mapping[str, Any], key: str) -> int | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, str) and value.isdigit():
        value = int(value)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"invalid type for `{key}`: expected a port number")
    if not 0 <= value <= 65535:
        raise ValueError(f"invalid value for `{key}`: {value} is out of range")
    return value


def _opt_uri(data: Mapping[str, Any], key: str) -> str | None:
    value = _opt_str(data, key)
    return None if value is None else parse_uri(value)


@dataclass
class ConfigOptsBuild:
    """Options for the build system."""

    target: Path | None = None
    release: bool = False
    dist: Path | None = None
    public_url: str | None = None
    no_default_features: bool = False
    all_features: bool = False
    features: str | None = None
    filehash: bool | None = None
    pattern_script: str | None = None
    pattern_preload: str | None = None
    pattern_params: dict[str, str] | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Self:
        return cls(
            target=_opt_path(data, "target"),
            release=_bool(data, "release"),
            dist=_opt_path(data, "dist"),
            public_url=_opt_str(data, "public_url"),
            no_default_features=_bool(data, "no_default_features"),
            all_features=_bool(data, "all_features"),
            features=_opt_str(data, "features"),
            filehash=_opt_bool(data, "filehash"),
            pattern_script=_opt_str(data, "pattern_script"),
            pattern_preload=_opt_str(data, "pattern_preload"),
            pattern_params=_opt_str_map(data, "pattern_params"),
        )

    def merged(self, lesser: ConfigOptsBuild) -> ConfigOptsBuild:
        """Return these options with unset values filled from ``lesser``."""
        return replace(
            self,
            target=_first(self.target, lesser.target),
            dist=_first(self.dist, lesser.dist),
            public_url=_first(self.public_url, lesser.public_url),
            filehash=_first(self.filehash, lesser.filehash),
            release=self.release or lesser.release,
            pattern_preload=_first(self.pattern_preload, lesser.pattern_preload),
            pattern_script=_first(self.pattern_script, lesser.pattern_script),
            pattern_params=_first(self.pattern_params, lesser.pattern_params),
        )


@dataclass
class ConfigOptsWatch:
    """Options for the watch system."""

    watch: list[Path] | None = None
    ignore: list[Path] | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Self:
        return cls(watch=_opt_paths(data, "watch"), ignore=_opt_paths(data, "ignore"))

    def merged(self, lesser: ConfigOptsWatch) -> ConfigOptsWatch:
        """Return these options with unset values filled from ``lesser``."""
        return replace(
            self,
            watch=_first(self.watch, lesser.watch),
            ignore=_first(self.ignore, lesser.ignore),
        )


@dataclass
class ConfigOptsServe:
    """Options for the serve system."""

    address: IpAddress | None = None
    port: int | None = None
    open: bool = False
    proxy_backend: str | None = None
    proxy_rewrite: str | None = None
    proxy_ws: bool = False
    proxy_insecure: bool = False
    no_autoreload: bool = False

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Self:
        return cls(
            address=_opt_address(data, "address"),
            port=_opt_port(data, "port"),
            open=_bool(data, "open"),
            proxy_backend=_opt_uri(data, "proxy_backend"),
            proxy_rewrite=_opt_str(data, "proxy_rewrite"),
            proxy_ws=_bool(data, "proxy_ws"),
            proxy_insecure=_bool(data, "proxy_insecure"),
            no_autoreload=_bool(data, "no_autoreload"),
        )

    def merged(self, lesser: ConfigOptsServe) -> ConfigOptsServe:
        """Return these options with unset values filled from ``lesser``."""
        return replace(
            self,
            proxy_backend=_first(self.proxy_backend, lesser.proxy_backend),
            proxy_rewrite=_first(self.proxy_rewrite, lesser.proxy_rewrite),
            address=_first(self.address, lesser.address),
            port=_first(self.port, lesser.port),
            proxy_ws=self.proxy_ws or lesser.proxy_ws,
            no_autoreload=self.no_autoreload or lesser.no_autoreload,
            open=self.open or lesser.open,
        )


@dataclass
class ConfigOptsClean:
    """Options for the clean command."""

    dist: Path | None = None
    cargo: bool = False

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Self:
        return cls(dist=_opt_path(data, "dist"), cargo=_bool(data, "cargo"))

    def merged(self, lesser: ConfigOptsClean) -> ConfigOptsClean:
        """Return these options with unset values filled from ``lesser``."""
        return replace(
            self,
            dist=_first(self.dist, lesser.dist),
            cargo=self.cargo or lesser.cargo,
        )


@dataclass
class ConfigOptsTools:
    """Versions of the tools that are downloaded on demand."""

    sass: str | None = None
    wasm_bindgen: str | None = None
    wasm_opt: str | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Self:
        return cls(
            sass=_opt_str(data, "sass"),
            wasm_bindgen=_opt_str(data, "wasm_bindgen"),
            wasm_opt=_opt_str(data, "wasm_opt"),
        )

    def merged(self, lesser: ConfigOptsTools) -> ConfigOptsTools:
        """Return these options with unset values filled from ``lesser``."""
        return replace(
            self,
            sass=_first(self.sass, lesser.sass),
            wasm_bindgen=_first(self.wasm_bindgen, lesser.wasm_bindgen),
            wasm_opt=_first(self.wasm_opt, lesser.wasm_opt),
        )


@dataclass
class ConfigOptsProxy:
    """A proxy definition; only read from the config file."""

    backend: str
    rewrite: str | None = None
    ws: bool = False
    insecure: bool = False

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Self:
        backend = _opt_str(data, "backend")
        if backend is None:
            raise ValueError("missing field `backend`")
        return cls(
            backend=parse_uri(backend),
            rewrite=_opt_str(data, "rewrite"),
            ws=_bool(data, "ws"),
            insecure=_bool(data, "insecure"),
        )


@dataclass
class ConfigOptsHook:
    """A command to run at a given stage of the build."""

    stage: str
    command: str
    command_arguments: list[str] = field(default_factory=list)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Self:
        stage = _opt_str(data, "stage")
        if stage is None:
            raise ValueError("missing field `stage`")
        if stage not in HOOK_STAGES:
            raise ValueError(
                f"unknown variant `{stage}`, expected one of {', '.join(HOOK_STAGES)}"
            )
        command = _opt_str(data, "command")
        if command is None:
            raise ValueError("missing field `command`")
        arguments = data.get("command_arguments", [])
        if not isinstance(arguments, list) or not all(isinstance(a, str) for a in arguments):
            raise ValueError("invalid type for `command_arguments`: expected a list of strings")
        return cls(stage=stage, command=command, command_arguments=list(arguments))