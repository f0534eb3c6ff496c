"""Access to the metadata of the cargo project being built."""

from __future__ import annotations

import json
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Self

from trunk.common import TrunkError


def _root_package(metadata: dict[str, Any]) -> dict[str, Any] | None:
    packages = metadata.get("packages") or []
    resolve = metadata.get("resolve") or {}
    root_id = resolve.get("root")
    if root_id is not None:
        return next((pkg for pkg in packages if pkg.get("id") == root_id), None)
    workspace_root = metadata.get("workspace_root")
    if workspace_root is None:
        return None
    root_manifest = Path(workspace_root) / "Cargo.toml"
    return next(
        (
            pkg
            for pkg in packages
            if pkg.get("manifest_path") is not None
            and Path(pkg["manifest_path"]) == root_manifest
        ),
        None,
    )


@dataclass
class CargoMetadata:
    """The cargo project's metadata together with its root package."""

    metadata: dict[str, Any]
    package: dict[str, Any]
    manifest_path: str

    @classmethod
    def load(cls, manifest: str | os.PathLike[str]) -> Self:
        """Run ``cargo metadata`` for the given ``Cargo.toml`` and parse the result."""
        cargo = os.environ.get("CARGO", "cargo")
        argv = [
            cargo,
            "metadata",
            "--format-version",
            "1",
            "--manifest-path",
            os.fspath(manifest),
        ]
        try:
            completed = subprocess.run(argv, capture_output=True, check=False)
        except OSError as exc:
            raise TrunkError("error getting cargo metadata") from exc
        if completed.returncode != 0:
            stderr = completed.stderr
            if isinstance(stderr, bytes):
                stderr = stderr.decode("utf-8", errors="replace")
            raise TrunkError(f"error getting cargo metadata: {(stderr or '').strip()}")
        try:
            metadata = json.loads(completed.stdout)
        except ValueError as exc:
            raise TrunkError("error getting cargo metadata") from exc
        if not isinstance(metadata, dict):
            raise TrunkError("error getting cargo metadata")

        package = _root_package(metadata)
        if package is None:
            raise TrunkError("could not find root package of the target crate")
        return cls(
            metadata=metadata,
            package=package,
            manifest_path=str(package.get("manifest_path", "")),
        )