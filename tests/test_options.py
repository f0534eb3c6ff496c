import ipaddress
from pathlib import Path

import pytest

from trunk.options import (
    HOOK_STAGES,
    ConfigOptsBuild,
    ConfigOptsClean,
    ConfigOptsHook,
    ConfigOptsProxy,
    ConfigOptsServe,
    ConfigOptsTools,
    ConfigOptsWatch,
    parse_uri,
)


@pytest.mark.parametrize("uri", ["http://localhost:9090/api", "/api/v1", "ws://127.0.0.1:8000"])
def test_parse_uri_valid(uri):
    assert parse_uri(uri) == uri


@pytest.mark.parametrize("uri", ["", "http://a b", "http://localhost:99999", "http://"])
def test_parse_uri_invalid(uri):
    with pytest.raises(ValueError):
        parse_uri(uri)


def test_build_from_mapping_fields():
    opts = ConfigOptsBuild.from_mapping(
        {
            "target": "index.html",
            "release": True,
            "dist": "out",
            "public_url": "/app/",
            "filehash": False,
            "pattern_params": {"key": "value"},
            "unknown": 1,
        }
    )
    assert opts.target == Path("index.html")
    assert opts.release is True
    assert opts.dist == Path("out")
    assert opts.public_url == "/app/"
    assert opts.filehash is False
    assert opts.pattern_params == {"key": "value"}
    assert opts.features is None
    assert opts.all_features is False


def test_build_from_mapping_string_booleans():
    opts = ConfigOptsBuild.from_mapping({"release": "true", "filehash": "false"})
    assert opts.release is True
    assert opts.filehash is False


def test_build_from_mapping_bad_type():
    with pytest.raises(ValueError, match="release"):
        ConfigOptsBuild.from_mapping({"release": "yes"})
    with pytest.raises(ValueError, match="pattern_params"):
        ConfigOptsBuild.from_mapping({"pattern_params": {"k": 1}})


def test_build_merged_prefers_greater_and_fills_gaps():
    lesser = ConfigOptsBuild(
        target=Path("l.html"), dist=Path("ldist"), public_url="/l/", filehash=False,
        features="lf", pattern_script="ls",
    )
    greater = ConfigOptsBuild(target=Path("g.html"))
    merged = greater.merged(lesser)
    assert merged.target == Path("g.html")
    assert merged.dist == Path("ldist")
    assert merged.public_url == "/l/"
    assert merged.filehash is False
    assert merged.pattern_script == "ls"
    assert merged.features is None


def test_build_merged_release_is_sticky():
    assert ConfigOptsBuild(release=False).merged(ConfigOptsBuild(release=True)).release is True
    assert ConfigOptsBuild(release=True).merged(ConfigOptsBuild(release=False)).release is True


def test_build_merged_keeps_empty_string():
    merged = ConfigOptsBuild(public_url="").merged(ConfigOptsBuild(public_url="/x/"))
    assert merged.public_url == ""


def test_watch_from_mapping_and_merge():
    listed = ConfigOptsWatch.from_mapping({"watch": ["src", "assets"]})
    assert listed.watch == [Path("src"), Path("assets")]
    joined = ConfigOptsWatch.from_mapping({"watch": "src,assets", "ignore": "dist"})
    assert joined.watch == listed.watch
    assert joined.ignore == [Path("dist")]
    merged = ConfigOptsWatch(ignore=[Path("x")]).merged(joined)
    assert merged.watch == listed.watch
    assert merged.ignore == [Path("x")]


def test_serve_from_mapping():
    opts = ConfigOptsServe.from_mapping(
        {"address": "127.0.0.1", "port": 8080, "proxy_backend": "http://localhost:9000/api"}
    )
    assert opts.address == ipaddress.ip_address("127.0.0.1")
    assert opts.port == 8080
    assert opts.proxy_backend == "http://localhost:9000/api"
    assert opts.open is False


def test_serve_from_mapping_errors():
    with pytest.raises(ValueError):
        ConfigOptsServe.from_mapping({"port": 70000})
    with pytest.raises(ValueError):
        ConfigOptsServe.from_mapping({"address": "not-an-ip"})
    with pytest.raises(ValueError):
        ConfigOptsServe.from_mapping({"proxy_backend": "http://bad host"})


def test_serve_port_from_string():
    assert ConfigOptsServe.from_mapping({"port": "8080"}).port == 8080


def test_serve_merged_rules():
    lesser = ConfigOptsServe(
        port=8080, proxy_rewrite="/api", proxy_ws=True, open=True,
        no_autoreload=True, proxy_insecure=True,
    )
    greater = ConfigOptsServe(port=9000)
    merged = greater.merged(lesser)
    assert merged.port == 9000
    assert merged.proxy_rewrite == "/api"
    assert merged.proxy_ws is True
    assert merged.open is True
    assert merged.no_autoreload is True
    assert merged.proxy_insecure is False


def test_clean_merge_cargo_sticky():
    lesser = ConfigOptsClean.from_mapping({"dist": "out", "cargo": True})
    merged = ConfigOptsClean().merged(lesser)
    assert merged.dist == Path("out")
    assert merged.cargo is True


def test_tools_merge():
    lesser = ConfigOptsTools.from_mapping({"sass": "1.0", "wasm_opt": "v1"})
    greater = ConfigOptsTools(sass="2.0")
    merged = greater.merged(lesser)
    assert merged.sass == "2.0"
    assert merged.wasm_opt == "v1"
    assert merged.wasm_bindgen is None


def test_proxy_from_mapping():
    proxy = ConfigOptsProxy.from_mapping({"backend": "http://localhost:9000/api"})
    assert proxy.backend == "http://localhost:9000/api"
    assert proxy.rewrite is None
    assert proxy.ws is False and proxy.insecure is False


def test_proxy_missing_backend():
    with pytest.raises(ValueError, match="backend"):
        ConfigOptsProxy.from_mapping({"ws": True})


def test_hook_from_mapping():
    hook = ConfigOptsHook.from_mapping({"stage": "pre_build", "command": "echo"})
    assert hook.stage in HOOK_STAGES
    assert hook.command == "echo"
    assert hook.command_arguments == []
    full = ConfigOptsHook.from_mapping(
        {"stage": "post_build", "command": "sh", "command_arguments": ["-c", "true"]}
    )
    assert full.command_arguments == ["-c", "true"]


def test_hook_errors():
    with pytest.raises(ValueError, match="unknown variant"):
        ConfigOptsHook.from_mapping({"stage": "later", "command": "echo"})
    with pytest.raises(ValueError, match="command"):
        ConfigOptsHook.from_mapping({"stage": "build"})
    with pytest.raises(ValueError, match="command_arguments"):
        ConfigOptsHook.from_mapping({"stage": "build", "command": "x", "command_arguments": "a"})