# trunk

Tooling for bundling a WASM web application: layered configuration
(`Trunk.toml`, environment variables, command-line options), runtime
configuration for build, watch and serve, build hooks, a build system that
stages output in `dist/.stage` and swaps it into `dist`, and a `trunk`
command with `clean` and `config show`.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Command line

```
trunk clean                  # remove the dist directory
trunk clean -d out           # remove another dist directory (--dist)
trunk clean --cargo          # also run `cargo clean`
trunk config show            # print the configuration from file and environment
trunk --config my.toml config show
trunk -v clean               # verbose (debug) logging
```

`--config` names the config file; it defaults to the `TRUNK_CONFIG`
environment variable, then to `Trunk.toml` in the current directory. On an
error the command prints `Error: ...` followed by its causes and exits
with status 1.

## Configuration

Configuration comes from three layers. Each later layer takes precedence
over the ones before it:

1. A `Trunk.toml` file. Relative paths in it are resolved against the
   directory that holds the file. `[build].target`, `[watch].watch` and
   `[watch].ignore` must exist; `[build].dist` and `[clean].dist` need not.
2. Environment variables with the prefixes `TRUNK_BUILD_`, `TRUNK_WATCH_`,
   `TRUNK_SERVE_`, `TRUNK_CLEAN_` and `TRUNK_TOOLS_`, for example
   `TRUNK_BUILD_RELEASE=true` or `TRUNK_BUILD_PUBLIC_URL=/app/`. List
   values such as `TRUNK_WATCH_IGNORE` are comma separated.
3. Command-line (or programmatic) options.

Flags such as `release`, `open`, `no_autoreload` and `cargo` cannot be
switched off by a later layer once an earlier one sets them. `proxy` and
`hooks` lists are taken whole from the highest layer that has them.

Example `Trunk.toml`:

```toml
[build]
target = "index.html"
dist = "dist"
public_url = "/"

[watch]
ignore = ["assets"]

[serve]
port = 8080

[clean]
cargo = false

[[proxy]]
backend = "http://localhost:9000/api/"

[[hooks]]
stage = "pre_build"
command = "echo"
command_arguments = ["starting"]
```

Hook stages are `pre_build`, `build` and `post_build`.

## Library use

- `trunk.options` — `ConfigOptsBuild`, `ConfigOptsWatch`, `ConfigOptsServe`,
  `ConfigOptsClean`, `ConfigOptsTools`, `ConfigOptsProxy`, `ConfigOptsHook`
  (each with `from_mapping`, most with `merged`) and `parse_uri`.
- `trunk.layers` — `ConfigOpts` (`from_mapping`, `from_file`, `from_env`,
  `merge`) and `rtc_build`, `rtc_watch`, `rtc_serve`, `rtc_clean`, `full`.
- `trunk.runtime` — `RtcBuild`, `RtcWatch`, `RtcServe`, `RtcClean`,
  `Features`, and the constants `DIST_DIR` and `STAGE_DIR`.
- `trunk.hooks` — `spawn_hooks(cfg, stage)` starts each hook of a stage in
  its own thread and returns futures; `wait_hooks(handles)` waits and
  raises the first failure. Hooks receive `TRUNK_PROFILE`,
  `TRUNK_HTML_FILE`, `TRUNK_SOURCE_DIR`, `TRUNK_STAGING_DIR`,
  `TRUNK_DIST_DIR` and `TRUNK_PUBLIC_URL`.
- `trunk.build` — `BuildSystem(cfg, pipeline)`; `build()` prepares the
  staging directory, calls `pipeline()`, then replaces the contents of the
  dist directory with what the pipeline wrote to the staging directory.
- `trunk.manifest` — `CargoMetadata.load(manifest)` runs
  `cargo metadata` and finds the root package.
- `trunk.common` — `TrunkError` and file helpers such as
  `remove_dir_all`, `copy_dir_recursive`, `path_exists`, `is_executable`,
  `parse_public_url`, `strip_prefix` and `run_command`.

```python
from trunk.layers import rtc_build, full
from trunk.options import ConfigOptsBuild

cfg = rtc_build(ConfigOptsBuild(release=True), None)  # needs index.html
print(cfg.final_dist, cfg.public_url)

print(full(None))
```

## What this package does not do

There are no `build`, `watch` or `serve` commands: the package has runtime
configuration for watching and serving, but no file watcher and no
development server or proxy. It has no HTML asset pipeline of its own;
`BuildSystem` takes the pipeline as a callable, and does not run hooks by
itself. It does not download tools such as `wasm-bindgen` or `sass`, and
`clean` has no option to remove a tool cache.