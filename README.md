# gofar

`gofar` packages a Go project into a single `.far` artifact. It compiles every
command of the project for the local platform and for a configurable list of
additional platforms, gathers the project's resource files, writes a
`deployment.json` describing the build, and zips everything together.

## Requirements

- A POSIX system: compilation and resource copying run through `/bin/sh`.
- The `go` toolchain on your `PATH`.
- `GOPATH` set in the environment (the project search and the output location
  depend on it).
- `git` on your `PATH` if git information should be recorded in the artifact.

## Installation

```
pip install .
```

## Usage

```
gofar [-c] [-s] process_name
gofar version
```

- `process_name` – the name of the process (program) to package.
- `-c` – build with `CGO_ENABLED=1`.
- `-s` – add `-ldflags='-s -w'` to the build; only has effect together with `-c`.
- `-h`, `--help` – print the usage text.

`gofar version` prints `gofar version 2.4.0`. Without a process name the usage
text is printed. The command exits with status 1 when the project cannot be
found or packaging fails, and prints the reason on standard error.

### How the project is located

1. Starting from the current directory, `gofar` walks upwards looking for a
   `.git` directory that contains a `config` file, stopping at any
   `$GOPATH/src`. If found, that directory is the project base and the
   build records git information: the `origin` remote URL, the branch (without
   `refs/heads/`), the commit hash and the last commit message.
2. Otherwise each `$GOPATH/src` is searched for a directory named after the
   process.

### Commands and binaries

If the project has a `cmd` directory (searched for anywhere below the project
base), each of its sub-directories is built as a separate binary named after
the sub-directory; otherwise the project base itself is built. Each build runs

```
GOOS=<os> GOARCH=<arch> go build -o <working dir>/platform/<os>_<arch>/<name>
```

in the command's directory, prefixed with `CGO_ENABLED=1` (and `CC=<cc>` when
the platform sets one) under `-c`. The local platform is built first; the
additional platforms are built in parallel only when it succeeds. Any compiler
output is treated as a failure.

### Resources

If the project has a `resources` directory, its contents are copied as-is.
Otherwise every file whose name ends in `properties`, `xml`, `json`, `yaml`,
`yml` or `sh`, found anywhere under the project (hidden entries skipped), is
copied to the artifact root; files ending in `.sh` are made executable. When a
file named `<process_name>.ui.xml` ends up in the artifact root, the process
type is recorded as `USER_INTERACTIVE` instead of `GENERAL`.

### deployment.json

Written at the artifact root:

```json
{"build":{"git":{"branch":"main","commit":"...","message":"...","repo":"..."},"time":"2024-01-01 12:00:00 UTC","user":"builder"},"process":"myservice","process_type":"GENERAL"}
```

`user` comes from `whoami` (`unknown` if that fails); `git` is present only
when the project was found through git.

### Platform configuration

Target platforms are read from `~/.fatima/gofar.yaml`. When the file cannot
be read, a default one is written:

```yaml
---
# if you want to check platform support list, use below command
# $ go tool dist list
# 
platform_list:
- os: linux
  arch: amd64
- os: linux
  arch: arm64
```

On a non-Linux machine the local platform is added as well. An entry may set
`cc` to choose the C compiler used for that platform when CGO is enabled. The
local platform is always built, and left out of the additional platforms.

### Output

The artifact is written to `$GOPATH/far/<process_name>/<process_name>.far`
(the first entry of `GOPATH` is used). Entry names inside the zip start with
`/`; entries under `/platform` carry mode `0755`.

## Using it from Python

```python
from gofar.context import new_build_context

ctx = new_build_context("myservice", cgo_enable=False, strip_enable=False)
ctx.print_summary()
artifact = ctx.packaging()
```

`new_build_context` and `BuildContext.packaging` raise
`gofar.context.PackagingError` on failure. Lower-level helpers live in
`gofar.util` (directory search, command execution, `zip_artifact`),
`gofar.platform` (`BuildPlatformConfig`, `load_platform`) and `gofar.git`
(`read_git_info`).

## What it does not do

`gofar` only builds and packs the artifact. It does not deploy, install or
unpack `.far` files, and it does not compile anything itself: it relies on the
external `go`, `git`, `cp` and `whoami` programs.