# presets/rust.py
from __future__ import annotations

from typing import List

from ..dsl import sh, uses
from ..model import Step


def setup_rust(
    toolchain: str = "stable",
    *,
    profile: str = "minimal",
    components: List[str] | None = None,
    name: str | None = "Setup Rust",
) -> Step:
    """actions-rs/toolchain step; `components` render as one comma separated string."""
    with_ = {"profile": profile, "toolchain": toolchain, "override": True}
    if components:
        with_["components"] = ", ".join(components)
    return uses("actions-rs/toolchain@v1", name, with_=with_)


def rustfmt(name: str | None = "Run rustfmt") -> Step:
    return sh(name, "cargo fmt --all -- --check")


def clippy(args: str = "--all", name: str | None = "Run clippy") -> Step:
    return sh(name, f"cargo clippy {args} -- -D warnings")


def cargo_test(args: str = "--workspace", name: str | None = "Run tests") -> Step:
    return sh(name, f"cargo test {args}".strip())


def wasm_build(target: str = "wasm32-unknown-unknown", name: str | None = "Build for WASM") -> List[Step]:
    """Add the wasm target, then build the workspace for it."""
    return [
        sh(None, f"rustup target add {target}"),
        sh(name, f"cargo build --target {target} --workspace"),
    ]
