"""Tests for the reusable step presets."""

import yaml

from wacgen import job, on_push, wf
from wacgen.presets.common import check_workflows_step, checkout, setup_node, setup_python
from wacgen.presets.rust import cargo_test, clippy, rustfmt, setup_rust, wasm_build
from wacgen.render import render


def test_common_actions() -> None:
    assert checkout().uses == "actions/checkout@v4"
    assert checkout("v3").uses == "actions/checkout@v3"
    assert dict(setup_node().with_) == {"node-version": "20"}
    assert dict(setup_python("3.11").with_) == {"python-version": "3.11"}


def test_check_workflows_step() -> None:
    assert check_workflows_step().run == ("pip install -e .", "wacgen check")
    assert check_workflows_step(install=[]).run == ("wacgen check",)


def test_setup_rust_components() -> None:
    step = setup_rust(components=["rustfmt", "clippy"])
    assert step.uses == "actions-rs/toolchain@v1"
    assert dict(step.with_) == {
        "profile": "minimal",
        "toolchain": "stable",
        "override": True,
        "components": "rustfmt, clippy",
    }


def test_rust_workflow_renders() -> None:
    w = wf(
        "rust-test",
        job("Test", checkout(), setup_rust(), rustfmt(), clippy(), cargo_test()),
        job("WASM", *wasm_build()),
        name="Rust Test",
        on=[on_push("main")],
    )
    doc = yaml.safe_load(render(w))
    steps = doc["jobs"]["Test"]["steps"]
    assert [s.get("name") for s in steps] == [
        "Checkout", "Setup Rust", "Run rustfmt", "Run clippy", "Run tests",
    ]
    assert steps[3]["run"] == "cargo clippy --all -- -D warnings"
    wasm = doc["jobs"]["WASM"]["steps"]
    assert wasm[0] == {"run": "rustup target add wasm32-unknown-unknown"}
    assert wasm[1]["run"] == "cargo build --target wasm32-unknown-unknown --workspace"
