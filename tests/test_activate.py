"""Tests for the generated shell activation scripts."""

from __future__ import annotations

import shutil
import subprocess

import pytest

from nvenv.env.activate import render_bash_activate, render_fish_activate, write_activate_scripts
from nvenv.env.layout import EnvLayout

needs_bash = pytest.mark.skipif(shutil.which("bash") is None, reason="bash not available")


def _layout(tmp_path, name="venv"):
    layout = EnvLayout(tmp_path / name, "18.20.0")
    layout.bin_dir.mkdir(parents=True)
    return layout


def test_writes_both_scripts(tmp_path) -> None:
    layout = _layout(tmp_path)

    written = write_activate_scripts(layout)

    assert written == [layout.activate_script, layout.activate_fish_script]

    bash = layout.activate_script.read_text()
    assert "deactivate" in bash
    assert "PATH" in bash
    assert "(nvenv)" in bash
    assert str(layout.bin_dir) in bash

    fish = layout.activate_fish_script.read_text()
    assert "function deactivate" in fish
    assert "fish_prompt" in fish
    assert "(nvenv)" in fish
    assert "set -gx NVENV" in fish


def test_fish_quotes_paths(tmp_path) -> None:
    script = render_fish_activate(tmp_path / "it's here")

    assert "'" + str(tmp_path).replace("'", "\\'") + "/it\\'s here'" in script


def _run_bash(script: str) -> subprocess.CompletedProcess:
    return subprocess.run(
        ["bash", "--noprofile", "--norc", "-c", script],
        capture_output=True,
        text=True,
        check=True,
    )


@needs_bash
def test_deactivate_restores_path_exactly(tmp_path) -> None:
    layout = _layout(tmp_path, "my env")
    write_activate_scripts(layout)

    result = _run_bash(
        'before="$PATH"; PS1="$ "\n'
        f'source "{layout.activate_script}"\n'
        'echo "active=$NVENV"\n'
        'echo "first=${PATH%%:*}"\n'
        'echo "prompt=$PS1"\n'
        "deactivate\n"
        '[ "$PATH" = "$before" ] && echo "path-restored"\n'
        'echo "restored-prompt=$PS1"\n'
        'echo "marker=${NVENV-unset}"\n'
        'declare -F deactivate >/dev/null || echo "function-removed"\n'
    )

    lines = result.stdout.splitlines()
    assert f"active={layout.root}" in lines
    assert f"first={layout.bin_dir}" in lines
    assert "prompt=(nvenv) $ " in lines
    assert "path-restored" in lines
    assert "restored-prompt=$ " in lines
    assert "marker=unset" in lines
    assert "function-removed" in lines


@needs_bash
def test_nondestructive_deactivate_keeps_function(tmp_path) -> None:
    layout = _layout(tmp_path)
    write_activate_scripts(layout)

    result = _run_bash(
        f'source "{layout.activate_script}"\n'
        "deactivate nondestructive\n"
        'declare -F deactivate >/dev/null && echo "still-defined"\n'
    )

    assert "still-defined" in result.stdout.splitlines()


@needs_bash
def test_reactivation_does_not_stack_paths(tmp_path) -> None:
    layout = _layout(tmp_path)
    write_activate_scripts(layout)

    result = _run_bash(
        'before="$PATH"\n'
        f'source "{layout.activate_script}"\n'
        f'source "{layout.activate_script}"\n'
        "deactivate\n"
        '[ "$PATH" = "$before" ] && echo "path-restored"\n'
    )

    assert "path-restored" in result.stdout.splitlines()


@needs_bash
def test_prompt_is_not_exported(tmp_path) -> None:
    layout = _layout(tmp_path)
    write_activate_scripts(layout)

    result = _run_bash(
        "unset PS1\n"
        f'source "{layout.activate_script}"\n'
        'bash -c \'echo "child-prompt=${PS1-unset}"\'\n'
        "deactivate\n"
        'bash -c \'echo "child-after=${PS1-unset}"\'\n'
    )

    lines = result.stdout.splitlines()
    assert "child-prompt=unset" in lines
    assert "child-after=unset" in lines


def test_bash_script_quotes_special_characters(tmp_path) -> None:
    script = render_bash_activate(tmp_path / "a $dollar")

    assert "NVENV='" + str(tmp_path) + "/a $dollar'" in script
