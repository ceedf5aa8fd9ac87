from __future__ import annotations

import logging
import shlex
import textwrap
from pathlib import Path

from nvenv.env.layout import EnvLayout
from nvenv.utils.fs import FilesystemError

logger = logging.getLogger(__name__)

PROMPT_TAG = "(nvenv)"
MARKER_VAR = "NVENV"


def render_bash_activate(env_path: Path) -> str:
    bin_path = env_path / "bin"

    return textwrap.dedent(
        """\
        # This file must be used with "source bin/activate" from bash or zsh.
        # You cannot run it directly.

        deactivate () {{
            if [ -n "${{_OLD_VIRTUAL_PATH+x}}" ] ; then
                PATH="$_OLD_VIRTUAL_PATH"
                export PATH
                unset _OLD_VIRTUAL_PATH
            fi

            if [ -n "${{_OLD_VIRTUAL_PS1+x}}" ] ; then
                PS1="$_OLD_VIRTUAL_PS1"
                unset _OLD_VIRTUAL_PS1
            fi

            unset {marker}

            # bash and zsh cache command lookups
            if [ -n "${{BASH:-}}" -o -n "${{ZSH_VERSION:-}}" ] ; then
                hash -r 2> /dev/null
            fi

            if [ ! "${{1:-}}" = "nondestructive" ] ; then
                unset -f deactivate
            fi
        }}

        # unset irrelevant variables
        deactivate nondestructive

        {marker}={env_path}
        export {marker}

        _OLD_VIRTUAL_PATH="$PATH"
        PATH={bin_path}":$PATH"
        export PATH

        _OLD_VIRTUAL_PS1="${{PS1:-}}"
        PS1="{tag} ${{PS1:-}}"

        if [ -n "${{BASH:-}}" -o -n "${{ZSH_VERSION:-}}" ] ; then
            hash -r 2> /dev/null
        fi
        """
    ).format(
        marker=MARKER_VAR,
        env_path=shlex.quote(str(env_path)),
        bin_path=shlex.quote(str(bin_path)),
        tag=PROMPT_TAG,
    )


def render_fish_activate(env_path: Path) -> str:
    bin_path = env_path / "bin"

    return textwrap.dedent(
        """\
        # This file must be used with "source <env>/bin/activate.fish" from fish.
        # You cannot run it directly.

        function deactivate -d "Exit the nvenv environment and restore the shell"
            if set -q _OLD_VIRTUAL_PATH
                set -gx PATH $_OLD_VIRTUAL_PATH
                set -e _OLD_VIRTUAL_PATH
            end

            if set -q _OLD_FISH_PROMPT_OVERRIDE
                functions -e fish_prompt
                set -e _OLD_FISH_PROMPT_OVERRIDE
                functions -c _old_fish_prompt fish_prompt
                functions -e _old_fish_prompt
            end

            set -e {marker}

            if test "$argv[1]" != "nondestructive"
                functions -e deactivate
            end
        end

        # unset irrelevant variables
        deactivate nondestructive

        set -gx {marker} {env_path}

        set -gx _OLD_VIRTUAL_PATH $PATH
        set -gx PATH {bin_path} $PATH

        functions -c fish_prompt _old_fish_prompt

        function fish_prompt
            printf "%s{tag}%s " (set_color normal) (set_color normal)
            _old_fish_prompt
        end

        set -gx _OLD_FISH_PROMPT_OVERRIDE ${marker}
        """
    ).format(
        marker=MARKER_VAR,
        env_path=_fish_quote(str(env_path)),
        bin_path=_fish_quote(str(bin_path)),
        tag=PROMPT_TAG,
    )


def _fish_quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def write_activate_scripts(layout: EnvLayout) -> list[Path]:
    scripts = [
        (layout.activate_script, render_bash_activate(layout.root), "bash/zsh"),
        (layout.activate_fish_script, render_fish_activate(layout.root), "fish"),
    ]

    written: list[Path] = []
    for path, content, shell in scripts:
        try:
            path.write_text(content, encoding="utf-8", newline="\n")
        except OSError as exc:
            raise FilesystemError(
                f"Failed to write activate script: {path}"
            ) from exc
        logger.info("Created activate script for %s", shell)
        written.append(path)

    return written
