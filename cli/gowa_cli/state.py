from __future__ import annotations

from dataclasses import dataclass

import typer


@dataclass
class CliState:
    profile: str | None = None
    base_url: str | None = None
    json_out: bool = False


def get_state(ctx: typer.Context) -> CliState:
    root = ctx.find_root()
    if not isinstance(root.obj, CliState):
        root.obj = CliState()
    return root.obj
