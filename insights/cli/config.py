# ==============================================================================
# Config Commands
# ==============================================================================
"""
Configuration commands for the insights CLI.
"""

import json
from typing import Annotated

import typer

from insights.cli.shared import C
from insights.utils.config import get_settings


# ==============================================================================
# Commands
# ==============================================================================


def config_show(
    json_output: Annotated[
        bool, typer.Option("--json", "-j", help="Output configuration as JSON")
    ] = False,
) -> None:
    """Display current configuration (includes secrets in JSON mode)."""
    settings = get_settings()

    if json_output:
        config = {
            "heatmap": settings.heatmap.model_dump(),
            "session": settings.session.model_dump(),
            "snapshot": settings.snapshot.model_dump(),
            "valkey": {
                "host": settings.valkey.host,
                "port": settings.valkey.port,
                "db": settings.valkey.db,
                "ssl_enabled": settings.valkey.ssl,
                "password": settings.valkey.password,
            },
            "log_level": settings.log_level,
            "debug": settings.debug,
        }
        print(json.dumps(config, indent=2))
        return

    hs = settings.heatmap
    print()
    print(f"{C.BOLD}Configuration{C.RESET}")
    print()

    print(f"{C.CYAN}Heatmap{C.RESET}")
    print(f"  Canvas:     {C.WHITE}{hs.canvas_width}x{hs.canvas_height} (export x{hs.export_scale}){C.RESET}")
    print(f"  Radius:     {C.WHITE}{hs.radius}px{C.RESET}")
    print(f"  Intensity:  {C.WHITE}{hs.intensity}{C.RESET}")
    print(f"  Defaults:   {C.WHITE}{hs.default_viewport_width}px wide, {hs.default_doc_height}px tall{C.RESET}")
    print()

    print(f"{C.CYAN}Sessions{C.RESET}")
    print(f"  Bounce:     {C.WHITE}< {settings.session.bounce_seconds}s on one page{C.RESET}")
    print()

    print(f"{C.CYAN}Snapshots{C.RESET}")
    print(f"  Backend:    {C.WHITE}{settings.snapshot.backend}{C.RESET}")
    print(f"  Retention:  {C.WHITE}{settings.snapshot.retention}{C.RESET}")
    print(f"  Key:        {C.WHITE}{settings.snapshot.key}{C.RESET}")
    print()

    print(f"{C.CYAN}Valkey{C.RESET}")
    print(f"  Host:       {C.WHITE}{settings.valkey.host}:{settings.valkey.port}/{settings.valkey.db}{C.RESET}")
    print(f"  SSL:        {C.WHITE}{'enabled' if settings.valkey.ssl else 'disabled'}{C.RESET}")
    print()

    print(f"{C.CYAN}Logging{C.RESET}")
    print(f"  Level:      {C.WHITE}{settings.log_level}{C.RESET}")
    print()
