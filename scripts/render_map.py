"""Resolve the location once, load markers around it and save the map as HTML."""
import argparse
import asyncio
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.append(str(REPO_ROOT))

from core.config import Settings, configure_logging  # noqa: E402
from presentation.common import FoliumMapView, build_screen  # noqa: E402


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--out", default="map.html", help="output HTML file")
    args = parser.parse_args(argv)

    settings = Settings.from_env()
    configure_logging(settings.log_level)

    view = FoliumMapView(tiles=settings.tiles)
    screen = build_screen(settings, view)
    asyncio.run(screen.start())

    message = screen.status_message()
    if message:
        print("⚠", message, flush=True)
    if view.center is None:
        return 1

    view.build_map().save(args.out)
    print(f"Saved {len(screen.markers)} markers to {args.out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
