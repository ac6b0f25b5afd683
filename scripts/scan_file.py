"""Scan a text or image file from the command line and print the ScanResult as JSON.

Examples:
    python scripts/scan_file.py notes.txt
    cat ocr_output.txt | python scripts/scan_file.py -
    python scripts/scan_file.py --mode smart card.jpg
    python scripts/scan_file.py --mode smart --provider anthropic --via-api receipt.png
"""

from __future__ import annotations

import argparse
import asyncio
import base64
import logging
import mimetypes
import sys
from pathlib import Path

from smart_scan.config import settings
from smart_scan.scan_config import ScanConfig, ScanMode, SmartBackend, VisionProvider
from smart_scan.scanning.pipeline import scan


def _read_image(path: Path) -> tuple[str, str | None]:
    mime_type, _ = mimetypes.guess_type(path.name)
    return base64.b64encode(path.read_bytes()).decode("ascii"), mime_type


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Extract actionable items from a scan.")
    parser.add_argument("path", help="Text file (quick) or image file (smart); '-' reads stdin")
    parser.add_argument("--mode", choices=[m.value for m in ScanMode], default=ScanMode.QUICK.value)
    parser.add_argument("--provider", choices=[p.value for p in VisionProvider], default=None)
    parser.add_argument(
        "--via-api",
        action="store_true",
        help=f"Send smart scans through the HTTP endpoint ({settings.scan_api_url})",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=settings.log_level, stream=sys.stderr)

    mode = ScanMode(args.mode)
    config = ScanConfig(
        provider=VisionProvider(args.provider) if args.provider else None,
        smart_backend=SmartBackend.API if args.via_api else SmartBackend.DIRECT,
    )

    if mode is ScanMode.QUICK:
        text = sys.stdin.read() if args.path == "-" else Path(args.path).read_text(encoding="utf-8")
        result = asyncio.run(scan(mode, text=text, config=config))
    else:
        image, mime_type = _read_image(Path(args.path))
        result = asyncio.run(scan(mode, image=image, mime_type=mime_type, config=config))

    print(result.model_dump_json(by_alias=True, indent=2))
    return 0 if result.success else 1


if __name__ == "__main__":
    raise SystemExit(main())
