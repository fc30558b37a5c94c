# main.py
"""
Entry Point: Capture Inventory Analyzer

Purpose
-------
Run one capture through the full pipeline against in-memory stores and print
what a client would see:
  1) Load the image (Pillow sniffs MIME type and size).
  2) Register it as a pending capture for a project and ownership scope.
  3) Orchestrate: vision -> enrichment -> fan-out -> status -> broadcast.
  4) Print the outcome, the inventory, the spreadsheet rows and the status text.

Design
------
- The scripted provider is the default so the demo runs offline; it replays
  --reply FILE or a built-in sample reply.
- --provider openai needs OPENAI_API_KEY; model and timeouts come from CAPINV_* env.

Usage
-----
    python main.py photo.jpg
    python main.py photo.jpg --project proj-42 --org acme --reply reply.json
    python main.py photo.jpg --provider openai --debug
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from capture_inventory.core.errors import PipelineError
from capture_inventory.core.status import status_message
from capture_inventory.logging_setup import configure_logging
from capture_inventory.orchestrators.analysis_orchestrator import AnalysisOrchestrator
from capture_inventory.schemas.models import Capture, OrganizationOwner, PersonalOwner
from capture_inventory.settings import PipelineSettings, load_settings
from capture_inventory.tools.media import load_image
from capture_inventory.tools.vision import OpenAIVisionProvider, ScriptedVisionProvider, VisionProvider, reply_text

logger = logging.getLogger("capture_inventory.cli")

SAMPLE_REPLY = reply_text(
    [
        {"name": "Sofa", "category": "furniture", "quantity": 1, "location": "Living Room", "cuft": 35},
        {"name": "Dinner plates", "category": "kitchenware", "quantity": 12, "fragile": True},
        {"name": "Paperback novels", "category": "books", "quantity": 30, "cuft": 0.05},
        {"name": "Table lamp", "category": "electronics", "quantity": 2, "cuft": 2},
    ],
    summary="Living room with a sofa, a lamp, a bookshelf and a stack of dishes.",
)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Analyze one capture into moving inventory.")
    p.add_argument("image", type=str, help="Path to an image file (JPEG, PNG, WebP, GIF).")
    p.add_argument("--project", type=str, default="proj-demo0001", help="Project ID to file items under.")
    scope = p.add_mutually_exclusive_group()
    scope.add_argument("--user", type=str, default=None, help="Personal owner (user ID).")
    scope.add_argument("--org", type=str, default=None, help="Organization owner (organization ID).")
    p.add_argument(
        "--provider",
        type=str,
        default="scripted",
        choices=["scripted", "openai"],
        help='Vision provider: "scripted" (offline) or "openai".',
    )
    p.add_argument("--reply", type=str, default=None, help="Reply text file for the scripted provider.")
    p.add_argument("--debug", action="store_true", help="Enable debug logging.")
    return p.parse_args(argv)


def build_provider(args: argparse.Namespace, settings: PipelineSettings) -> VisionProvider:
    if args.provider == "openai":
        return OpenAIVisionProvider(settings)
    reply = Path(args.reply).read_text(encoding="utf-8") if args.reply else SAMPLE_REPLY
    return ScriptedVisionProvider(reply)


async def run(args: argparse.Namespace) -> int:
    settings = load_settings()
    image = load_image(args.image)
    owner = OrganizationOwner(organization_id=args.org) if args.org else PersonalOwner(user_id=args.user or "demo-user")

    orch = AnalysisOrchestrator.in_memory(build_provider(args, settings), settings=settings)
    capture = orch.captures.add(
        Capture(
            project_id=args.project,
            owner=owner,
            data=image.data,
            mime_type=image.mime_type,
            original_name=Path(args.image).name,
        )
    )
    logger.info("loaded %s (%s, %dx%d)", capture.original_name, image.mime_type, image.width, image.height)

    try:
        outcome = await orch.run_analysis(capture.capture_id, args.project, owner)
    except PipelineError as e:
        stored = await orch.captures.get(capture.capture_id, args.project, owner)
        print(f"Status: {status_message(stored.analysis)}")
        print(f"Error: {e}")
        return 1

    stored = await orch.captures.get(capture.capture_id, args.project, owner)
    items = await orch.fanout.inventory.list_for_project(args.project, owner)
    sheet = await orch.fanout.spreadsheets.get(args.project, owner)

    print(json.dumps(outcome.model_dump(mode="json"), indent=2))
    print("\nInventory:")
    for it in items:
        box = it.box_recommendation
        box_txt = f"{box.box_quantity} x {box.box_type}" if box else "no box"
        print(f"  - {it.quantity} x {it.name} [{it.location}] {it.cuft} cuft, {it.weight} lb, {box_txt}")
    if sheet is not None:
        print("\nSpreadsheet rows:")
        header = " | ".join(c.name for c in sheet.columns)
        print(f"  {header}")
        for row in sheet.rows:
            print("  " + " | ".join(row.cells.get(c.id, "") for c in sheet.columns))
    print(f"\nStatus: {status_message(stored.analysis)}")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = load_settings()
    configure_logging(debug=args.debug or settings.debug, log_file=settings.log_file)
    try:
        return asyncio.run(run(args))
    except (FileNotFoundError, ValueError, RuntimeError) as e:
        print(f"Error: {e}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
