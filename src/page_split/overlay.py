"""
Draw page layouts over their scan images.

Why this module exists:
- Cutter adaptation is easiest to review visually: the outline and each
  cutter are drawn on a copy of the scan, nothing is cropped or resampled.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Tuple

from PIL import Image, ImageDraw

from .geometry import rect_to_coords
from .layout import PageLayout
from .layout_store import load_layouts
from .manifest import ManifestRecorder
from .utils import (
    UserError,
    ensure_dir,
    ensure_dir_path,
    parse_color,
    validate_positive_int,
)


Color = Tuple[int, int, int]


def _collect_image_files(in_dir: Path, pattern: str) -> List[Path]:
    """Return matching files in stable order."""

    return sorted(path for path in in_dir.glob(pattern) if path.is_file())


def draw_layout_overlay(
    source_image: Image.Image,
    layout: PageLayout,
    line_width: int = 3,
    outline_color: Color = (0, 255, 0),
    cutter_color: Color = (255, 0, 0),
) -> Image.Image:
    """Return an RGB copy of the image with outline and cutters drawn on it."""

    overlay = source_image.convert("RGB")
    draw = ImageDraw.Draw(overlay)

    x0, y0, x1, y1 = rect_to_coords(layout.outline)
    # Pillow rejects rectangles whose corners are swapped.
    box = (min(x0, x1), min(y0, y1), max(x0, x1), max(y0, y1))
    draw.rectangle(box, outline=outline_color, width=line_width)
    for cutter in layout.cutters:
        cx1, cy1, cx2, cy2 = cutter.to_coords()
        draw.line([(cx1, cy1), (cx2, cy2)], fill=cutter_color, width=line_width)

    return overlay


def overlay_layouts_in_folder(
    in_dir: Path,
    out_dir: Path,
    layouts_path: Path,
    pattern: str,
    line_width: int,
    outline_color: object,
    cutter_color: object,
    overwrite: bool,
    dry_run: bool,
    manifest_path: Path,
    command_string: str,
    options: Dict[str, object],
) -> None:
    """Write <stem>_layout.png for every image that has a layout."""

    recorder = ManifestRecorder.for_command(
        command=command_string,
        options=options,
        inputs={"in_dir": str(in_dir), "glob": pattern, "layouts": str(layouts_path)},
        outputs={"out_dir": str(out_dir), "manifest": str(manifest_path)},
        dry_run=dry_run,
    )

    files: List[Path] = []
    written = 0
    skipped = 0
    error_message: str | None = None
    summary: Dict[str, object] = {
        "files_found": 0,
        "written": 0,
        "skipped": 0,
        "output_dir": str(out_dir),
    }

    try:
        if not in_dir.exists() or not in_dir.is_dir():
            raise UserError(f"Input directory not found: {in_dir}")
        ensure_dir_path(out_dir, "Output directory")
        validate_positive_int(line_width, "line_width")
        outline_rgb = parse_color(outline_color, "outline_color")
        cutter_rgb = parse_color(cutter_color, "cutter_color")

        layouts = load_layouts(layouts_path)
        files = _collect_image_files(in_dir, pattern)
        recorder.inputs["files_found"] = len(files)

        if not files:
            recorder.log(f"No files matched {pattern} in {in_dir}")
            summary["status"] = "no-matches"
            return

        recorder.log(f"Drawing layouts for {len(files)} image(s).")
        ensure_dir(out_dir, dry_run=dry_run)

        for position, in_path in enumerate(files, start=1):
            out_path = out_dir / f"{in_path.stem}_layout.png"
            layout = layouts.get(in_path.name)

            if layout is None:
                skipped += 1
                recorder.log(f"No layout for {in_path.name}; skipped.", level="debug")
                recorder.add_action(
                    action="overlay_image",
                    status="skipped",
                    input=str(in_path),
                    reason="no layout",
                )
                continue

            if out_path.exists() and not overwrite:
                skipped += 1
                recorder.log(f"Skipping existing file: {out_path}")
                recorder.add_action(
                    action="overlay_image",
                    status="skipped",
                    input=str(in_path),
                    output=str(out_path),
                    reason="output exists",
                )
                continue

            if dry_run:
                recorder.log(
                    f"[dry-run] Would draw {in_path.name} ({position}/{len(files)}) -> {out_path}"
                )
                recorder.add_action(
                    action="overlay_image",
                    status="dry-run",
                    input=str(in_path),
                    output=str(out_path),
                )
                continue

            try:
                with Image.open(in_path) as opened:
                    overlay = draw_layout_overlay(
                        opened,
                        layout,
                        line_width=line_width,
                        outline_color=outline_rgb,
                        cutter_color=cutter_rgb,
                    )
                overlay.save(out_path)
            except OSError as exc:  # pragma: no cover - codec/file errors
                raise UserError(f"Failed to draw overlay for {in_path}: {exc}") from exc

            written += 1
            recorder.log(f"Drew {in_path.name} ({position}/{len(files)}) -> {out_path}")
            recorder.add_action(
                action="overlay_image",
                status="written",
                input=str(in_path),
                output=str(out_path),
                type=layout.type.value,
            )
    except Exception as exc:  # pragma: no cover - includes validation and runtime errors
        error = recorder.record_failure(
            exc, action="overlay", context=f"Failed to draw overlays in {in_dir}"
        )
        error_message = str(error)
        if error is exc:
            raise
        raise error from exc
    finally:
        summary["files_found"] = len(files)
        summary["written"] = written
        summary["skipped"] = skipped
        summary["status"] = summary.get("status", "error" if error_message else "ok")
        if error_message is not None:
            summary["error"] = error_message
        recorder.write_manifest(manifest_path, summary)
