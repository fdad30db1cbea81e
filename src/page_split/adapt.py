"""
Adapt a whole layouts file to freshly computed outlines.

Why this module exists:
- The core adapter works on one layout at a time; pipelines store layouts per
  page image in a file and recompute outlines in bulk after deskew/crop.
- Keeps file handling and manifest reporting out of the geometry code.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict

from .adapter import adapt_page_layout
from .geometry import rect_to_coords
from .layout import PageLayout
from .layout_store import dump_layouts, load_layouts, load_outlines
from .manifest import ManifestRecorder
from .utils import UserError, ensure_file_path


def _adapt_status(previous: PageLayout, adapted: PageLayout) -> str:
    if adapted is previous:
        return "unchanged"
    if adapted.type is not previous.type:
        return "downgraded"
    return "adapted"


def adapt_layouts_file(
    layouts_path: Path,
    outlines_path: Path,
    out_path: Path,
    overwrite: bool,
    dry_run: bool,
    manifest_path: Path,
    command_string: str,
    options: Dict[str, object],
) -> Dict[str, PageLayout]:
    """
    Adapt every layout that has a new outline and write the result.

    Pages without a new outline are carried over as they are. Returns the
    adapted layouts (also in dry-run, where nothing is written).
    """

    recorder = ManifestRecorder.for_command(
        command=command_string,
        options=options,
        inputs={"layouts": str(layouts_path), "outlines": str(outlines_path)},
        outputs={"layouts": str(out_path), "manifest": str(manifest_path)},
        dry_run=dry_run,
    )

    result: Dict[str, PageLayout] = {}
    counts = {"adapted": 0, "downgraded": 0, "unchanged": 0, "kept": 0, "skipped": 0}
    error_message: str | None = None
    summary: Dict[str, object] = {"pages": 0, "output": str(out_path)}

    try:
        ensure_file_path(out_path, "Output layouts file")
        if out_path.resolve() == layouts_path.resolve():
            raise UserError(
                "Output layouts file is the same as the input. Choose another --out."
            )

        layouts = load_layouts(layouts_path)
        outlines = load_outlines(outlines_path)
        recorder.inputs["page_count"] = len(layouts)
        recorder.inputs["outline_count"] = len(outlines)

        if out_path.exists() and not overwrite:
            recorder.log(f"Skipping because output exists: {out_path}")
            recorder.add_action(action="adapt_layouts", status="skipped", output=str(out_path))
            summary["status"] = "skipped"
            summary["reason"] = "output exists"
            return result

        recorder.log(f"Adapting {len(layouts)} layout(s) to {len(outlines)} outline(s).")

        for page in sorted(outlines):
            if page not in layouts:
                counts["skipped"] += 1
                recorder.log(f"Outline for unknown page ignored: {page}", level="warning")
                recorder.add_action(action="adapt_layout", status="skipped", page=page)

        for position, page in enumerate(sorted(layouts), start=1):
            previous = layouts[page]
            if page not in outlines:
                result[page] = previous
                counts["kept"] += 1
                recorder.log(f"No new outline for {page}; kept as-is.", level="debug")
                recorder.add_action(
                    action="adapt_layout", status="kept", page=page, type=previous.type.value
                )
                continue

            adapted = adapt_page_layout(previous, outlines[page])
            result[page] = adapted
            status = _adapt_status(previous, adapted)
            counts[status] += 1

            recorder.log(
                f"{page} ({position}/{len(layouts)}): {status}, "
                f"{previous.type.value} -> {adapted.type.value}",
                level="warning" if status == "downgraded" else "debug",
            )
            recorder.add_action(
                action="adapt_layout",
                status=status,
                page=page,
                previous_type=previous.type.value,
                type=adapted.type.value,
                outline=list(rect_to_coords(adapted.outline)),
                cutters=[list(cutter.to_coords()) for cutter in adapted.cutters],
            )

        if dry_run:
            recorder.log(f"[dry-run] Would write {len(result)} layout(s) to {out_path}")
        else:
            dump_layouts(result, out_path)
            recorder.log(f"Wrote {len(result)} layout(s) -> {out_path}")
    except Exception as exc:  # pragma: no cover - includes validation and I/O errors
        error = recorder.record_failure(
            exc, action="adapt_layouts", context=f"Failed to adapt layouts {layouts_path}"
        )
        error_message = str(error)
        if error is exc:
            raise
        raise error from exc
    finally:
        summary["pages"] = len(result)
        summary.update(counts)
        summary["status"] = summary.get("status", "error" if error_message else "ok")
        if error_message is not None:
            summary["error"] = error_message
        recorder.write_manifest(manifest_path, summary)

    return result
