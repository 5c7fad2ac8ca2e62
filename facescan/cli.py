# SPDX-License-Identifier: Apache-2.0
"""CLI entrypoints."""
from __future__ import annotations

import json
from dataclasses import replace
from pathlib import Path
from typing import Optional

import cv2
import numpy as np
import typer

from .config import load_config
from .errors import CameraUnavailableError, InvalidFrameError, NoFaceDetectedError, RemoteClassifierError
from .insights import build_insights, score_bars
from .landmarks import MediaPipeLandmarkSource
from .overlay import OverlayMode
from .pipeline import CameraLoop, FaceScanPipeline, FrameResult
from .remote import DEFAULT_URL, RemoteClassifier

app = typer.Typer(help="Face symmetry and skin heuristics from a photo or camera.")

WINDOW = "facescan"


def make_source(static_image_mode: bool) -> MediaPipeLandmarkSource:
    cfg = load_config().detector.model_copy(update={"static_image_mode": static_image_mode})
    return MediaPipeLandmarkSource(cfg)


def _mode(heatmap: bool) -> OverlayMode:
    return OverlayMode.HEATMAP if heatmap else OverlayMode.MESH


def _print_result(result: FrameResult) -> None:
    for bar in score_bars(result.state):
        typer.echo(f"{bar.label:<10} {bar.text:>5}")
    for item in result.insights.items:
        typer.echo(f"- {item}")
    typer.echo(result.insights.suggestion)


@app.command()
def analyze(
    photo: Path = typer.Argument(..., help="Photo to analyze"),
    heatmap: bool = typer.Option(False, "--heatmap", help="Draw heat blobs instead of the mesh"),
    out: Optional[Path] = typer.Option(None, "--out", help="Write the overlay image here"),
    remote: Optional[str] = typer.Option(None, "--remote", help=f"Classifier URL, e.g. {DEFAULT_URL}"),
    as_json: bool = typer.Option(False, "--json", help="Print machine-readable output"),
):
    """Score a single photo."""
    with make_source(static_image_mode=True) as source:
        pipeline = FaceScanPipeline(source)
        try:
            result = pipeline.analyze_image(photo, _mode(heatmap))
        except NoFaceDetectedError:
            typer.echo("No face detected. Try another photo.", err=True)
            raise typer.Exit(1)
        except InvalidFrameError as e:
            typer.echo(f"Cannot read image: {e}", err=True)
            raise typer.Exit(2)

    verdict = None
    if remote:
        try:
            verdict = RemoteClassifier(remote).classify_file(photo)
        except RemoteClassifierError as e:
            typer.echo(f"Remote analysis failed: {e}", err=True)
            raise typer.Exit(1)
        result = replace(result, insights=build_insights(result.state, verdict, pipeline.config.insights))

    if out:
        out.parent.mkdir(parents=True, exist_ok=True)
        result.overlay.save(out)

    if as_json:
        payload = {
            "scores": result.state.model_dump(),
            "insights": result.insights.model_dump(),
            "verdict": verdict.model_dump() if verdict else None,
            "overlay": str(out) if out else None,
        }
        typer.echo(json.dumps(payload, indent=2))
    else:
        _print_result(result)
        if out:
            typer.echo(f"Overlay saved to {out}")


@app.command()
def camera(
    heatmap: bool = typer.Option(False, "--heatmap", help="Start in heatmap mode"),
    frames: Optional[int] = typer.Option(None, "--frames", help="Stop after N frames"),
):
    """Live camera view. Keys: h toggles heatmap, q quits."""
    with make_source(static_image_mode=False) as source:
        pipeline = FaceScanPipeline(source)
        loop = CameraLoop(pipeline, mode=_mode(heatmap))

        def show(frame: np.ndarray, result: Optional[FrameResult]) -> None:
            view = np.asarray(result.overlay) if result else frame
            cv2.imshow(WINDOW, cv2.cvtColor(view, cv2.COLOR_RGB2BGR))
            key = cv2.waitKey(1) & 0xFF
            if key == ord("q"):
                loop.stop()
            elif key == ord("h"):
                loop.toggle_mode()

        try:
            last = loop.run(show, max_frames=frames)
        except CameraUnavailableError as e:
            typer.echo(f"Camera error: {e}", err=True)
            raise typer.Exit(1)
        finally:
            cv2.destroyAllWindows()
    if last:
        _print_result(last)


@app.command()
def serve(host: str = "127.0.0.1", port: int = 3000):
    """Run the remote classifier HTTP server."""
    import uvicorn

    uvicorn.run("server.app:app", host=host, port=port)


if __name__ == "__main__":
    app()
