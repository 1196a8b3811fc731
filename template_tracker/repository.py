# template_tracker/repository.py
from __future__ import annotations

"""
Template repository.

Owns the named trackers for one canvas and deduplicates their designs by
content hash: any number of placements share one TemplateDesign, which is
dropped once no placement references it. Pass the repository to whatever
needs it; there is no module-level registry.

On disk (when a directory is given):
  <directory>/persistent.json        tracker placements and activity
  <directory>/templates/<hash>.png   one indexed PNG per design
"""

import json
import time as _time
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .canvas import CanvasState
from .core_types import Palette, PixelChange, PixelEvent, Placement, TRANSPARENT
from .design import Template, TemplateDesign
from .tracker import ProgressTracker
from .utils import debug_log, warn


class TemplateRepository:
    def __init__(
        self,
        canvas: CanvasState,
        palette: Palette,
        directory: Optional[Path] = None,
        debug: bool = False,
    ):
        self.canvas = canvas
        self.palette = palette
        self.directory = Path(directory) if directory is not None else None
        self.debug = debug
        self.trackers: Dict[str, ProgressTracker] = {}
        self._designs: Dict[str, TemplateDesign] = {}
        self._refs: Dict[str, int] = {}

    # Paths

    @property
    def template_dir(self) -> Path:
        if self.directory is None:
            raise ValueError("repository has no directory")
        return self.directory / "templates"

    @property
    def persistent_path(self) -> Path:
        if self.directory is None:
            raise ValueError("repository has no directory")
        return self.directory / "persistent.json"

    # Designs

    @property
    def designs(self) -> Dict[str, TemplateDesign]:
        return dict(self._designs)

    def _acquire(self, design: TemplateDesign) -> TemplateDesign:
        shared = self._designs.setdefault(design.hash, design)
        self._refs[design.hash] = self._refs.get(design.hash, 0) + 1
        return shared

    def _release(self, design: TemplateDesign) -> None:
        remaining = self._refs.get(design.hash, 0) - 1
        if remaining > 0:
            self._refs[design.hash] = remaining
            return
        self._refs.pop(design.hash, None)
        self._designs.pop(design.hash, None)
        if self.debug:
            debug_log(f"design {design.hash[:12]} no longer referenced")

    # Trackers

    def __contains__(self, name: object) -> bool:
        return name in self.trackers

    def __len__(self) -> int:
        return len(self.trackers)

    def get(self, name: str) -> ProgressTracker:
        return self.trackers[name]

    def add(
        self,
        name: str,
        design: TemplateDesign,
        placement: Placement = Placement(),
        now: Optional[float] = None,
        started: Optional[float] = None,
    ) -> ProgressTracker:
        """Track `design` at `placement` under `name`, replacing any previous entry."""
        if name in self.trackers:
            self.remove(name)
        shared = self._acquire(design)
        tracker = ProgressTracker(
            Template(shared, placement), self.canvas, started=started, now=now
        )
        self.trackers[name] = tracker
        if self.directory is not None:
            path = self.template_dir / f"{shared.hash}.png"
            if not path.exists():
                shared.save(self.template_dir, self.palette)
        return tracker

    def remove(self, name: str) -> ProgressTracker:
        tracker = self.trackers.pop(name)
        self._release(tracker.template.design)
        return tracker

    def find(self, search: str) -> Optional[Tuple[str, ProgressTracker]]:
        """
        Case-insensitive lookup: first a tracked name contained in `search`
        (earliest, then longest), else a name containing `search`.
        """
        name = _best_match(
            [(search.lower().find(n.lower()), n) for n in self.trackers]
        ) or _best_match([(n.lower().find(search.lower()), n) for n in self.trackers])
        if name is None:
            return None
        return name, self.trackers[name]

    # Canvas events

    def pixel(self, event: PixelEvent, now: Optional[float] = None) -> int:
        """
        Apply one canvas change and feed it to every tracker it touches.
        Returns the number of trackers synced.
        """
        now = _time.time() if now is None else float(now)
        self.canvas.apply(event)
        synced = 0
        for tracker in self.trackers.values():
            template = tracker.template
            index = template.local_index(event.x, event.y)
            if index is None or int(template.design.data[index]) == TRANSPARENT:
                continue
            tracker.sync({index: PixelChange(event.color, event.old_color)}, now)
            synced += 1
        return synced

    def sync_all(self, now: Optional[float] = None) -> None:
        """Full reconciliation of every tracker against the canvas."""
        now = _time.time() if now is None else float(now)
        for tracker in self.trackers.values():
            tracker.sync(now=now)

    def reset(self, canvas: Optional[Any] = None) -> List[str]:
        """Drop every tracker (e.g. the canvas was replaced). Returns dropped names."""
        dropped = list(self.trackers)
        for name in dropped:
            self.remove(name)
        if canvas is not None:
            self.canvas.replace(canvas)
        if self.directory is not None and self.template_dir.exists():
            self.clean_unused_design_files()
        return dropped

    # Persistence

    def persistent(self) -> Dict[str, Any]:
        return {
            "templates": {
                name: {
                    "x": tracker.template.x,
                    "y": tracker.template.y,
                    "started": tracker.started,
                    "design": tracker.template.design.hash,
                    "history": tracker.snapshot(),
                }
                for name, tracker in self.trackers.items()
            }
        }

    def save(self) -> Path:
        self.template_dir.mkdir(parents=True, exist_ok=True)
        for design in self._designs.values():
            if not (self.template_dir / f"{design.hash}.png").exists():
                design.save(self.template_dir, self.palette)
        path = self.persistent_path
        path.write_text(json.dumps(self.persistent()), encoding="utf-8")
        return path

    def load(self, now: Optional[float] = None) -> int:
        """
        Restore trackers from disk. Unreadable state starts empty; templates
        that fail to load are skipped with a warning. Returns the count loaded.
        """
        now = _time.time() if now is None else float(now)
        try:
            raw = json.loads(self.persistent_path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return 0
        except (OSError, ValueError) as e:
            warn(f"persistent data unreadable ({e}); starting empty")
            return 0

        templates = raw.get("templates") if isinstance(raw, dict) else None
        if not isinstance(templates, dict):
            warn("persistent data has no template table; starting empty")
            return 0

        loaded = 0
        for name, entry in templates.items():
            try:
                self._load_one(str(name), entry, now)
                loaded += 1
            except (OSError, ValueError) as e:
                warn(f"failed to load template {name}: {e}")
        return loaded

    def _load_one(self, name: str, entry: Any, now: float) -> None:
        if not isinstance(entry, dict):
            raise ValueError("invalid template data")
        x, y = entry.get("x"), entry.get("y")
        if not isinstance(x, int) or isinstance(x, bool):
            raise ValueError("invalid template x position")
        if not isinstance(y, int) or isinstance(y, bool):
            raise ValueError("invalid template y position")
        started = entry.get("started")
        if not isinstance(started, (int, float)) or isinstance(started, bool):
            raise ValueError("invalid template start time")
        digest = entry.get("design")
        if not isinstance(digest, str):
            raise ValueError("invalid template design reference")

        design = TemplateDesign.load(self.template_dir / f"{digest}.png", self.palette)
        if design.hash != digest:
            warn(f"design for {name} re-quantized to a different hash (palette changed?)")

        if name in self.trackers:
            self.remove(name)
        shared = self._acquire(design)
        self.trackers[name] = ProgressTracker.from_snapshot(
            Template(shared, Placement(x, y)),
            self.canvas,
            started=float(started),
            data=entry.get("history"),
            now=now,
        )

    def clean_unused_design_files(self) -> List[Path]:
        """Delete design PNGs that no tracked template references."""
        removed: List[Path] = []
        for path in sorted(self.template_dir.glob("*.png")):
            if path.stem not in self._designs:
                path.unlink()
                removed.append(path)
        return removed


def _best_match(matches: List[Tuple[int, str]]) -> Optional[str]:
    found = [(pos, name) for pos, name in matches if pos != -1]
    if not found:
        return None
    return min(found, key=lambda m: (m[0], -len(m[1])))[1]


__all__ = ["TemplateRepository"]
