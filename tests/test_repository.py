from __future__ import annotations

import json

import numpy as np
import pytest

from template_tracker.canvas import CanvasState
from template_tracker.core_types import Activity, PixelEvent, Placement, TRANSPARENT
from template_tracker.design import TemplateDesign
from template_tracker.repository import TemplateRepository

from helpers import BLUE, GREEN, PALETTE, RED, T0


def _design():
    return TemplateDesign(2, 2, [RED, BLUE, TRANSPARENT, RED])


def _canvas():
    return CanvasState(np.full((4, 4), BLUE, dtype=np.uint8))


def test_designs_are_shared_and_released():
    repo = TemplateRepository(_canvas(), PALETTE)
    a = repo.add("a", _design(), Placement(0, 0), now=T0)
    b = repo.add("b", _design(), Placement(1, 1), now=T0)
    assert len(repo) == 2
    assert len(repo.designs) == 1
    assert a.template.design is b.template.design

    repo.remove("a")
    assert len(repo.designs) == 1
    repo.remove("b")
    assert repo.designs == {}


def test_re_adding_a_name_replaces_it():
    repo = TemplateRepository(_canvas(), PALETTE)
    repo.add("a", _design(), now=T0)
    other = TemplateDesign(1, 1, [GREEN])
    repo.add("a", other, now=T0)
    assert len(repo) == 1
    assert list(repo.designs) == [other.hash]


def test_pixel_event_reaches_overlapping_trackers():
    repo = TemplateRepository(_canvas(), PALETTE)
    repo.add("a", _design(), Placement(0, 0), now=T0)
    repo.add("b", _design(), Placement(1, 1), now=T0)

    assert repo.pixel(PixelEvent(1, 1, RED, BLUE), now=T0 + 5) == 2
    assert repo.canvas.get(1, 1) == RED
    assert repo.get("a").recent_activity(60, T0 + 5) == Activity(1, 0, 0)
    assert repo.get("b").recent_activity(60, T0 + 5) == Activity(1, 0, 0)

    # Transparent for "a", outside "b".
    assert repo.pixel(PixelEvent(0, 1, GREEN, BLUE), now=T0 + 6) == 0
    assert repo.pixel(PixelEvent(3, 3, GREEN, BLUE), now=T0 + 7) == 0
    assert repo.get("b").recent_activity(60, T0 + 7) == Activity(1, 0, 0)


def test_find_prefers_names_inside_the_query():
    repo = TemplateRepository(_canvas(), PALETTE)
    for name in ("castle", "Castle Tower", "tree"):
        repo.add(name, _design(), now=T0)
    assert repo.find("how is the castle tower doing")[0] == "Castle Tower"
    assert repo.find("castle")[0] == "castle"
    assert repo.find("TOW")[0] == "Castle Tower"
    assert repo.find("moat") is None


def test_save_and_load_round_trip(tmp_path):
    repo = TemplateRepository(_canvas(), PALETTE, tmp_path)
    design = _design()
    repo.add("a", design, Placement(1, 2), now=T0, started=T0 - 100)
    repo.pixel(PixelEvent(1, 2, RED, BLUE), now=T0 + 5)
    path = repo.save()

    assert path == tmp_path / "persistent.json"
    assert (tmp_path / "templates" / f"{design.hash}.png").exists()
    entry = json.loads(path.read_text(encoding="utf-8"))["templates"]["a"]
    assert (entry["x"], entry["y"], entry["design"]) == (1, 2, design.hash)

    reloaded = TemplateRepository(repo.canvas, PALETTE, tmp_path)
    assert reloaded.load(now=T0 + 60) == 1
    tracker = reloaded.get("a")
    assert tracker.template.design == design
    assert tracker.started == T0 - 100
    assert tracker.progress == 2
    assert tracker.recent_activity(120, T0 + 60).positive == 1


def test_missing_state_loads_nothing(tmp_path):
    assert TemplateRepository(_canvas(), PALETTE, tmp_path).load(now=T0) == 0


def test_corrupt_state_warns(tmp_path, capsys):
    (tmp_path / "persistent.json").write_text("{not json", encoding="utf-8")
    assert TemplateRepository(_canvas(), PALETTE, tmp_path).load(now=T0) == 0
    assert "[warn]" in capsys.readouterr().out


def test_bad_entry_is_skipped(tmp_path, capsys):
    repo = TemplateRepository(_canvas(), PALETTE, tmp_path)
    repo.add("good", _design(), now=T0)
    repo.save()
    raw = json.loads(repo.persistent_path.read_text(encoding="utf-8"))
    raw["templates"]["bad"] = {"x": "left", "y": 0, "started": T0, "design": "x"}
    repo.persistent_path.write_text(json.dumps(raw), encoding="utf-8")

    reloaded = TemplateRepository(_canvas(), PALETTE, tmp_path)
    assert reloaded.load(now=T0) == 1
    assert "good" in reloaded and "bad" not in reloaded
    assert "bad" in capsys.readouterr().out


def test_clean_unused_design_files(tmp_path):
    repo = TemplateRepository(_canvas(), PALETTE, tmp_path)
    design = _design()
    repo.add("a", design, now=T0)
    stray = TemplateDesign(1, 1, [GREEN]).save(repo.template_dir, PALETTE)
    assert repo.clean_unused_design_files() == [stray]
    assert (repo.template_dir / f"{design.hash}.png").exists()


def test_reset_drops_everything(tmp_path):
    repo = TemplateRepository(_canvas(), PALETTE, tmp_path)
    repo.add("a", _design(), now=T0)
    replacement = np.full((4, 4), RED, dtype=np.uint8)
    assert repo.reset(replacement) == ["a"]
    assert len(repo) == 0
    assert repo.canvas.get(0, 0) == RED
    assert list(repo.template_dir.glob("*.png")) == []


def test_paths_need_a_directory():
    repo = TemplateRepository(_canvas(), PALETTE)
    with pytest.raises(ValueError):
        repo.save()
