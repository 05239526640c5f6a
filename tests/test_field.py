import numpy as np
import pytest

from choreography.field import (
    FOLIAGE_RATES, PhotoField, make_foliage_field, make_ribbon_field,
)
from choreography.motion import damp_factor
from choreography.records import FieldLayout, ParticleKind, PhotoRecord
from choreography.targets import INSPECT_RECEDE
from gestures.modes import Mode

DT = 1 / 60


def test_new_field_rests_on_tree(rng):
    field = make_foliage_field(100, rng)
    assert len(field) == 100
    assert np.array_equal(field.positions, field.layout.tree)


def test_layout_is_read_only(rng):
    field = make_foliage_field(10, rng)
    with pytest.raises(ValueError):
        field.layout.tree[0, 0] = 1.0
    with pytest.raises(ValueError):
        field.layout.colors[0] = (1.0, 1.0, 1.0)


def test_converges_to_static_target(rng):
    field = make_foliage_field(100, rng)
    for _ in range(300):
        field.update(Mode.INSPECT, 0.0, DT)
    assert np.allclose(field.positions, field.layout.scatter * INSPECT_RECEDE, atol=1e-3)


def test_mode_switch_moves_by_damped_fraction(rng):
    field = make_foliage_field(100, rng)
    before = field.positions
    target = field.layout.scatter * INSPECT_RECEDE
    field.update(Mode.INSPECT, 0.0, DT)
    moved = field.positions - before
    assert np.allclose(moved, (target - before) * damp_factor(FOLIAGE_RATES.position, DT))


def test_zero_dt_holds_pose(rng):
    field = make_ribbon_field(50, rng)
    before = (field.positions, field.rotations, field.scales)
    field.update(Mode.SCATTER, 1.0, 0.0)
    assert np.array_equal(field.positions, before[0])
    assert np.allclose(field.rotations, before[1])
    assert np.array_equal(field.scales, before[2])


def test_colors_only_published_when_records_change(rng):
    photos = PhotoField(rng=rng)
    photos.append(["a.jpg"])
    first = photos.update(Mode.TREE, 0.0, DT)
    assert first.colors is not None and len(first.colors) == 1
    assert photos.update(Mode.TREE, DT, DT).colors is None
    photos.append(["b.jpg"])
    again = photos.update(Mode.TREE, 2 * DT, DT)
    assert len(again.colors) == 2


def test_frame_rotations_stay_unit(rng):
    field = make_ribbon_field(80, rng)
    for i in range(30):
        frame = field.update(Mode.TREE, i * DT, DT)
    assert frame.kind is ParticleKind.RIBBON
    assert len(frame) == 80
    assert np.allclose(np.linalg.norm(frame.rotations, axis=1), 1.0)


def test_photo_append_keeps_existing_records(rng):
    photos = PhotoField(rng=rng)
    photos.append(["a.jpg", "b.jpg"])
    for _ in range(20):
        photos.update(Mode.SCATTER, 0.0, DT)
    kept = photos.positions
    assert photos.append(["c.jpg"]) == 1
    assert photos.append([]) == 0
    assert len(photos) == 3
    assert np.array_equal(photos.positions[:2], kept)
    assert np.array_equal(photos.positions[2], photos.layout.tree[2])
    assert photos.image_refs == ["a.jpg", "b.jpg", "c.jpg"]


def test_focus_random_picks_one_photo(rng):
    photos = PhotoField(rng=rng)
    assert photos.focus_random() is None
    photos.append([f"{i}.png" for i in range(4)])
    idx = photos.focus_random(np.random.default_rng(5))
    assert 0 <= idx < 4
    records = [photos.record(i) for i in range(4)]
    assert all(isinstance(r, PhotoRecord) for r in records)
    assert sum(r.is_focused for r in records) == 1
    assert records[idx].image_ref == f"{idx}.png"
    photos.clear_focus()
    assert photos.focused is None
    assert not any(photos.record(i).is_focused for i in range(4))


def test_ribbon_record_carries_spiral_fields(rng):
    field = make_ribbon_field(10, rng)
    rec = field.record(3)
    assert rec.kind is ParticleKind.RIBBON
    assert rec.orbit_radius == pytest.approx(float(field.layout.radius[3]))
    assert 0.5 <= rec.trail_length <= 1.0
    foliage = make_foliage_field(10, rng).record(0)
    assert foliage.orbit_radius is None


def test_extend_keeps_optional_columns(rng):
    ribbons = make_ribbon_field(4, rng).layout
    merged = FieldLayout.empty().extend(ribbons)
    assert merged.angle is not None
    both = ribbons.extend(ribbons)
    assert len(both) == 8
    assert len(both.trail) == 8


def test_frame_is_a_frozen_snapshot(rng):
    field = make_ribbon_field(30, rng)
    frame = field.update(Mode.SCATTER, 0.0, DT)
    kept = (frame.positions.copy(), frame.rotations.copy(), frame.scales.copy())
    field.update(Mode.SCATTER, DT, DT)
    assert np.array_equal(frame.positions, kept[0])
    assert np.array_equal(frame.rotations, kept[1])
    assert np.array_equal(frame.scales, kept[2])

    for arr in (frame.positions, frame.rotations, frame.scales):
        with pytest.raises(ValueError):
            arr[:] = 999.0
    assert not np.any(field.positions == 999.0)
