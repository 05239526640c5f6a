import numpy as np
import pytest

from choreography.records import ParticleKind
from choreography.scene import Choreography, NullSink
from conftest import hand_state
from gestures.classifiers import GestureSymbol
from gestures.hand_state import HandState
from gestures.modes import Mode

DT = 1 / 60


@pytest.fixture
def scene():
    return Choreography(foliage_count=60, ribbon_count=20, sink=NullSink(), rng=np.random.default_rng(11))


def _focused(scene):
    return [i for i in range(len(scene.photos)) if scene.photos.record(i).is_focused]


def test_open_open_pinch_reaches_inspect(scene):
    scene.add_photos(["a.jpg", "b.jpg", "c.jpg"])
    modes = [scene.handle(hand_state(g)) for g in (GestureSymbol.OPEN, GestureSymbol.OPEN, GestureSymbol.PINCH)]
    assert modes == [Mode.SCATTER, Mode.SCATTER, Mode.INSPECT]
    assert len(_focused(scene)) == 1


def test_pinch_without_photos_stays_in_tree(scene):
    assert scene.handle(hand_state(GestureSymbol.PINCH)) is Mode.TREE


def test_absent_hand_holds_mode(scene):
    scene.handle(hand_state(GestureSymbol.OPEN))
    assert scene.handle(HandState.absent()) is Mode.SCATTER


def test_fist_after_inspect_clears_focus(scene):
    scene.add_photos(["a.jpg", "b.jpg"])
    scene.handle(hand_state(GestureSymbol.PINCH))
    assert scene.handle(hand_state(GestureSymbol.FIST)) is Mode.TREE
    assert _focused(scene) == []


def test_tick_renders_every_field(scene):
    scene.add_photos(["a.jpg"])
    frames = scene.tick(DT)
    sink = scene.sink
    assert sink.count == 1
    assert sink.mode is Mode.TREE
    assert [f.kind for f in frames] == [ParticleKind.FOLIAGE, ParticleKind.RIBBON, ParticleKind.PHOTO]
    assert [len(f) for f in frames] == [60, 20, 1]
    assert scene.elapsed == pytest.approx(DT)


def test_focused_index_reaches_renderer(scene):
    scene.add_photos(["a.jpg", "b.jpg", "c.jpg"])
    scene.handle(hand_state(GestureSymbol.PINCH))
    photos_frame = scene.tick(DT)[2]
    assert photos_frame.focused == _focused(scene)[0]


def test_scatter_pointer_tilts_camera(scene):
    scene.handle(hand_state(GestureSymbol.OPEN, pointer=(1.0, 0.5)))
    for _ in range(30):
        scene.tick(DT)
    assert scene.sink.camera.rotation_y > 0.0


def test_negative_dt_is_ignored(scene):
    before = scene.foliage.positions
    scene.tick(-1.0)
    assert scene.elapsed == 0.0
    assert np.array_equal(scene.foliage.positions, before)
