# src/main.py
from kivy.app import App
from kivy.core.window import Window
from kivy.lang import Builder
from kivy.factory import Factory as F
from kivy.clock import Clock
from kivy.logger import Logger

import os

# --- Project imports ---
try:
    from ui.kv import KV
except Exception as e:
    raise ImportError(
        "Failed to import KV from ui.kv. Ensure ui/kv.py defines a variable named KV (str)."
    ) from e

try:
    from ui.widgets import RootView, StageView, VideoFeed, GestureHUD
except Exception as e:
    raise ImportError(
        "Failed to import one or more widgets from ui.widgets. "
        "Please ensure all classes exist and import side-effects don't fail."
    ) from e

from choreography.scene import Choreography
from assets.photo_library import PhotoLibrary

# These may fail; we’ll log and keep the animation running without gestures.
try:
    from hand_tracking.hands import HandTracker
except Exception as e:
    HandTracker = None
    Logger.warning(f"HandTracker import failed; continuing without tracker. Error: {e}")

try:
    from hand_tracking.camera import VideoController
    from hand_tracking.gesture_tracker import GestureTracker
except Exception as e:
    VideoController = None
    GestureTracker = None
    Logger.warning(f"VideoController import failed; continuing without camera. Error: {e}")


PHOTO_POLL_SECONDS = 2.0
MODEL_ERROR_TEXT = "Hand model failed to load - gestures are disabled."


def _safe_register(name, cls):
    try:
        F.register(name, cls=cls)
    except Exception as e:
        Logger.debug(f"Factory.register('{name}') skipped (likely already registered): {e}")


def _photo_dir(base_dir):
    """Prefer ./photos next to where the app is launched, else src/photos."""
    cwd_dir = os.path.join(os.getcwd(), "photos")
    if os.path.isdir(cwd_dir):
        return cwd_dir
    return os.path.join(base_dir, "photos")


class LumiTreeApp(App):
    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.controller = None
        self.tracker = None
        self.scene = None
        self.library = None
        self._applied_seq = 0

    def build(self):
        # Register widgets for KV lookups
        _safe_register("RootView", RootView)
        _safe_register("StageView", StageView)
        _safe_register("VideoFeed", VideoFeed)
        _safe_register("GestureHUD", GestureHUD)

        try:
            Builder.load_string(KV)
        except Exception:
            Logger.exception("Failed to load KV; check for syntax errors or missing properties.")
            raise

        root = RootView()

        try:
            Window.fullscreen = 'auto'
        except Exception as e:
            Logger.warning(f"Could not set fullscreen mode: {e}")

        required_ids = ["stage", "hud", "video"]
        missing = [w for w in required_ids if w not in root.ids]
        if missing:
            msg = f"The following required widget ids are missing in your KV: {', '.join(missing)}."
            Logger.critical(msg)
            raise RuntimeError(msg)

        base_dir = os.path.dirname(os.path.abspath(__file__))
        self.scene = Choreography(sink=root.ids.stage)
        self.library = PhotoLibrary(_photo_dir(base_dir))

        # Gesture tracking (optional: the tree animates without it)
        if GestureTracker is not None and HandTracker is not None:
            model_path = os.path.join(base_dir, "models", "hand_landmarker.task")
            self.tracker = GestureTracker(
                lambda: HandTracker(model_asset_path=model_path, running_mode="VIDEO")
            )
            error = self.tracker.take_load_error()
            if error is not None:
                root.ids.hud.show_error(MODEL_ERROR_TEXT)

        if VideoController is not None and self.tracker is not None and not self.tracker.failed:
            try:
                self.controller = VideoController(self.tracker, cam_index=0)
                Clock.schedule_once(lambda dt: self._start_controller_safe(), 0)
            except Exception as e:
                Logger.exception(f"Failed to initialize VideoController: {e}")
                self.controller = None
        else:
            Logger.warning("Camera tracking not available; running without gestures.")

        Clock.schedule_interval(self._tick, 0)
        Clock.schedule_interval(self._poll_photos, PHOTO_POLL_SECONDS)
        Clock.schedule_once(self._poll_photos, 0)

        Window.bind(on_key_down=self._on_key_down)
        return root

    def _start_controller_safe(self):
        if self.controller is None:
            Logger.warning("Controller is None; skipping start.")
            return
        try:
            self.controller.start()
            Logger.info("VideoController started.")
        except Exception as e:
            Logger.exception(f"VideoController.start() failed: {e}")

    def _tick(self, dt):
        ids = self.root.ids
        if self.controller is not None:
            seq, state = self.controller.latest
            if state is not None and seq != self._applied_seq:
                self._applied_seq = seq
                mode = self.scene.handle(state)
                ids.hud.update_status(state.gesture.value, mode.value, state.detected)
            if self.controller.preview is not None:
                ids.video.set_frame(self.controller.preview)
        self.scene.tick(dt)

    def _poll_photos(self, dt):
        new = self.library.poll()
        if new:
            self.scene.add_photos(new)
            self.root.ids.stage.set_photos(self.scene.photos.image_refs)

    def _on_key_down(self, window, key, scancode, codepoint, modifiers):
        # F11 toggles fullscreen
        if key == 293:
            Window.fullscreen = False if Window.fullscreen else 'auto'
            return True
        # ESC exits fullscreen
        if key == 27 and Window.fullscreen:
            Window.fullscreen = False
            return True
        return False

    def on_stop(self):
        try:
            if self.controller is not None:
                self.controller.stop()
            elif self.tracker is not None:
                self.tracker.close()
        except Exception as e:
            Logger.debug(f"Issue stopping controller on app shutdown: {e}")


if __name__ == "__main__":
    LumiTreeApp().run()
