# src/ui/kv.py
KV = r"""
#:kivy 2.3.0
#:import dp kivy.metrics.dp

<RootView>:
    # Full-window particle stage
    StageView:
        id: stage
        size_hint: 1, 1
        pos: root.pos

    # Gesture / mode badge, top centre
    GestureHUD:
        id: hud
        size_hint: None, None
        width: dp(360)
        height: dp(90)
        pos: root.center_x - self.width / 2, root.top - self.height - dp(16)

    # Camera preview, bottom-right, translucent
    VideoFeed:
        id: video
        size_hint: None, None
        width: dp(160)
        height: self.width * 3/4
        pos: root.right - self.width - dp(8), root.y + dp(8)
        opacity: 0.5
        fit_mode: "contain"
"""
