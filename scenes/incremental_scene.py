"""scenes/incremental_scene.py — The one playable screen.

Top-down view of the portal and the automaton rings.

Controls:
    LMB on portal       +1 currency (manual income)
    LMB on a ring       buy one automaton of that variant
    1-8                 buy by chain position
    F5                  reload tuning.toml

Everything shown is read from the economy snapshot; every action goes
through ``logic.costs``.
"""

from __future__ import annotations
import math
import pygame

from components import Automaton, InterfaceState, PortalState, Transform
from core.app import App
from core.events import EventBus
from core.save import SaveBackend
from core.scene import Scene
from core.tuning import get as _tun, reload as _reload_tuning
from data.variants import AUTOMATONS, CATALOG, Variant
from logic.costs import click_portal, purchase
from logic.feedback import FeedbackPool
from logic.interface import hud_text, total_rate, variant_snapshot
from logic.ledger import Ledger
from logic.tick import setup_world, tick_systems

_BG = (0, 0, 0)
_GROUND = (34, 34, 34)
_RING = (70, 70, 70)
_RING_HOVER = (130, 130, 130)
_PORTAL = (255, 0, 0)
_UNIT = (200, 190, 170)
_ORB = (255, 80, 60)
_LOCKED = (110, 110, 110)
_AFFORD = (120, 220, 120)
_TEXT = (255, 255, 255)

_RING_PICK_TOLERANCE = 0.45   # world units either side of a ring
_PORTAL_RADIUS = 1.0          # world units
_FLASH_TIME = 0.25            # s, purchase confirmation

_HUD_ELEMENTS = (
    "hovered_name_quantity_text",
    "hovered_rate_total_text",
    "hovered_cost_text",
)


class IncrementalScene(Scene):
    def __init__(self, backend: SaveBackend):
        self.backend = backend
        self._flash: dict[Variant, float] = {}

    # ── lifecycle ────────────────────────────────────────────────────

    def on_enter(self, app: App):
        if app.world.res(Ledger) is None:
            setup_world(app.world, self.backend)

    def on_exit(self, app: App):
        ledger = app.world.res(Ledger)
        if ledger:
            ledger.save()

    # ── coordinates ──────────────────────────────────────────────────

    def _ppu(self) -> float:
        return float(_tun("display", "px_per_unit", 14.0))

    def _to_screen(self, app: App, x: float, z: float) -> tuple[int, int]:
        w, h = app.screen.get_size()
        ppu = self._ppu()
        return int(w / 2 + x * ppu), int(h / 2 + z * ppu)

    def _to_world(self, app: App, sx: int, sy: int) -> tuple[float, float]:
        w, h = app.screen.get_size()
        ppu = self._ppu()
        return (sx - w / 2) / ppu, (sy - h / 2) / ppu

    def _pick(self, app: App, pos: tuple[int, int]) -> Variant | None:
        """Variant under the cursor: the portal, a ring, or nothing."""
        x, z = self._to_world(app, *pos)
        dist = math.hypot(x, z)
        if dist <= _PORTAL_RADIUS:
            return Variant.PORTAL
        best: Variant | None = None
        best_gap = _RING_PICK_TOLERANCE
        for variant in AUTOMATONS:
            gap = abs(dist - CATALOG[variant].distance_from_origin)
            if gap <= best_gap:
                best, best_gap = variant, gap
        return best

    # ── input ────────────────────────────────────────────────────────

    def handle_event(self, event: pygame.event.Event, app: App):
        state = app.world.res(InterfaceState)
        if event.type == pygame.MOUSEMOTION:
            state.hovered = self._pick(app, event.pos)
            app.world.res(PortalState).hovered = state.hovered is Variant.PORTAL
        elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            target = self._pick(app, event.pos)
            if target is Variant.PORTAL:
                click_portal(app.world.res(Ledger), app.world.res(EventBus))
            elif target is not None:
                self._buy(app, target)
        elif event.type == pygame.KEYDOWN:
            if event.key == pygame.K_F5:
                _reload_tuning()
            elif pygame.K_1 <= event.key <= pygame.K_8:
                self._buy(app, AUTOMATONS[event.key - pygame.K_1])

    def _buy(self, app: App, variant: Variant):
        if purchase(app.world.res(Ledger), variant, bus=app.world.res(EventBus)):
            self._flash[variant] = _FLASH_TIME

    # ── update / draw ────────────────────────────────────────────────

    def update(self, dt: float, app: App):
        tick_systems(app.world, dt)
        for variant in list(self._flash):
            self._flash[variant] -= dt
            if self._flash[variant] <= 0:
                del self._flash[variant]

    def draw(self, surface: pygame.Surface, app: App):
        surface.fill(_BG)
        world = app.world
        ledger = world.res(Ledger)
        state = world.res(InterfaceState)
        ppu = self._ppu()
        cx, cy = self._to_screen(app, 0.0, 0.0)

        pygame.draw.circle(surface, _GROUND, (cx, cy),
                           int(CATALOG[AUTOMATONS[-1]].distance_from_origin * ppu + 2 * ppu))

        for variant in AUTOMATONS:
            radius = int(CATALOG[variant].distance_from_origin * ppu)
            color = _RING_HOVER if state.hovered is variant else _RING
            if variant in self._flash:
                color = _AFFORD
            pygame.draw.circle(surface, color, (cx, cy), radius, 1)

        for _eid, unit, tf in world.query(Automaton, Transform):
            sx, sy = self._to_screen(app, tf.position.x, tf.position.z)
            size = max(2, int(tf.scale * ppu * 0.8))
            pygame.draw.circle(surface, _UNIT, (sx, sy), size)
            # Short tick toward the centre shows facing
            fx = sx + int(math.cos(tf.facing) * size)
            fy = sy + int(math.sin(tf.facing) * size)
            pygame.draw.line(surface, _BG, (sx, sy), (fx, fy), 1)

        pool = world.res(FeedbackPool)
        if pool:
            for tok in pool.active_tokens():
                sx, sy = self._to_screen(app, tok.position.x, tok.position.z)
                pygame.draw.circle(surface, _ORB, (sx, sy), 3)

        portal = world.res(PortalState)
        pygame.draw.circle(surface, _PORTAL, (cx, cy),
                           int(_PORTAL_RADIUS * ppu * portal.scale))

        self._draw_hud(surface, app, ledger, state)

    def _draw_hud(self, surface: pygame.Surface, app: App,
                  ledger: Ledger, state: InterfaceState):
        w, h = surface.get_size()
        app.draw_text(surface, hud_text("score_text", ledger, state),
                      w // 2, 6, _TEXT, font=app.font_lg, center=True)
        app.draw_text(surface, f"{total_rate(ledger):.2f}/s", w // 2, 34,
                      _LOCKED, center=True)

        slot = w // len(_HUD_ELEMENTS)
        for i, name in enumerate(_HUD_ELEMENTS):
            text = hud_text(name, ledger, state)
            if text:
                app.draw_text(surface, text, slot * i + slot // 2, h - 24,
                              _TEXT, center=True)

        y = 8
        for n, variant in enumerate(AUTOMATONS, start=1):
            snap = variant_snapshot(ledger, variant)
            if not snap.unlocked:
                color = _LOCKED
            elif snap.affordable:
                color = _AFFORD
            else:
                color = _TEXT
            app.draw_text(surface, f"{n} {variant} x{snap.owned}  ${snap.cost}",
                          8, y, color)
            y += 18
