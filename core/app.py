"""
core/app.py — Pygame application shell

Handles the window, main loop, and scene stack.  Scenes do the work;
this file only pumps events, calls ``update(dt)`` and ``draw()`` on the
top scene, and flips the display.

    app = App(title="Fever Dream Incremental", width=960, height=640)
    app.push_scene(IncrementalScene(backend))
    app.run()
"""

from __future__ import annotations
import pygame
from core.scene import Scene
from core.ecs import World


class App:
    def __init__(self, title: str = "Fever Dream Incremental",
                 width: int = 960, height: int = 640, fps: int = 60):
        pygame.init()
        self.size = (width, height)
        self.screen = pygame.display.set_mode((width, height), pygame.RESIZABLE)
        pygame.display.set_caption(title)
        self.clock = pygame.time.Clock()
        self.running = True
        self.fps = fps
        self.dt = 0.0

        # Scene stack; only the top scene is active
        self._scenes: list[Scene] = []

        # The ECS world, shared across all scenes
        self.world = World()

        self.font = pygame.font.SysFont("monospace", 16)
        self.font_lg = pygame.font.SysFont("monospace", 24)

    # -- Scene management --

    @property
    def scene(self) -> Scene | None:
        return self._scenes[-1] if self._scenes else None

    def push_scene(self, scene: Scene):
        if self._scenes:
            self._scenes[-1].on_exit(self)
        self._scenes.append(scene)
        scene.on_enter(self)

    def pop_scene(self):
        if self._scenes:
            self._scenes[-1].on_exit(self)
            self._scenes.pop()
        if self._scenes:
            self._scenes[-1].on_enter(self)

    # -- Main loop --

    def run(self):
        while self.running:
            self.dt = self.clock.tick(self.fps) / 1000.0

            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    self.running = False
                elif event.type == pygame.VIDEORESIZE:
                    self.size = (event.w, event.h)
                    self.screen = pygame.display.set_mode(
                        self.size, pygame.RESIZABLE)
                elif self.scene:
                    self.scene.handle_event(event, self)

            if self.scene:
                self.scene.update(self.dt, self)
                self.scene.draw(self.screen, self)

            pygame.display.flip()

        # Leaving the loop pops every scene so they get a chance to save
        while self._scenes:
            self.pop_scene()
        pygame.quit()

    # -- Convenience --

    def draw_text(self, surface: pygame.Surface, text: str, x: int, y: int,
                  color=(255, 255, 255), font=None, center: bool = False):
        """Quick text draw. Returns the rect for layout chaining."""
        f = font or self.font
        img = f.render(text, True, color)
        if center:
            x -= img.get_width() // 2
        return surface.blit(img, (x, y))
