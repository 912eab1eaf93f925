"""Pygame 2D visualization for the water-cycle simulation.

Draws the heightmap top-down, shaded from lowland green to highland
grey with water below sea level, and overlays clouds as translucent
white discs.  The simulation steps at a configurable tick rate while
the display refreshes at the Pygame frame rate, and stops stepping
once the run reaches its configured length.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

import numpy as np
import pygame

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from watercycle.simulation.engine import SimulationEngine

# Colour palette
_BG = (15, 15, 20)
_PANEL_TEXT = (200, 200, 200)

# Elevation colour ramps (low -> high)
_WATER_DEEP = np.array([10, 30, 90], dtype=np.float64)
_WATER_SHALLOW = np.array([40, 110, 180], dtype=np.float64)
_LAND_LO = np.array([60, 130, 50], dtype=np.float64)
_LAND_HI = np.array([200, 200, 190], dtype=np.float64)

_CLOUD_COLOUR = (255, 255, 255)


def elevation_colours(
    elevations: NDArray[np.float64],
    sea_level: float,
    min_height: float,
    max_height: float,
) -> NDArray[np.uint8]:
    """Map an elevation grid ``[y, x]`` to RGB colours ``[y, x, 3]``.

    Cells below sea level use the water ramp, the rest the land ramp.
    """
    below = elevations < sea_level
    sea_span = max(sea_level - min_height, 1e-9)
    land_span = max(max_height - sea_level, 1e-9)

    depth_t = np.clip((elevations - min_height) / sea_span, 0.0, 1.0)[..., None]
    land_t = np.clip((elevations - sea_level) / land_span, 0.0, 1.0)[..., None]

    water = _WATER_DEEP + depth_t * (_WATER_SHALLOW - _WATER_DEEP)
    land = _LAND_LO + land_t * (_LAND_HI - _LAND_LO)
    colours = np.where(below[..., None], water, land)
    return colours.astype(np.uint8)


class HeightmapRenderer:
    """Renders a SimulationEngine state into a Pygame window.

    Attributes:
        engine: The simulation engine to visualise.
        cell_size: Pixel size of each grid cell.
        screen: The Pygame display surface.
    """

    # Speed presets: ticks per second at 30 fps
    _SPEED_STEPS: ClassVar[list[float]] = [
        0.5,
        1.0,
        3.0,
        5.0,
        10.0,
        15.0,
        30.0,
        60.0,
        120.0,
    ]

    def __init__(
        self,
        engine: SimulationEngine,
        cell_size: int = 8,
        ticks_per_second: float = 10.0,
    ) -> None:
        """Initialise the renderer.

        Args:
            engine: The simulation engine to render.
            cell_size: Pixel width/height per grid cell.
            ticks_per_second: Simulation ticks per real-time second.
        """
        self.engine = engine
        self.cell_size = cell_size
        self.ticks_per_second = ticks_per_second
        self._speed_index = self._nearest_speed(ticks_per_second)
        self._tick_accumulator = 0.0

        w = engine.world.width * cell_size
        h = engine.world.height * cell_size
        self._panel_width = 240
        self._win_w = w + self._panel_width
        self._win_h = max(h, 360)

        pygame.init()
        self.screen = pygame.display.set_mode((self._win_w, self._win_h))
        pygame.display.set_caption("Water cycle")
        self.clock = pygame.time.Clock()
        self.font = pygame.font.SysFont("monospace", 14)
        self.running = True
        self.paused = False

    def _nearest_speed(self, tps: float) -> int:
        """Return the index of the closest speed preset."""
        best = 0
        best_diff = abs(self._SPEED_STEPS[0] - tps)
        for i, s in enumerate(self._SPEED_STEPS):
            diff = abs(s - tps)
            if diff < best_diff:
                best, best_diff = i, diff
        return best

    def run(self, fps: int = 30) -> None:
        """Main loop: handle events, step sim, render.

        Args:
            fps: Target frames per second.
        """
        while self.running:
            dt = self.clock.tick(fps) / 1000.0  # seconds elapsed
            self._handle_events()
            if not self.paused and not self.engine.finished:
                self._tick_accumulator += self.ticks_per_second * dt
                steps = int(self._tick_accumulator)
                self._tick_accumulator -= steps
                for _ in range(steps):
                    if self.engine.finished:
                        break
                    self.engine.step()
            self._draw()

        pygame.quit()

    def _handle_events(self) -> None:
        """Process Pygame input events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self.running = False
                elif event.key == pygame.K_SPACE:
                    self.paused = not self.paused
                elif event.key in (pygame.K_PLUS, pygame.K_EQUALS):
                    self._speed_index = min(
                        len(self._SPEED_STEPS) - 1,
                        self._speed_index + 1,
                    )
                    self.ticks_per_second = self._SPEED_STEPS[self._speed_index]
                elif event.key == pygame.K_MINUS:
                    self._speed_index = max(0, self._speed_index - 1)
                    self.ticks_per_second = self._SPEED_STEPS[self._speed_index]

    def _draw(self) -> None:
        """Render one frame."""
        self.screen.fill(_BG)
        self._draw_terrain()
        self._draw_clouds()
        self._draw_info_panel()
        pygame.display.flip()

    def _draw_terrain(self) -> None:
        """Blit the shaded heightmap scaled up to the cell size."""
        config = self.engine.config
        colours = elevation_colours(
            self.engine.elevations(),
            config.sea_level,
            config.min_height,
            config.max_height,
        )
        # Pygame surfaces are indexed [x, y]
        surface = pygame.surfarray.make_surface(colours.transpose(1, 0, 2))
        size = (
            self.engine.world.width * self.cell_size,
            self.engine.world.height * self.cell_size,
        )
        scaled = pygame.transform.scale(surface, size)
        self.screen.blit(scaled, (0, 0))

    def _draw_clouds(self) -> None:
        """Draw each cloud as a translucent disc sized by its mass."""
        cs = self.cell_size
        overlay = pygame.Surface(
            (self.engine.world.width * cs, self.engine.world.height * cs),
            pygame.SRCALPHA,
        )
        for (x, y), cloud in self.engine.clouds:
            radius = max(1, min(cs, int(cs * (0.3 + cloud.mass))))
            alpha = int(min(40 + cloud.mass * 200, 180))
            pygame.draw.circle(
                overlay,
                (*_CLOUD_COLOUR, alpha),
                (x * cs + cs // 2, y * cs + cs // 2),
                radius,
            )
        self.screen.blit(overlay, (0, 0))

    def _draw_info_panel(self) -> None:
        """Draw a stats panel on the right side of the window."""
        panel_x = self.engine.world.width * self.cell_size + 10
        y = 10
        stats = self.engine.stats()

        if self.engine.finished:
            status = "DONE"
        else:
            status = "PAUSED" if self.paused else "RUNNING"

        lines = [
            f"Tick: {stats.tick}/{self.engine.config.simulation_length}",
            f"Speed: {self.ticks_per_second:.1f} t/s",
            status,
            "",
            "--- Water ---",
            f"Clouds: {stats.clouds}",
            f"Cloud mass: {stats.cloud_mass:.2f}",
            f"Runoff: {stats.runoff:.2f}",
            f"Groundwater: {stats.groundwater:.1f}",
            f"Rainfall: {stats.total_precipitation:.2f}",
            f"Lost at edge: {stats.water_lost:.2f}",
            "",
            "--- Terrain ---",
            f"Min: {stats.min_elevation:.2f}",
            f"Max: {stats.max_elevation:.2f}",
            f"Mean: {stats.mean_elevation:.2f}",
            f"Vegetation: {stats.vegetation:.1f}",
            "",
            "--- Controls ---",
            "SPACE: pause",
            "+/-: speed",
            "ESC: quit",
        ]

        for line in lines:
            surf = self.font.render(line, True, _PANEL_TEXT)
            self.screen.blit(surf, (panel_x, y))
            y += 18
