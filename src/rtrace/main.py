import logging
import time
from typing import Optional

import numpy as np
import pygame

from .config import RenderConfig
from .logging_config import setup_logging
from .output import write_ppm
from .renderer import FrameBuffer, RenderJob, render_image, start_render

logger = logging.getLogger(__name__)


class Viewer:
    """
    Window showing a render while its rows arrive.
    """
    def __init__(self, config: Optional[RenderConfig] = None) -> None:
        """
        Initialize the viewer with given configuration.

        Parameters
        ----------
        config : RenderConfig, optional
            Configuration options, by default None (creates default config)
        """
        self.config = config if config is not None else RenderConfig()

        self.width = self.config.width
        self.height = self.config.height
        self.running = False
        self.screen = None
        self.clock = None

        self.settings = self.config.render_settings()
        self.scene = self.config.build_scene()
        self.camera = self.config.build_camera()

        self.frame = FrameBuffer(self.width, self.height)
        self.job: Optional[RenderJob] = None
        self.finished = False

    def initialize(self) -> None:
        """
        Set up pygame and initialize the display.
        """
        pygame.init()
        self.screen = pygame.display.set_mode((self.width, self.height))
        pygame.display.set_caption("rtrace")
        self.clock = pygame.time.Clock()
        self.running = True

    def handle_input(self) -> None:
        """
        Process window events. Quitting only stops the display loop.
        """
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self.running = False

    def update(self) -> bool:
        """
        Move every row that has arrived into the frame buffer.

        Returns
        -------
        bool
            True if at least one new row was received
        """
        rows = self.job.poll()
        for result in rows:
            self.frame.put(result)

        if not self.finished and self.frame.complete:
            self.finished = True
            logger.info("Render time: %.2f s", time.perf_counter() - self.job.started_at)
            if self.config.output_path:
                write_ppm(self.config.output_path, self.frame.to_array())
        return bool(rows)

    def render(self) -> None:
        """
        Copy the frame buffer to the screen.
        """
        image = self.frame.to_array()
        pygame.surfarray.blit_array(self.screen, np.transpose(image, (1, 0, 2)))
        pygame.display.flip()

    def main_loop(self) -> None:
        """
        Poll events and rows until the window is closed.
        """
        self.job = start_render(self.scene, self.camera, self.settings, self.config.seed)
        self.render()

        try:
            while self.running:
                self.handle_input()
                if self.update():
                    self.render()
                self.clock.tick(self.config.target_fps)
        finally:
            pygame.quit()

        if not self.finished:
            logger.info("Display closed with %d of %d rows received",
                        len(self.frame.rows_received), self.height)


def run_viewer() -> None:
    """
    Entry point to render the default scene into a window.
    """
    config = RenderConfig.from_env()
    setup_logging(config.log_level)
    viewer = Viewer(config)
    viewer.initialize()
    viewer.main_loop()


def render_to_file(path: str, config: Optional[RenderConfig] = None, progress: bool = True) -> np.ndarray:
    """
    Render without a window and save the image as PPM.

    Parameters
    ----------
    path : str
        Destination file
    config : RenderConfig, optional
        Configuration options, by default None (reads ``RTRACE_*`` variables)
    progress : bool, optional
        Show a progress bar, by default True

    Returns
    -------
    np.ndarray
        The rendered uint8 image, top row first
    """
    config = config if config is not None else RenderConfig.from_env()
    image = render_image(config.build_scene(), config.build_camera(), config.render_settings(),
                         seed=config.seed, progress=progress)
    write_ppm(path, image)
    return image
