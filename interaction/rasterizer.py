"""
Reference Rasterizer for the LOP Globe.

Turns the current session state into an RGB image. Each pixel goes through

    pixel -> zoom -> normalized (x, y) -> projection.to_lat_lon
          -> world rotation -> evaluate -> color

`render` runs the chain on whole numpy arrays; `fragment_color` runs it for
a single point and gives the same colors.

The rasterizer owns canvas sizing (height = round(width / ratio)), the zoom
transform and the background sampler; the geometry and scoring it calls are
pure, so a pass only needs one snapshot of the world matrix.
"""

from dataclasses import dataclass
from pathlib import Path
import time
from typing import Optional, Tuple, Union
import numpy as np
from numpy.typing import NDArray

import matplotlib.image as mpimg
from matplotlib.colors import to_hex, to_rgb

from common.constants import D90, D180, D360, RenderDefaults
from common.logging_config import get_logger
from common.types import GeoCoord, Mat3, Color, Background
from geospatial.projections import get_projection
from geospatial.sphere_math import transform_coord, transform_coord_batch
from interaction.view_state import ViewController
from lop_engine.models import ParsedInput
from lop_engine.scoring import OFF_GLOBE_COLOR, evaluate, evaluate_batch

logger = get_logger(__name__)

RGBImage = NDArray[np.float64]  # Shape: (H, W, 3), values in [0, 1]


@dataclass
class RenderConfig:
    """Configuration for a render pass.
    
    Attributes
    ----------
    width : int
        Canvas width in pixels; the height follows from the projection ratio.
    projection : str
        Registry name of the projection.
    off_globe_color : str
        Color outside the canvas's normalized square or off the globe.
    background_color : str
        Color where no LOP matches and no map image is supplied.
    """
    width: int = RenderDefaults.CANVAS_WIDTH
    projection: str = "orthographic"
    off_globe_color: Color = OFF_GLOBE_COLOR
    background_color: Color = RenderDefaults.BACKGROUND_COLOR


def canvas_size(width: int, ratio: float) -> Tuple[int, int]:
    """(width, height) of a canvas for a projection aspect ratio."""
    return width, int(round(width / ratio))


@dataclass
class ZoomTransform:
    """Scale and pan applied to the canvas before normalization.
    
    A canvas point at fraction (u, v) of the canvas (v measured upward)
    shows the normalized point ((u - pan_x) / scale, (v - pan_y) / scale).
    """
    scale: float = 1.0
    pan_x: float = 0.0
    pan_y: float = 0.0
    
    @staticmethod
    def _canvas_fraction(
        px: float, py: float, width: int, height: int
    ) -> Tuple[float, float]:
        # Pixel centres; canvas rows run top to bottom, normalized y bottom to top
        return (px + 0.5) / width, 1.0 - (py + 0.5) / height
    
    def to_normal(
        self, px: float, py: float, width: int, height: int
    ) -> Tuple[float, float]:
        """Normalized surface point shown at pixel (px, py); accepts arrays."""
        u, v = self._canvas_fraction(px, py, width, height)
        return (u - self.pan_x) / self.scale, (v - self.pan_y) / self.scale
    
    def zoom(self, factor: float, cx: float, cy: float, width: int, height: int) -> None:
        """Scale by `factor` keeping the point under pixel (cx, cy) fixed."""
        if factor <= 0:
            raise ValueError(f"Zoom factor must be positive, got {factor}")
        u, v = self._canvas_fraction(cx, cy, width, height)
        nx, ny = self.to_normal(cx, cy, width, height)
        self.scale *= factor
        self.pan_x = u - nx * self.scale
        self.pan_y = v - ny * self.scale
    
    def reset(self) -> None:
        self.scale, self.pan_x, self.pan_y = 1.0, 0.0, 0.0


class SolidBackground:
    """Background of a single color."""
    
    def __init__(self, color: Color):
        self.color = color
    
    def __call__(self, coord: GeoCoord) -> Color:
        return self.color


class ImageBackground:
    """Background sampled from an equirectangular map image.
    
    Parameters
    ----------
    pixels : ndarray
        (H, W, 3) or (H, W, 4) image, either uint8 or floats in [0, 1], with
        the north pole along the top row and longitude -180° on the left.
    """
    
    def __init__(self, pixels: NDArray):
        pixels = np.asarray(pixels)
        if pixels.ndim != 3 or pixels.shape[2] < 3:
            raise ValueError(f"Expected an (H, W, 3|4) image, got shape {pixels.shape}")
        if np.issubdtype(pixels.dtype, np.integer):
            pixels = pixels / 255.0
        self.pixels = np.asarray(pixels[:, :, :3], dtype=np.float64)
        self.height, self.width = self.pixels.shape[:2]
    
    def sample_batch(self, lat: NDArray, lon: NDArray) -> NDArray:
        """RGB values (..., 3) of the map at arrays of coordinates in radians."""
        nx = (np.asarray(lon, dtype=np.float64) + D180) / D360
        ny = (np.asarray(lat, dtype=np.float64) + D90) / D180
        row = np.clip(((1 - ny) * self.height).astype(int), 0, self.height - 1)
        col = np.clip((nx * self.width).astype(int), 0, self.width - 1)
        return self.pixels[row, col]
    
    def sample(self, coord: GeoCoord) -> Tuple[float, float, float]:
        r, g, b = self.sample_batch(np.array(coord.lat), np.array(coord.lon))
        return float(r), float(g), float(b)
    
    def __call__(self, coord: GeoCoord) -> Color:
        return to_hex(self.sample(coord))


def load_map_image(path: Union[str, Path]) -> ImageBackground:
    """Read an equirectangular map image from disk."""
    return ImageBackground(mpimg.imread(str(path)))


class Rasterizer:
    """Renders the LOP globe to an RGB array.
    
    Parameters
    ----------
    view : ViewController
        Session state providing the projection and world orientation.
    config : RenderConfig, optional
        Render settings.
    """
    
    def __init__(self, view: ViewController, config: Optional[RenderConfig] = None):
        self.view = view
        self.config = config or RenderConfig(projection=view.projection.name)
        self.zoom = ZoomTransform()
        self._logger = get_logger("Rasterizer")
    
    @classmethod
    def from_config(cls, config: RenderConfig) -> 'Rasterizer':
        """Build a rasterizer and a fresh view for a configured projection."""
        return cls(ViewController(get_projection(config.projection)), config)
    
    @property
    def size(self) -> Tuple[int, int]:
        return canvas_size(self.config.width, self.view.projection.ratio)
    
    def fragment_color(
        self,
        x: float,
        y: float,
        world: Mat3,
        parsed: ParsedInput,
        background: Background
    ) -> Color:
        """Color of one normalized point for a given world snapshot."""
        if not (0.0 <= x <= 1.0 and 0.0 <= y <= 1.0):
            return self.config.off_globe_color
        coord = transform_coord(self.view.projection.to_lat_lon(x, y), world)
        if not coord.is_valid:
            return self.config.off_globe_color
        return evaluate(coord, parsed.lops, parsed.min_err, background)
    
    def render(
        self,
        parsed: ParsedInput,
        background: Optional[Background] = None
    ) -> RGBImage:
        """Render one frame.
        
        Parameters
        ----------
        parsed : ParsedInput
            LOPs and min-err rule.
        background : str or callable, optional
            Background color or sampler; defaults to the configured color.
            
        Returns
        -------
        ndarray
            (H, W, 3) RGB image with values in [0, 1].

        Notes
        -----
        Geometry and scoring run on (H, W) arrays. Only a generic callable
        background is sampled point by point, and only where it shows.
        """
        if background is None:
            background = self.config.background_color
        if isinstance(background, SolidBackground):
            background = background.color
        width, height = self.size
        world = self.view.snapshot()
        image = np.zeros((height, width, 3), dtype=np.float64)

        start = time.perf_counter()
        px, py = np.meshgrid(np.arange(width), np.arange(height))
        x, y = self.zoom.to_normal(px, py, width, height)
        lat, lon = transform_coord_batch(
            *self.view.projection.to_lat_lon_batch(x, y), world
        )
        outside = ~((x >= 0.0) & (x <= 1.0) & (y >= 0.0) & (y <= 1.0))
        lat[outside] = np.nan
        lon[outside] = np.nan

        colors = evaluate_batch(lat, lon, parsed.lops, parsed.min_err)
        colors[~(np.isfinite(lat) & np.isfinite(lon))] = self.config.off_globe_color

        pending = np.equal(colors, None).astype(bool)
        if isinstance(background, ImageBackground):
            image[pending] = background.sample_batch(lat[pending], lon[pending])
        elif callable(background):
            for row, col in zip(*np.nonzero(pending)):
                colors[row, col] = background(GeoCoord(lat=lat[row, col], lon=lon[row, col]))
        else:
            colors[pending] = background

        painted = ~np.equal(colors, None).astype(bool)
        if np.any(painted):
            palette, index = np.unique(colors[painted].astype(str), return_inverse=True)
            image[painted] = np.array([to_rgb(c) for c in palette])[index.ravel()]
        elapsed = time.perf_counter() - start
        
        self._logger.info(
            f"Rendered {width}x{height} frame with {len(parsed.lops)} LOPs "
            f"in {elapsed:.2f}s"
        )
        return image


def save_frame(image: RGBImage, path: Union[str, Path]) -> None:
    """Write a rendered frame to an image file (format from the extension)."""
    mpimg.imsave(str(path), np.clip(image, 0.0, 1.0))
    logger.info(f"Saved frame to {path}")
