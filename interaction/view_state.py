"""
Interactive View State.

The globe's current orientation is a rotation matrix ("world") mapping
view-space vectors (what a projection draws) to geographic vectors. It is
owned here, by the session, and handed to every render pass as an explicit
snapshot rather than kept as a module-level global.

Drag Model
----------
On press, the view coordinate under the cursor and the world at that instant
are remembered. Each move builds the rotation carrying the current view
coordinate back onto the pressed one and composes it on the right:

    world = world_at_press · roll(p_press ← p_now)

so the geographic point grabbed at press stays under the cursor. Rotations
compose in the previous world's frame, and each move restarts from the
world at press, so an in-progress drag never accumulates drift.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from common.logging_config import get_logger
from common.types import GeoCoord, Mat3
from common.units import to_degrees
from geospatial.projections import ProjectionAdapter
from geospatial.sphere_math import build_roll_mat, transform_coord
from geospatial.vector_math import mat3, mat3_mul


@dataclass
class DragState:
    """What was under the cursor when a drag started.
    
    Attributes
    ----------
    view_coord : GeoCoord
        Pressed point in view space (before the world rotation).
    world : ndarray
        World orientation at press time.
    """
    view_coord: GeoCoord
    world: Mat3


class ViewController:
    """Owner of the world orientation and translator of pointer gestures.
    
    Parameters
    ----------
    projection : ProjectionAdapter
        Projection used to turn normalized canvas points into view
        coordinates.
        
    Examples
    --------
    >>> from geospatial.projections import orthographic
    >>> view = ViewController(orthographic)
    >>> view.begin_drag(0.5, 0.5)
    True
    >>> view.drag_to(0.6, 0.5)
    True
    >>> view.end_drag()
    """
    
    def __init__(self, projection: ProjectionAdapter):
        self.projection = projection
        self._world: Mat3 = mat3()
        self._drag: Optional[DragState] = None
        self._logger = get_logger("ViewController")
    
    @property
    def world(self) -> Mat3:
        return self._world
    
    @property
    def dragging(self) -> bool:
        return self._drag is not None
    
    def snapshot(self) -> Mat3:
        """Copy of the world matrix for one consistent render pass."""
        return self._world.copy()
    
    def reset(self) -> None:
        """Return to the initial orientation and drop any drag in progress."""
        self._world = mat3()
        self._drag = None
    
    def view_coord(self, x: float, y: float) -> GeoCoord:
        """View-space coordinate under a normalized canvas point."""
        return self.projection.to_lat_lon(x, y)
    
    def normal_to_coord(
        self,
        x: float,
        y: float,
        world: Optional[Mat3] = None
    ) -> GeoCoord:
        """Geographic coordinate under a normalized canvas point.
        
        Parameters
        ----------
        x, y : float
            Normalized canvas coordinates.
        world : ndarray, optional
            Orientation to use instead of the current one.
            
        Returns
        -------
        GeoCoord
            The coordinate, or Invalid off the globe.
        """
        if world is None:
            world = self._world
        return transform_coord(self.view_coord(x, y), world)
    
    def coord_at(self, x: float, y: float) -> Optional[Tuple[float, float]]:
        """Latitude and longitude in degrees under a point (double-click readout).
        
        Returns None when the point is off the globe.
        """
        coord = self.normal_to_coord(x, y)
        if not coord.is_valid:
            return None
        return to_degrees(coord.lat), to_degrees(coord.lon)
    
    def begin_drag(self, x: float, y: float) -> bool:
        """Start a drag at a normalized point.
        
        Returns
        -------
        bool
            False (and no drag starts) when the point is off the globe.
        """
        coord = self.view_coord(x, y)
        if not coord.is_valid:
            return False
        self._drag = DragState(view_coord=coord, world=self._world.copy())
        return True
    
    def drag_to(self, x: float, y: float) -> bool:
        """Update the world for the cursor now being at a normalized point.
        
        Returns
        -------
        bool
            True when the world changed and the view should re-render.
        """
        if self._drag is None:
            return False
        coord = self.view_coord(x, y)
        if not coord.is_valid:
            return False
        roll = build_roll_mat(self._drag.view_coord, coord)
        self._world = mat3_mul(self._drag.world, roll)
        return True
    
    def end_drag(self) -> None:
        if self._drag is not None:
            centre = transform_coord(GeoCoord(lat=0.0, lon=0.0), self._world)
            lat, lon = centre.to_degrees()
            self._logger.debug(f"Drag finished, view centre at {lat:.2f}°, {lon:.2f}°")
        self._drag = None
