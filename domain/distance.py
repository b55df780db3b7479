from pyproj import Geod

from domain.models import Coordinate

# WGS84 ellipsoid parameter setting
_geod = Geod(ellps="WGS84")

# Geodesic distance between two coordinates

def distance_m(a: Coordinate, b: Coordinate) -> float:

    """
    Calculate the distance between two coordinates in meters.
    """

    _, _, distance = _geod.inv(a.longitude, a.latitude, b.longitude, b.latitude)

    return(distance)
