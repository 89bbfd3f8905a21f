"""GPS distance and coordinate checks."""
import math
from typing import Tuple

from geocheckin.utils.validators import Validator

EARTH_RADIUS_METERS = 6371000

class GPSService:
    """Service for GPS and location verification."""
    
    @staticmethod
    def calculate_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
        """Calculate great-circle distance between two GPS points in meters.
        
        Haversine formula. Inputs are not validated here; callers range-check
        with ``validate_coordinates`` first.
        """
        lat1_rad = math.radians(lat1)
        lat2_rad = math.radians(lat2)
        delta_lat = math.radians(lat2 - lat1)
        delta_lon = math.radians(lon2 - lon1)
        
        a = (math.sin(delta_lat / 2) ** 2 +
             math.cos(lat1_rad) * math.cos(lat2_rad) *
             math.sin(delta_lon / 2) ** 2)
        c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
        
        return EARTH_RADIUS_METERS * c
    
    @staticmethod
    def is_within_radius(distance: float, radius: float) -> bool:
        return distance <= radius
    
    @staticmethod
    def validate_coordinates(latitude, longitude) -> Tuple[bool, str]:
        """Range-check a coordinate pair. Returns (is_valid, error_message)."""
        if not Validator.is_number(latitude) or not Validator.is_number(longitude):
            return False, "Latitude and longitude must be numbers"
        
        if latitude < -90 or latitude > 90 or longitude < -180 or longitude > 180:
            return False, "Latitude must be between -90 and 90, longitude between -180 and 180"
        
        return True, ""
