# backend/geocheckin/services/location_service.py
"""Location registry: lecturer-owned geofence centers."""
import logging
from typing import Dict, List, Optional

from flask import current_app

from geocheckin import db
from geocheckin.models.location import Location
from geocheckin.models.user import User
from geocheckin.services.gps_service import GPSService
from geocheckin.utils.validators import ValidationError, Validator

logger = logging.getLogger(__name__)

class LocationService:
    """Service for managing locations."""
    
    UPDATABLE_FIELDS = ('name', 'latitude', 'longitude', 'radius')
    
    @staticmethod
    def _clean(data: Dict, partial: bool = False) -> Dict:
        """Validate location fields; partial=True validates only what is present."""
        if not partial:
            check = Validator.validate_required_fields(data, ['name', 'latitude', 'longitude'])
            if not check['is_valid']:
                raise ValidationError("Missing required fields", check['errors'])
        
        cleaned = {}
        
        if 'name' in data:
            check = Validator.validate_name(data['name'])
            if not check['is_valid']:
                raise ValidationError(check['errors'][0], check['errors'])
            cleaned['name'] = data['name'].strip()
        
        if 'latitude' in data or 'longitude' in data:
            if partial and not ('latitude' in data and 'longitude' in data):
                raise ValidationError("latitude and longitude must be updated together")
            is_valid, message = GPSService.validate_coordinates(data['latitude'], data['longitude'])
            if not is_valid:
                raise ValidationError(message)
            cleaned['latitude'] = float(data['latitude'])
            cleaned['longitude'] = float(data['longitude'])
        
        if data.get('radius') is not None:
            cleaned['radius'] = Validator.coerce_positive_int(data['radius'], 'radius')
        elif not partial:
            cleaned['radius'] = current_app.config['DEFAULT_GEOFENCE_RADIUS_METERS']
        
        return cleaned
    
    @staticmethod
    def create(owner: User, data: Dict) -> Location:
        """Create a location owned by the given lecturer."""
        fields = LocationService._clean(data)
        
        location = Location(owner_id=owner.id, **fields)
        db.session.add(location)
        db.session.commit()
        
        logger.info("Location %s (%s) created by %s", location.id, location.name, owner.id)
        return location
    
    @staticmethod
    def list_for_owner(owner: User) -> List[Location]:
        return (
            Location.query
            .filter_by(owner_id=owner.id)
            .order_by(Location.created_at.desc())
            .all()
        )
    
    @staticmethod
    def get_owned(location_id: str, user: User) -> Optional[Location]:
        """Fetch a location visible to the user (owner or admin)."""
        location = db.session.get(Location, location_id)
        if location is None:
            return None
        if location.owner_id != user.id and not user.is_admin():
            return None
        return location
    
    @staticmethod
    def update(location: Location, data: Dict) -> Location:
        unknown = [key for key in data if key not in LocationService.UPDATABLE_FIELDS]
        if unknown:
            raise ValidationError(f"Cannot update fields: {', '.join(sorted(unknown))}")
        
        fields = LocationService._clean(data, partial=True)
        return location.update(**fields)
    
    @staticmethod
    def delete(location: Location) -> None:
        """Delete unconditionally; sessions that pointed here fail closed."""
        location_id = location.id
        location.delete()
        logger.info("Location %s deleted", location_id)
