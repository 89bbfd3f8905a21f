# File: backend/geocheckin/api/locations.py
"""Location Registry API - Lecturer only."""
import logging
from flask import Blueprint, request, g
from geocheckin import db
from geocheckin.services.location_service import LocationService
from geocheckin.utils.decorators import lecturer_required
from geocheckin.utils.helpers import success_response, error_response
from geocheckin.utils.validators import ValidationError

logger = logging.getLogger(__name__)

locations_bp = Blueprint('locations', __name__)

@locations_bp.route('/', methods=['GET'])
@lecturer_required
def get_locations():
    """List the caller's locations, newest first."""
    locations = LocationService.list_for_owner(g.current_user)
    return success_response(data=[location.to_dict() for location in locations])

@locations_bp.route('/', methods=['POST'])
@lecturer_required
def create_location():
    """Create a named location with a check-in radius."""
    try:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return error_response("Request body must be JSON", 400)
        
        location = LocationService.create(g.current_user, data)
        
        return success_response(
            data=location.to_dict(),
            message="Location created successfully"
        ), 201
        
    except ValidationError as e:
        return error_response(e.message, 400, e.errors)
    except Exception:
        db.session.rollback()
        logger.error("Error creating location", exc_info=True)
        return error_response("Error creating location", 500)

@locations_bp.route('/<location_id>', methods=['GET'])
@lecturer_required
def get_location(location_id):
    """Get single location details."""
    location = LocationService.get_owned(location_id, g.current_user)
    if location is None:
        return error_response("Location not found", 404)
    
    return success_response(data=location.to_dict())

@locations_bp.route('/<location_id>', methods=['PUT'])
@lecturer_required
def update_location(location_id):
    """Update name, coordinates or radius."""
    try:
        location = LocationService.get_owned(location_id, g.current_user)
        if location is None:
            return error_response("Location not found", 404)
        
        data = request.get_json(silent=True)
        if not isinstance(data, dict) or not data:
            return error_response("No fields to update", 400)
        
        location = LocationService.update(location, data)
        
        return success_response(
            data=location.to_dict(),
            message="Location updated successfully"
        )
        
    except ValidationError as e:
        db.session.rollback()
        return error_response(e.message, 400, e.errors)
    except Exception:
        db.session.rollback()
        logger.error("Error updating location %s", location_id, exc_info=True)
        return error_response("Error updating location", 500)

@locations_bp.route('/<location_id>', methods=['DELETE'])
@lecturer_required
def delete_location(location_id):
    """Delete a location. Sessions bound to it can no longer be checked into."""
    try:
        location = LocationService.get_owned(location_id, g.current_user)
        if location is None:
            return error_response("Location not found", 404)
        
        LocationService.delete(location)
        
        return success_response(message="Location deleted successfully")
        
    except Exception:
        db.session.rollback()
        logger.error("Error deleting location %s", location_id, exc_info=True)
        return error_response("Error deleting location", 500)
