"""Lecturer-owned named locations used as geofence centers."""
from geocheckin import db
from geocheckin.models.base import BaseModel

class Location(BaseModel):
    """A named point plus check-in radius."""
    
    __tablename__ = 'locations'
    
    owner_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    
    # WGS84 decimal degrees
    latitude = db.Column(db.Float, nullable=False)
    longitude = db.Column(db.Float, nullable=False)
    
    # Meters
    radius = db.Column(db.Integer, nullable=False, default=50)
    
    owner = db.relationship('User', backref=db.backref('locations', lazy='dynamic'))
    
    def __repr__(self) -> str:
        return f'<Location {self.name}>'
