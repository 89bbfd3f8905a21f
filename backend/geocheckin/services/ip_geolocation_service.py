"""Approximate location lookup from a client IP address.

Low confidence by nature, so results are only ever used to let a check-in
through when GPS is missing and the session's rules allow it.
"""
import logging
from typing import Dict, Optional

import requests
from flask import Request

logger = logging.getLogger(__name__)

class IPGeolocationService:
    """Thin client for an ip-api.com compatible endpoint."""
    
    def __init__(self, url_template: str, timeout: float = 3.0, http=None):
        self.url_template = url_template
        self.timeout = timeout
        self.http = http or requests
    
    @staticmethod
    def client_ip(request: Request) -> Optional[str]:
        """First hop of X-Forwarded-For, then X-Real-IP, then the socket peer."""
        forwarded = request.headers.get('X-Forwarded-For')
        if forwarded:
            return forwarded.split(',')[0].strip() or None
        return request.headers.get('X-Real-IP') or request.remote_addr
    
    def lookup(self, ip: str) -> Optional[Dict[str, float]]:
        """Return {'latitude', 'longitude'} or None when the lookup fails."""
        if not ip:
            return None
        
        url = self.url_template.format(ip=ip)
        try:
            response = self.http.get(
                url,
                params={'fields': 'lat,lon,status'},
                timeout=self.timeout
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning("IP geolocation lookup failed for %s: %s", ip, e)
            return None
        
        if data.get('status') != 'success':
            logger.info("IP geolocation returned no result for %s", ip)
            return None
        
        return {
            'latitude': data.get('lat'),
            'longitude': data.get('lon')
        }
