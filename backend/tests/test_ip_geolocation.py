"""IP geolocation fallback client."""
from unittest.mock import Mock

import requests

from geocheckin.services.ip_geolocation_service import IPGeolocationService

def _http(payload=None, exc=None):
    http = Mock()
    if exc is not None:
        http.get.side_effect = exc
    else:
        response = Mock()
        response.json.return_value = payload
        response.raise_for_status.return_value = None
        http.get.return_value = response
    return http

def test_lookup_success():
    http = _http({'status': 'success', 'lat': 6.45, 'lon': 3.39})
    service = IPGeolocationService('http://geo.test/json/{ip}', timeout=2, http=http)

    assert service.lookup('102.89.1.1') == {'latitude': 6.45, 'longitude': 3.39}
    http.get.assert_called_once_with(
        'http://geo.test/json/102.89.1.1',
        params={'fields': 'lat,lon,status'},
        timeout=2
    )

def test_lookup_failure_status_returns_none():
    service = IPGeolocationService('http://geo.test/json/{ip}', http=_http({'status': 'fail'}))
    assert service.lookup('10.0.0.1') is None

def test_lookup_network_error_returns_none():
    http = _http(exc=requests.ConnectionError('unreachable'))
    service = IPGeolocationService('http://geo.test/json/{ip}', http=http)
    assert service.lookup('102.89.1.1') is None

def test_lookup_without_ip_makes_no_request():
    http = _http({'status': 'success', 'lat': 1, 'lon': 2})
    service = IPGeolocationService('http://geo.test/json/{ip}', http=http)
    assert service.lookup('') is None
    http.get.assert_not_called()

def test_client_ip_prefers_forwarded_header(app):
    with app.test_request_context(
        '/', headers={'X-Forwarded-For': '102.89.1.1, 10.0.0.1'},
        environ_base={'REMOTE_ADDR': '127.0.0.1'}
    ):
        from flask import request
        assert IPGeolocationService.client_ip(request) == '102.89.1.1'

def test_client_ip_falls_back_to_remote_addr(app):
    with app.test_request_context('/', environ_base={'REMOTE_ADDR': '127.0.0.1'}):
        from flask import request
        assert IPGeolocationService.client_ip(request) == '127.0.0.1'
