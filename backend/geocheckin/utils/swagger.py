# backend/geocheckin/utils/swagger.py
"""Swagger/OpenAPI configuration for the application."""

# Swagger UI configuration
SWAGGER_URL = '/api/docs'
API_URL = '/api/swagger.json'

def _json_body(schema: dict) -> dict:
    return {
        "required": True,
        "content": {"application/json": {"schema": schema}}
    }

def _ref(name: str) -> dict:
    return {"content": {"application/json": {"schema": {"$ref": f"#/components/schemas/{name}"}}}}

def generate_swagger_spec():
    """Generate OpenAPI/Swagger specification."""
    secured = [{"bearerAuth": []}]

    return {
        "openapi": "3.0.0",
        "info": {
            "title": "Geofenced Check-In API",
            "description": "Lecture attendance with GPS geofence verification",
            "version": "1.0.0"
        },
        "servers": [
            {"url": "http://127.0.0.1:5000/api", "description": "Development server"}
        ],
        "components": {
            "securitySchemes": {
                "bearerAuth": {
                    "type": "http",
                    "scheme": "bearer",
                    "bearerFormat": "JWT"
                }
            },
            "schemas": {
                "Location": {
                    "type": "object",
                    "properties": {
                        "id": {"type": "string"},
                        "owner_id": {"type": "string"},
                        "name": {"type": "string"},
                        "latitude": {"type": "number", "minimum": -90, "maximum": 90},
                        "longitude": {"type": "number", "minimum": -180, "maximum": 180},
                        "radius": {"type": "integer", "minimum": 1}
                    }
                },
                "CheckInRequest": {
                    "type": "object",
                    "required": ["sessionId", "latitude", "longitude"],
                    "properties": {
                        "sessionId": {"type": "string"},
                        "latitude": {"type": "number"},
                        "longitude": {"type": "number"},
                        "deviceInfo": {"type": "object"}
                    }
                },
                "CheckInResponse": {
                    "type": "object",
                    "properties": {
                        "success": {"type": "boolean"},
                        "message": {"type": "string"},
                        "data": {
                            "type": "object",
                            "properties": {
                                "attendanceId": {"type": "string"},
                                "distance": {"type": "integer"},
                                "checkedInAt": {"type": "string", "format": "date-time"}
                            }
                        },
                        "error": {
                            "type": "string",
                            "enum": [
                                "coordinates_out_of_range", "location_data_unavailable",
                                "session_not_found", "session_not_started", "session_expired",
                                "not_enrolled", "already_checked_in", "no_location_bound",
                                "location_too_far", "storage_unavailable"
                            ]
                        }
                    }
                },
                "LocationVerifyResponse": {
                    "type": "object",
                    "properties": {
                        "verified": {"type": "boolean"},
                        "method": {"type": "string", "enum": ["gps", "ip", "none"]},
                        "distance": {"type": "integer"},
                        "error": {"type": "string"},
                        "approximateLocation": {
                            "type": "object",
                            "properties": {
                                "latitude": {"type": "number"},
                                "longitude": {"type": "number"}
                            }
                        }
                    }
                },
                "Error": {
                    "type": "object",
                    "properties": {
                        "error": {"type": "boolean"},
                        "message": {"type": "string"},
                        "status_code": {"type": "integer"}
                    }
                },
                "Success": {
                    "type": "object",
                    "properties": {
                        "error": {"type": "boolean", "default": False},
                        "message": {"type": "string"},
                        "data": {"type": "object"}
                    }
                }
            }
        },
        "paths": {
            "/auth/login": {
                "post": {
                    "tags": ["Authentication"],
                    "summary": "User login",
                    "requestBody": _json_body({
                        "type": "object",
                        "required": ["email", "password"],
                        "properties": {
                            "email": {"type": "string", "format": "email"},
                            "password": {"type": "string"}
                        }
                    }),
                    "responses": {
                        "200": {"description": "Login successful", **_ref("Success")},
                        "401": {"description": "Invalid credentials", **_ref("Error")}
                    }
                }
            },
            "/locations/": {
                "post": {
                    "tags": ["Locations"],
                    "summary": "Create a location",
                    "security": secured,
                    "requestBody": _json_body({"$ref": "#/components/schemas/Location"}),
                    "responses": {
                        "201": {"description": "Location created", **_ref("Success")},
                        "400": {"description": "Validation error", **_ref("Error")}
                    }
                }
            },
            "/sessions/": {
                "post": {
                    "tags": ["Sessions"],
                    "summary": "Create a check-in session",
                    "security": secured,
                    "requestBody": _json_body({
                        "type": "object",
                        "required": ["course_code", "location_id"],
                        "properties": {
                            "course_code": {"type": "string"},
                            "course_name": {"type": "string"},
                            "location_id": {"type": "string"},
                            "duration_minutes": {"type": "integer"},
                            "starts_at": {"type": "string", "format": "date-time"},
                            "ends_at": {"type": "string", "format": "date-time"},
                            "auto_close_minutes": {"type": "integer"}
                        }
                    }),
                    "responses": {
                        "201": {"description": "Session created", **_ref("Success")}
                    }
                }
            },
            "/attendance/checkin": {
                "post": {
                    "tags": ["Attendance"],
                    "summary": "Check in to a session",
                    "security": secured,
                    "requestBody": _json_body({"$ref": "#/components/schemas/CheckInRequest"}),
                    "responses": {
                        "200": {"description": "Checked in", **_ref("CheckInResponse")},
                        "400": {"description": "Invalid input or not eligible", **_ref("CheckInResponse")},
                        "401": {"description": "Not authenticated", **_ref("Error")},
                        "404": {"description": "Session not found", **_ref("CheckInResponse")},
                        "500": {"description": "Storage failure, safe to retry", **_ref("CheckInResponse")}
                    }
                }
            },
            "/attendance/verify-location": {
                "post": {
                    "tags": ["Attendance"],
                    "summary": "Dry-run location verification",
                    "security": secured,
                    "requestBody": _json_body({
                        "type": "object",
                        "required": ["sessionId"],
                        "properties": {
                            "sessionId": {"type": "string"},
                            "latitude": {"type": "number"},
                            "longitude": {"type": "number"}
                        }
                    }),
                    "responses": {
                        "200": {"description": "Verification result", **_ref("LocationVerifyResponse")}
                    }
                }
            }
        }
    }
