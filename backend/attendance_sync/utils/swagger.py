"""Swagger/OpenAPI configuration for the application."""
from flask_swagger_ui import get_swaggerui_blueprint

# Swagger UI configuration
SWAGGER_URL = '/api/docs'
API_URL = '/api/swagger.json'

SECURED = [{"bearerAuth": []}]


def get_swagger_blueprint(app_name: str):
    """Create and return swagger UI blueprint."""
    return get_swaggerui_blueprint(
        SWAGGER_URL,
        API_URL,
        config={
            'app_name': app_name,
            'defaultModelsExpandDepth': -1,
            'docExpansion': 'list',
            'filter': True,
            'supportedSubmitMethods': ['get', 'post', 'put', 'delete'],
            'validatorUrl': None,
        }
    )


def _ref(name):
    return {"$ref": f"#/components/schemas/{name}"}


def _json_body(schema):
    return {"required": True, "content": {"application/json": {"schema": schema}}}


def _responses(ok_description, *error_codes):
    responses = {"200": {"description": ok_description}}
    for code in error_codes:
        responses[str(code)] = {"description": "Error", "content": {
            "application/json": {"schema": _ref("Error")}
        }}
    return responses


def _path_param(name):
    return {"name": name, "in": "path", "required": True, "schema": {"type": "string", "format": "uuid"}}


def _query_param(name, schema):
    return {"name": name, "in": "query", "required": False, "schema": schema}


DATE_RANGE = [
    _query_param("startDate", {"type": "string", "format": "date"}),
    _query_param("endDate", {"type": "string", "format": "date"}),
]


def generate_swagger_spec(version: str = "1.0.0"):
    """Generate OpenAPI/Swagger specification."""
    return {
        "openapi": "3.0.0",
        "info": {
            "title": "Offline Attendance Sync API",
            "description": "Backend for offline-first attendance capture: faculty record "
                           "attendance on a device and sync batches when connectivity returns.",
            "version": version
        },
        "servers": [
            {"url": "http://127.0.0.1:5000", "description": "Development server"}
        ],
        "components": {
            "securitySchemes": {
                "bearerAuth": {"type": "http", "scheme": "bearer", "bearerFormat": "JWT"}
            },
            "schemas": {
                "Error": {
                    "type": "object",
                    "properties": {
                        "success": {"type": "boolean", "example": False},
                        "error": {"type": "string"},
                        "code": {"type": "string"},
                        "status_code": {"type": "integer"},
                        "details": {"type": "array", "items": {"type": "object"}}
                    }
                },
                "AttendanceRecord": {
                    "type": "object",
                    "required": ["studentId", "facultyId", "sectionId", "timestamp",
                                 "status", "captureMethod"],
                    "properties": {
                        "id": {"type": "integer", "description": "Client-local record id"},
                        "studentId": {"type": "string", "format": "uuid"},
                        "facultyId": {"type": "string", "format": "uuid"},
                        "sectionId": {"type": "string", "format": "uuid"},
                        "timestamp": {"type": "string", "format": "date-time"},
                        "status": {"type": "string", "enum": ["present", "absent"]},
                        "captureMethod": {"type": "string", "enum": ["ml", "manual"]}
                    }
                },
                "SyncError": {
                    "type": "object",
                    "properties": {
                        "recordId": {"type": "integer"},
                        "error": {"type": "string"},
                        "errorType": {"type": "string",
                                      "enum": ["shape", "referential", "temporal", "store"]},
                        "retryable": {"type": "boolean"},
                        "retryCount": {"type": "integer"},
                        "timestamp": {"type": "string", "format": "date-time"}
                    }
                },
                "SyncResult": {
                    "type": "object",
                    "properties": {
                        "totalRecords": {"type": "integer"},
                        "syncedRecords": {"type": "integer"},
                        "failedRecords": {"type": "integer"},
                        "errors": {"type": "array", "items": _ref("SyncError")}
                    }
                },
                "Student": {
                    "type": "object",
                    "properties": {
                        "rollNumber": {"type": "string"},
                        "name": {"type": "string"},
                        "sectionId": {"type": "string", "format": "uuid"},
                        "isActive": {"type": "boolean"}
                    }
                },
                "Section": {
                    "type": "object",
                    "properties": {
                        "name": {"type": "string"},
                        "grade": {"type": "string"},
                        "facultyId": {"type": "string", "format": "uuid"}
                    }
                }
            }
        },
        "paths": {
            "/api/auth/login": {
                "post": {
                    "tags": ["Auth"],
                    "summary": "Faculty login",
                    "requestBody": _json_body({
                        "type": "object",
                        "properties": {"username": {"type": "string"}, "password": {"type": "string"}}
                    }),
                    "responses": _responses("Access and refresh tokens", 400, 401, 429)
                }
            },
            "/api/auth/refresh": {
                "post": {"tags": ["Auth"], "summary": "Refresh tokens", "security": SECURED,
                         "responses": _responses("New token pair", 401)}
            },
            "/api/auth/profile": {
                "get": {"tags": ["Auth"], "summary": "Current faculty", "security": SECURED,
                        "responses": _responses("Faculty profile", 401)}
            },
            "/api/auth/logout": {
                "post": {"tags": ["Auth"], "summary": "Logout", "security": SECURED,
                         "responses": _responses("Logged out", 401)}
            },
            "/api/auth/verify": {
                "post": {"tags": ["Auth"], "summary": "Verify access token", "security": SECURED,
                         "responses": _responses("Token is valid", 401)}
            },
            "/api/attendance/sync": {
                "post": {
                    "tags": ["Attendance"],
                    "summary": "Sync a batch of offline attendance records",
                    "security": SECURED,
                    "requestBody": _json_body({
                        "type": "object",
                        "properties": {"records": {
                            "type": "array", "minItems": 1, "maxItems": 100,
                            "items": _ref("AttendanceRecord")
                        }}
                    }),
                    "responses": _responses("Per-record sync result", 400, 401, 429, 503)
                }
            },
            "/api/attendance/student/{studentId}": {
                "get": {
                    "tags": ["Attendance"],
                    "summary": "Attendance history for a student",
                    "security": SECURED,
                    "parameters": [_path_param("studentId")] + DATE_RANGE + [
                        _query_param("limit", {"type": "integer", "default": 50}),
                        _query_param("offset", {"type": "integer", "default": 0})
                    ],
                    "responses": _responses("History page", 400, 401, 404)
                }
            },
            "/api/attendance/section/{sectionId}/statistics": {
                "get": {"tags": ["Attendance"], "summary": "Per-student statistics",
                        "security": SECURED,
                        "parameters": [_path_param("sectionId")] + DATE_RANGE,
                        "responses": _responses("Statistics", 400, 404)}
            },
            "/api/attendance/section/{sectionId}/summary": {
                "get": {"tags": ["Attendance"], "summary": "Section summary",
                        "security": SECURED,
                        "parameters": [_path_param("sectionId")] + DATE_RANGE,
                        "responses": _responses("Summary", 400, 404)}
            },
            "/api/students/": {
                "post": {"tags": ["Students"], "summary": "Create student", "security": SECURED,
                         "requestBody": _json_body(_ref("Student")),
                         "responses": _responses("Created", 400, 404, 409)}
            },
            "/api/students/section/{sectionId}": {
                "get": {"tags": ["Students"], "summary": "Students of a section",
                        "security": SECURED, "parameters": [_path_param("sectionId")],
                        "responses": _responses("Students", 404)}
            },
            "/api/students/section/{sectionId}/bulk": {
                "post": {
                    "tags": ["Students"], "summary": "Bulk import from CSV/Excel",
                    "security": SECURED, "parameters": [_path_param("sectionId")],
                    "requestBody": {"content": {"multipart/form-data": {"schema": {
                        "type": "object", "properties": {"file": {"type": "string", "format": "binary"}}
                    }}}},
                    "responses": _responses("Per-row import report", 400, 404)
                }
            },
            "/api/students/{studentId}": {
                "get": {"tags": ["Students"], "summary": "Get student", "security": SECURED,
                        "parameters": [_path_param("studentId")],
                        "responses": _responses("Student", 404)},
                "put": {"tags": ["Students"], "summary": "Update student", "security": SECURED,
                        "parameters": [_path_param("studentId")],
                        "requestBody": _json_body(_ref("Student")),
                        "responses": _responses("Updated", 400, 404, 409)},
                "delete": {"tags": ["Students"], "summary": "Deactivate student", "security": SECURED,
                           "parameters": [_path_param("studentId")],
                           "responses": _responses("Deactivated", 404)}
            },
            "/api/sections/": {
                "get": {"tags": ["Sections"], "summary": "All sections", "security": SECURED,
                        "responses": _responses("Sections")},
                "post": {"tags": ["Sections"], "summary": "Create section", "security": SECURED,
                         "requestBody": _json_body(_ref("Section")),
                         "responses": _responses("Created", 400, 404, 409)}
            },
            "/api/sections/faculty/{facultyId}/sections": {
                "get": {"tags": ["Sections"], "summary": "Sections of a faculty member",
                        "security": SECURED, "parameters": [_path_param("facultyId")],
                        "responses": _responses("Sections", 404)}
            },
            "/api/sections/{sectionId}": {
                "get": {"tags": ["Sections"], "summary": "Section with students", "security": SECURED,
                        "parameters": [_path_param("sectionId")],
                        "responses": _responses("Section", 404)},
                "put": {"tags": ["Sections"], "summary": "Update section", "security": SECURED,
                        "parameters": [_path_param("sectionId")],
                        "requestBody": _json_body(_ref("Section")),
                        "responses": _responses("Updated", 400, 404, 409)},
                "delete": {"tags": ["Sections"], "summary": "Delete section", "security": SECURED,
                           "parameters": [_path_param("sectionId")],
                           "responses": _responses("Deleted", 404, 409)}
            },
            "/api/sections/{sectionId}/update-student-count": {
                "post": {"tags": ["Sections"], "summary": "Recompute student count",
                         "security": SECURED, "parameters": [_path_param("sectionId")],
                         "responses": _responses("Count", 404)}
            },
            "/api/health": {
                "get": {"tags": ["System"], "summary": "Health check",
                        "responses": _responses("Service is healthy")}
            }
        }
    }
