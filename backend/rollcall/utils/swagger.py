"""Swagger/OpenAPI configuration for the application."""

# Swagger UI configuration
SWAGGER_URL = '/api/docs'
API_URL = '/api/swagger.json'

ERROR_CODES = [
    'InvalidCredential', 'BatchNotFound', 'BatchInactive', 'NotEnrolled',
    'InvalidToken', 'TokenBatchMismatch', 'TokenExpired', 'Transient',
    'ValidationError', 'Forbidden'
]


def _query(name: str, required: bool = False, schema_type: str = 'string', fmt: str = None) -> dict:
    schema = {"type": schema_type}
    if fmt:
        schema["format"] = fmt
    return {"name": name, "in": "query", "required": required, "schema": schema}


def _body(required: list, properties: dict) -> dict:
    return {
        "required": True,
        "content": {
            "application/json": {
                "schema": {"type": "object", "required": required, "properties": properties}
            }
        }
    }


def _responses(ok: str, *codes: int) -> dict:
    responses = {"200": {"description": ok}}
    for code in codes:
        responses[str(code)] = {"$ref": "#/components/responses/Error"}
    return responses


def generate_swagger_spec():
    """Generate OpenAPI/Swagger specification."""
    instructor = [{"bearerAuth": []}]
    string = {"type": "string"}

    return {
        "openapi": "3.0.0",
        "info": {
            "title": "Rollcall API",
            "description": "Self-service enrollment and daily QR attendance for class batches",
            "version": "1.0.0"
        },
        "servers": [
            {"url": "/", "description": "Current server"}
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
                "Error": {
                    "type": "object",
                    "properties": {
                        "error": {"type": "boolean"},
                        "code": {"type": "string", "enum": ERROR_CODES},
                        "message": {"type": "string"},
                        "status_code": {"type": "integer"}
                    }
                },
                "CheckIn": {
                    "type": "object",
                    "properties": {
                        "status": {"type": "string", "enum": ["marked", "already_marked"]},
                        "timestamp": {"type": "string", "format": "date-time"},
                        "date": {"type": "string", "format": "date"},
                        "batchId": string
                    }
                }
            },
            "responses": {
                "Error": {
                    "description": "Error",
                    "content": {"application/json": {"schema": {"$ref": "#/components/schemas/Error"}}}
                }
            }
        },
        "paths": {
            "/api/auth/login": {
                "post": {
                    "tags": ["Auth"], "summary": "Instructor login",
                    "requestBody": _body(["email", "password"], {"email": string, "password": string}),
                    "responses": _responses("Access token", 400, 401)
                }
            },
            "/api/auth/session": {
                "post": {
                    "tags": ["Auth"], "summary": "Exchange a Google ID token for a student session",
                    "requestBody": _body(["credential"], {"credential": string}),
                    "responses": _responses("Session token", 401, 503)
                }
            },
            "/api/batches": {
                "post": {
                    "tags": ["Batches"], "summary": "Create batch", "security": instructor,
                    "requestBody": _body(["institution"], {"institution": string, "name": string}),
                    "responses": _responses("Batch with links", 400, 401, 403)
                },
                "get": {
                    "tags": ["Batches"], "summary": "List batches", "security": instructor,
                    "parameters": [_query("institution"), _query("active", schema_type="boolean")],
                    "responses": _responses("Batches", 401, 403)
                }
            },
            "/api/batches/{batchId}": {
                "get": {
                    "tags": ["Batches"], "summary": "Batch details",
                    "parameters": [{"name": "batchId", "in": "path", "required": True, "schema": string}],
                    "responses": _responses("Batch", 404)
                }
            },
            "/api/enroll": {
                "post": {
                    "tags": ["Students"], "summary": "Enroll in a batch (idempotent)",
                    "requestBody": _body(["batchId"], {"batchId": string, "credential": string}),
                    "responses": _responses("Enrollment", 401, 404, 410)
                }
            },
            "/api/token": {
                "get": {
                    "tags": ["Attendance"], "summary": "Daily token for a batch (idempotent)",
                    "security": instructor,
                    "parameters": [_query("batchId", True), _query("date", fmt="date")],
                    "responses": _responses("Token", 400, 401, 403, 404, 410)
                }
            },
            "/api/checkin": {
                "post": {
                    "tags": ["Attendance"], "summary": "Check in with today's token",
                    "requestBody": _body(["batchId", "token"], {
                        "batchId": string, "token": string, "credential": string
                    }),
                    "responses": _responses("Marked or already marked", 400, 401, 403, 404, 410, 503)
                }
            },
            "/api/history": {
                "get": {
                    "tags": ["Attendance"], "summary": "Attendance history, newest first",
                    "parameters": [
                        _query("batchId", True), _query("limit", schema_type="integer"), _query("subjectId")
                    ],
                    "responses": _responses("History", 400, 401)
                }
            },
            "/api/reports/attendance": {
                "get": {
                    "tags": ["Reports"], "summary": "Attendance list", "security": instructor,
                    "parameters": [
                        _query("date", fmt="date"), _query("startDate", fmt="date"), _query("endDate", fmt="date"),
                        _query("batchId"), _query("institution")
                    ],
                    "responses": _responses("Records", 400, 401, 403)
                }
            },
            "/api/reports/calendar": {
                "get": {
                    "tags": ["Reports"], "summary": "Per-day counts for a month", "security": instructor,
                    "parameters": [
                        _query("year", True, "integer"), _query("month", True, "integer")
                    ],
                    "responses": _responses("Counts", 400, 401, 403)
                }
            }
        }
    }
