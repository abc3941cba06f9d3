from typing import Any, Dict, Optional


SCHEMA_VERSION = "v1"

ERROR_STATUS = {
    "VALIDATION_ERROR": 400,
    "INVALID_QUERY": 400,
    "NOT_FOUND": 404,
    "CANCELLED": 499,
    "PROVIDER_ERROR": 502,
    "PROVIDER_NOT_CONFIGURED": 502,
    "UPSTREAM_TIMEOUT": 504,
}


def ok_response(data: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "schema_version": SCHEMA_VERSION,
        "status": "ok",
        "data": data,
    }


def error_response(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return {
        "schema_version": SCHEMA_VERSION,
        "status": "error",
        "error": {
            "code": code,
            "message": message,
            "details": details or {},
        },
    }


def status_for_code(code: str) -> int:
    return ERROR_STATUS.get(code, 500)
