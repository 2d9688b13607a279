from fastapi import Request


def get_request_id(request: Request) -> str:
    rid = getattr(request.state, "request_id", None)
    return str(rid) if rid else "-"


def error_response_payload(
    request: Request,
    *,
    code: str,
    message: str,
    details=None,
) -> dict:
    return {
        "success": False,
        "error": {
            "code": code,
            "message": message,
            "details": details,
        },
        "request_id": get_request_id(request),
    }


def success_response_payload(
    request: Request,
    *,
    data=None,
    meta: dict | None = None,
    message: str | None = None,
    success: bool = True,
) -> dict:
    payload = {
        "success": success,
        "data": data,
        "meta": meta or {},
        "request_id": get_request_id(request),
    }
    if message is not None:
        payload["message"] = message
    return payload
