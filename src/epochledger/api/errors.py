from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from epochledger.runtime.errors import LedgerError

# LedgerError.code -> HTTP status. Anything unlisted is a client error.
_LEDGER_STATUS: Dict[str, int] = {
    "invalid_config": 500,
    "invalid_state": 409,
}


@dataclass
class ApiError(Exception):
    status_code: int
    code: str
    message: str
    details: Dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def bad_request(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> "ApiError":
        return ApiError(400, code, message, details or {})

    @staticmethod
    def forbidden(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> "ApiError":
        return ApiError(403, code, message, details or {})

    @staticmethod
    def not_found(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> "ApiError":
        return ApiError(404, code, message, details or {})

    @staticmethod
    def internal(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> "ApiError":
        return ApiError(500, code, message, details or {})

    @staticmethod
    def from_ledger(e: LedgerError) -> "ApiError":
        details = e.details if isinstance(e.details, dict) else ({"value": e.details} if e.details is not None else {})
        # amounts can exceed JS number precision; send them as strings
        for k in ("available", "requested", "allowance"):
            if k in details:
                details = {**details, k: str(details[k])}
        return ApiError(_LEDGER_STATUS.get(e.code, 400), e.reason, f"{e.code}:{e.reason}", details)

    def to_body(self) -> Dict[str, Any]:
        return {"ok": False, "error": {"code": self.code, "message": self.message, "details": self.details}}


async def _api_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, ApiError)
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


async def _ledger_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, LedgerError)
    err = ApiError.from_ledger(exc)
    return JSONResponse(status_code=err.status_code, content=err.to_body())


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, _api_error_handler)
    app.add_exception_handler(LedgerError, _ledger_error_handler)
