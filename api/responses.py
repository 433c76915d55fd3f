import json

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from api.errors import ApiError
from api.logger import logger

INTERNAL_ERROR = "Internal server error"


def success_response(data=None, status_code: int = 200) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=jsonable_encoder({'success': True, 'data': data}))


def error_response(error: Exception) -> JSONResponse:
    if isinstance(error, ApiError):
        body = {'success': False, 'error': error.message}
        if error.help:
            body['help'] = error.help
        return JSONResponse(status_code=error.status_code, content=body)
    return JSONResponse(status_code=500, content={'success': False, 'error': INTERNAL_ERROR})


async def read_json(request: Request):
    try:
        return json.loads(await request.body())
    except (ValueError, UnicodeDecodeError):
        raise ApiError("Invalid JSON body", 400)


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    logger.warning(f"{request.method} {request.url.path} rejected ({exc.status_code}): {exc.message}")
    return error_response(exc)


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"{request.method} {request.url.path} failed: {exc}")
    return error_response(exc)


def register_error_handlers(app: FastAPI):
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
