# main.py
import time
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import LOG_LEVEL, SERVICE_NAME, SERVICE_VERSION
from routes.markdown_routes import router as markdown_router
from routes.pdf_routes import router as pdf_router
from routes.platform_routes import router as platform_router
from routes.text_routes import router as text_router
from routes.word_routes import router as word_router
from services.errors import OperatorError

logging.basicConfig(level=LOG_LEVEL)

# body fields whose type errors have a dedicated error code
FIELD_ERROR_CODES = {
    "htmlTemplate": "MISSING_HTML_TEMPLATE",
    "htmlContent": "MISSING_HTML_CONTENT",
    "markdownTemplate": "MISSING_MARKDOWN_TEMPLATE",
    "markdownContent": "MISSING_MARKDOWN_CONTENT",
    "fileId": "MISSING_FILE_ID",
    "templateData": "INVALID_TEMPLATE_DATA",
    "lineEnding": "INVALID_LINE_ENDING",
}

# ------------------------------------------------------------------------------
# FastAPI app
# ------------------------------------------------------------------------------
app = FastAPI(title="Document Operators", version=SERVICE_VERSION)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(platform_router)
app.include_router(pdf_router)
app.include_router(word_router)
app.include_router(markdown_router)
app.include_router(text_router)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.monotonic()
    response = await call_next(request)
    logging.info(
        f"{request.method} {request.url.path} -> {response.status_code} "
        f"({int((time.monotonic() - started) * 1000)} ms)"
    )
    return response


@app.exception_handler(OperatorError)
async def operator_error_handler(request: Request, exc: OperatorError):
    if exc.status_code >= 500:
        logging.error(f"{request.url.path} failed [{exc.code}]: {exc.message}")
    else:
        logging.warning(f"{request.url.path} rejected [{exc.code}]: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_content())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    logging.info("== Pydantic Validation Errors ==")
    logging.info(errors)

    first = errors[0] if errors else {}
    loc = [str(part) for part in first.get("loc", ())]
    field = loc[1] if len(loc) > 1 and loc[0] == "body" else None
    code = FIELD_ERROR_CODES.get(field, "INVALID_REQUEST")
    location = ".".join(loc[1:]) if len(loc) > 1 else "body"
    message = f"Invalid request: {location}: {first.get('msg', 'validation error')}"

    details = [
        {"loc": [str(part) for part in e.get("loc", ())], "msg": e.get("msg"), "type": e.get("type")}
        for e in errors
    ]
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": message, "error": {"code": code, "details": details}},
    )


logging.info(f"{SERVICE_NAME} {SERVICE_VERSION} ready")
