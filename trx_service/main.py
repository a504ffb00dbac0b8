from fastapi import FastAPI, Depends, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from datetime import timedelta
import logging

# Use relative imports
from . import schemas, logic, config
from .validation import AuthorizationError, RequestValidator

# Basic logging setup
logging.basicConfig(level=config.LOG_LEVEL, format='%(asctime)s [%(levelname)s] %(name)s: %(message)s')
logger = logging.getLogger(__name__)

# Built once; the directory is never modified while serving
partner_directory = config.load_partner_directory(config.ALLOWED_PARTNERS)
request_validator = RequestValidator(
    partner_directory,
    expiry_window=timedelta(seconds=config.EXPIRY_WINDOW_SECONDS),
)


def get_validator() -> RequestValidator:
    """FastAPI dependency returning the shared request validator."""
    return request_validator


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Transaction Service starting up...")
    logger.info(f"Listening on {config.APP_HOST}:{config.APP_PORT}")
    logger.info(f"Loaded {len(partner_directory)} allowed partner(s)")
    yield
    logger.info("Transaction Service shutting down...")

app = FastAPI(
    title="Transaction Service",
    description="Authenticates partner transaction submissions and calculates discounts.",
    version="0.1.0",
    lifespan=lifespan
)


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    message = schemas.describe_validation_errors(exc.errors())
    logger.warning(f"Rejected malformed request body: {message}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=schemas.ErrorResponse(result_message=message).model_dump(by_alias=True),
    )


@app.get("/health", tags=["Monitoring"], summary="Health Check")
async def health_check():
    """Basic health check endpoint."""
    return {"status": "healthy"}


@app.post(
    "/api/submittrxmessage",
    response_model=schemas.TrxResponse,
    responses={status.HTTP_400_BAD_REQUEST: {"model": schemas.ErrorResponse}},
    tags=["Transactions"],
    summary="Submit Partner Transaction"
)
def submit_trx_message(
    request_data: schemas.TrxRequest,
    validator: RequestValidator = Depends(get_validator)
):
    """
    Authenticates the partner request (password format, timestamp, signature,
    item total, expiry) and returns the discounted amounts.
    Validation failures come back as 400 with result 0 and the failure message.
    """
    try:
        result = logic.submit_transaction(request_data, validator)
    except AuthorizationError as e:
        logger.exception(f"Authorization fault for partner {request_data.partner_ref_no}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected error occurred during authorization."
        )

    if isinstance(result, schemas.ErrorResponse):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=result.model_dump(by_alias=True),
        )
    return result
