import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from paygw_razorpay.config import configure_logging
from paygw_razorpay.database import Base, engine
from paygw_razorpay.exceptions import ConfigurationError, GatewayError
from paygw_razorpay.routes import router
import paygw_razorpay.models  # noqa: F401  (registers tables)

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Razorpay Payment Gateway")

app.include_router(router)

Base.metadata.create_all(bind=engine)


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    logger.error("configuration error on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=400, content={"detail": "Payment gateway is not configured"})


@app.exception_handler(GatewayError)
async def gateway_error_handler(request: Request, exc: GatewayError):
    logger.error("gateway error on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=502, content={"detail": "Payment gateway unavailable"})
