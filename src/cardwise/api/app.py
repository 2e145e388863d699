import uvicorn
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from cardwise.api.routes.health import router as health_router
from cardwise.api.routes.recommend import router as recommend_router
from cardwise.config import configure_logging, settings

app = FastAPI(title="Cardwise API", version="0.1.0")
app.include_router(health_router)
app.include_router(recommend_router)


@app.exception_handler(RequestValidationError)
async def request_validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
    # Malformed request bodies are bad input like any other ValidationError.
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


def run() -> None:
    configure_logging()
    uvicorn.run("cardwise.api.app:app", host=settings.app_host, port=settings.app_port, reload=False)
