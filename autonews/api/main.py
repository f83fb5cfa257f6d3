import time
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from autonews.config import Settings, configure_logging
from autonews.errors import PipelineError
from autonews.storage.models import AnalyzeRequest, IngestRequest, ManualRecordInput
from autonews.tracker.pipeline import NewsPipeline

configure_logging()
logger = logging.getLogger(__name__)

# Carrega variáveis do .env
settings = Settings.from_env()
pipeline = NewsPipeline(settings)

#%% APP

app = FastAPI(title="AutoNews ingestion")


# Registrado antes do CORS: o 500 de erro inesperado também sai com Access-Control-Allow-Origin
@app.middleware("http")
async def unexpected_error_middleware(request: Request, call_next):
    try:
        return await call_next(request)
    except Exception as exc:
        logger.exception("Unexpected error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"error": str(exc) or exc.__class__.__name__})


# Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type"],
)
# Compressão gzip: a fila carrega até 5000 caracteres por item
app.add_middleware(GZipMiddleware, minimum_size=512)


@app.exception_handler(PipelineError)
async def pipeline_error_handler(request: Request, exc: PipelineError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


@app.get("/health")
def health():
    return {"status": "ok", "ts": int(time.time())}


# POST
@app.post("/api/ingest")
def api_ingest(body: Optional[IngestRequest] = None):
    item = pipeline.ingest(body.url if body else None)
    return {"success": True, "item": item.to_json()}


@app.post("/api/analyze")
def api_analyze(body: AnalyzeRequest):
    record = pipeline.promote(
        text=body.text,
        pending_id=body.pending_id,
        image=body.image,
        url=body.url,
    )
    return {"success": True, "record": record.to_json()}


@app.post("/api/records")
def api_create_record(body: ManualRecordInput):
    record = pipeline.create_record(body)
    return {"success": True, "record": record.to_json()}


# GET
@app.get("/api/pending")
def api_list_pending():
    # o cliente manda _t=<timestamp> como cache-buster; aqui só garantimos no-store
    items = pipeline.list_pending()
    resp = JSONResponse([i.to_json() for i in items])
    resp.headers["Cache-Control"] = "no-store"
    return resp


@app.get("/api/records")
def api_list_records():
    return [r.to_json() for r in pipeline.list_records()]


@app.get("/api/records/brands")
def api_brand_counts():
    return pipeline.brand_counts()


# DELETE
@app.delete("/api/pending")
def api_delete_pending(id: Optional[str] = None):
    pipeline.remove_pending(id)
    return {"success": True}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("autonews.api.main:app", host="0.0.0.0", port=8000, reload=True)
