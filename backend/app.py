from fastapi import FastAPI, File, UploadFile, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from typing import Dict, Any
import logging

import config

# Configure logging
logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger(__name__)

from services.conversion_service import ConversionService
from schemas.process_graph import ProcessGraph, ProcessTree
from translators import (
    ProcessTreeError, MalformedGraphError, InconsistentJoinError,
    MissingOperationBindingError, GraphReadError
)

def get_user_friendly_error(error: ProcessTreeError) -> str:
    """Convert conversion errors to messages a diagram author can act on."""
    if isinstance(error, MissingOperationBindingError):
        return (
            f"'{error.element_id}' has no operation configured. "
            "Every task, gateway and operation-bearing sub-process needs one."
        )

    if isinstance(error, InconsistentJoinError):
        return (
            "The branches of a gateway do not come back together at a single gateway of the same type. "
            f"Please check the diagram structure ({error})."
        )

    if isinstance(error, MalformedGraphError):
        return f"The process flow is incomplete: {error}. Connect the start event and every sequence flow."

    if isinstance(error, GraphReadError):
        return f"The model could not be read: {error}"

    return f"Conversion failed: {error}"

conversion_service = ConversionService()

app = FastAPI(
    title="Process Tree Converter",
    version="1.0.0",
)

allowed_origins = [
    "http://localhost:5173",
    "http://localhost:3000",
    "http://localhost:8000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


def _conversion_failed(e: ProcessTreeError) -> HTTPException:
    logger.warning(f"Conversion failed: {e}")
    return HTTPException(status_code=422, detail=get_user_friendly_error(e))


# ============================================================================
# CONVERSION ENDPOINTS
# ============================================================================

@app.get("/")
async def root():
    return {"message": "Process Tree Converter API"}

@app.get("/health")
async def health_check():
    return {"status": "healthy"}

@app.post("/convert", response_model=ProcessTree)
async def convert_graph(graph: ProcessGraph):
    """Convert a canonical process graph to a process tree"""
    logger.info(f"Converting process graph '{graph.id}'")
    try:
        return conversion_service.convert_graph(graph)
    except ProcessTreeError as e:
        raise _conversion_failed(e)

@app.post("/convert/bpmn", response_model=ProcessTree)
async def convert_bpmn(file: UploadFile = File(...)):
    """Convert an uploaded BPMN 2.0 XML file to a process tree"""
    logger.info(f"Converting BPMN file: {file.filename}")

    xml_content = await file.read()
    if not xml_content:
        raise HTTPException(status_code=400, detail="Empty file uploaded")

    try:
        return conversion_service.convert_bpmn(xml_content)
    except ProcessTreeError as e:
        raise _conversion_failed(e)

@app.post("/convert/reactflow", response_model=ProcessTree)
async def convert_reactflow(reactflow_data: Dict[str, Any]):
    """Convert React Flow JSON to a process tree"""
    logger.info(f"Converting React Flow data with {len(reactflow_data.get('nodes', []))} nodes")
    try:
        return conversion_service.convert_reactflow(reactflow_data)
    except ProcessTreeError as e:
        raise _conversion_failed(e)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
