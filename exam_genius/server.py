"""
FastAPI web server for the exam sheet generator.
آزمون‌ساز هوشمند: وب سرور.

Pages:
  GET  /                         - generation form
  GET  /exams/{id}               - sheet preview / editor (?edit=1)
  GET  /exams/{id}/print         - print view (opens the print dialog)

API:
  POST /api/exams                - generate from text or URL
  POST /api/exams/upload         - generate from an image/PDF upload
  GET  /api/exams/{id}           - current exam
  PUT  /api/exams/{id}           - replace exam
  GET  /api/exams/{id}/layout    - pagination
  GET  /api/exams/{id}/pdf       - PDF export
  POST /api/exams/{id}/validate  - structural checks
  PATCH /api/exams/{id}/header   - edit a header field
  PATCH /api/exams/{id}/labels   - override a sheet label
  PATCH /api/exams/{id}/style    - font family / size / alignment
  POST /api/exams/{id}/questions - add question
  PATCH|DELETE /api/exams/{id}/questions/{qid}
  POST /api/exams/{id}/questions/{qid}/move
  POST /api/exams/{id}/questions/{qid}/options
  PUT  /api/exams/{id}/questions/{qid}/options/{index}
  POST /api/exams/{id}/questions/{qid}/regenerate
  GET|PUT /api/config            - saved generation settings
  GET  /health
"""

import asyncio
import base64
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Literal

from fastapi import Body, Depends, FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, Response
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, ValidationError

from . import __version__, editor
from .config import check_api_key, get_settings
from .config_store import ConfigStore
from .errors import (
    MSG_CONFIG_SAVE_FAILED,
    MSG_EMPTY_FILE,
    MSG_EXAM_NOT_FOUND,
    MSG_FILE_REQUIRED,
    MSG_FILE_TOO_LARGE,
    MSG_INVALID_EDIT,
    MSG_INVALID_REQUEST,
    MSG_NO_SAVED_CONFIG,
    MSG_PDF_EXPORT_FAILED,
    MSG_QUESTION_NOT_FOUND,
    MSG_REGENERATION_FAILED,
    MSG_UNSUPPORTED_FILE,
    ConfigError,
    ExamGeniusError,
    GenerationError,
)
from .generator import ExamGenerator
from .layout import QUESTION_TYPE_LABELS, SECTION_TITLES, TYPE_ORDER, SheetPage, paginate
from .renderer import render_exam_page, render_index, render_print_page
from .schema import Difficulty, ExamPaper, FileData, GenerationConfig, GenerationResult
from .store import ExamRecord, ExamStore
from .validator import ValidationResult, validate_exam

logger = logging.getLogger(__name__)

_ALLOWED_UPLOAD_PREFIXES = ("image/",)
_ALLOWED_UPLOAD_TYPES = ("application/pdf",)
_STATIC_DIR = Path(__file__).parent / "static"

# ---------------------------------------------------------------------------
# State (in-memory; one process)
# ---------------------------------------------------------------------------

_store = ExamStore()
_generator: ExamGenerator | None = None


def get_store() -> ExamStore:
    return _store


def get_generator() -> ExamGenerator:
    global _generator
    if _generator is None:
        _generator = ExamGenerator()
    return _generator


def get_config_store() -> ConfigStore:
    return ConfigStore()


# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI):
    if not check_api_key():
        logger.warning("GOOGLE_API_KEY not configured, generation will fail until the key is set")
    yield


app = FastAPI(
    title="Exam Genius",
    description="AI exam sheet generator: Gemini generation, paginated sheets, editing and PDF export",
    version=__version__,
    lifespan=lifespan,
)

_cors_origins = get_settings().cors_origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=bool(_cors_origins),
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["Content-Type"],
)
app.mount("/static", StaticFiles(directory=_STATIC_DIR), name="static")


@app.exception_handler(ExamGeniusError)
async def _exam_genius_error_handler(request: Request, exc: ExamGeniusError):
    if isinstance(exc, ConfigError):
        status_code = 400
    elif isinstance(exc, GenerationError):
        status_code = 502
    else:
        status_code = 500
    return JSONResponse(status_code=status_code, content={"detail": exc.message})


@app.exception_handler(RequestValidationError)
async def _request_validation_error_handler(request: Request, exc: RequestValidationError):
    logger.info("Invalid request to %s: %s", request.url.path, exc.errors())
    return JSONResponse(status_code=422, content={"detail": MSG_INVALID_REQUEST})


# ---------------------------------------------------------------------------
# Request / response schemas
# ---------------------------------------------------------------------------


class ExamResponse(BaseModel):
    exam_id: str
    exam: ExamPaper


class GenerateResponse(BaseModel):
    exam_id: str
    result: GenerationResult


class FieldUpdate(BaseModel):
    field: str
    value: Any = None


class MoveRequest(BaseModel):
    direction: Literal["next", "prev"]


class OptionUpdate(BaseModel):
    value: str


class RegenerateRequest(BaseModel):
    difficulty: Difficulty


class QuestionTypeInfo(BaseModel):
    type: str
    label: str
    section_title: str


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _get_record(store: ExamStore, exam_id: str) -> ExamRecord:
    try:
        return store.get(exam_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=MSG_EXAM_NOT_FOUND) from None


def _apply_edit(store: ExamStore, exam_id: str, edit, *args) -> ExamResponse:
    """Run an editor function on the stored exam and save the result."""
    record = _get_record(store, exam_id)
    try:
        exam = edit(record.exam, *args)
    except KeyError as exc:
        logger.info("Edit on exam %s: question %s not found", exam_id, exc.args[0])
        raise HTTPException(status_code=404, detail=MSG_QUESTION_NOT_FOUND) from None
    except ValueError as exc:
        logger.info("Rejected edit on exam %s: %s", exam_id, exc)
        raise HTTPException(status_code=422, detail=MSG_INVALID_EDIT) from None
    store.put(exam_id, exam)
    return ExamResponse(exam_id=exam_id, exam=exam)


async def _read_upload(upload: UploadFile, max_bytes: int) -> FileData:
    """Read an image/PDF upload into base64, enforcing type and size limits.

    MIME type is checked before reading; content is streamed in chunks so
    oversized files are rejected without buffering them whole.
    """
    content_type = upload.content_type or ""
    if not (content_type.startswith(_ALLOWED_UPLOAD_PREFIXES) or content_type in _ALLOWED_UPLOAD_TYPES):
        raise HTTPException(status_code=415, detail=MSG_UNSUPPORTED_FILE)

    chunks = []
    total_size = 0
    chunk_size = 1024 * 1024
    while True:
        chunk = await upload.read(chunk_size)
        if not chunk:
            break
        total_size += len(chunk)
        if total_size > max_bytes:
            raise HTTPException(status_code=413, detail=MSG_FILE_TOO_LARGE.format(max_mb=max_bytes // 1024 // 1024))
        chunks.append(chunk)

    if total_size == 0:
        raise HTTPException(status_code=400, detail=MSG_EMPTY_FILE)

    data = base64.b64encode(b"".join(chunks)).decode("ascii")
    return FileData(mime_type=content_type, data=data)


async def _generate(config: GenerationConfig, store: ExamStore, generator: ExamGenerator) -> GenerateResponse:
    loop = asyncio.get_running_loop()
    try:
        result: GenerationResult = await loop.run_in_executor(None, generator.generate, config)
    except ExamGeniusError:
        raise
    except Exception as exc:
        logger.exception("Generation failed")
        raise GenerationError() from exc

    # the stored config drops the inline file; it is only needed for the call
    record = store.add(result.exam, config.model_copy(update={"file_data": None}))
    return GenerateResponse(exam_id=record.exam_id, result=result)


# ---------------------------------------------------------------------------
# Pages
# ---------------------------------------------------------------------------


@app.get("/", response_class=HTMLResponse, tags=["pages"])
async def index():
    settings = get_settings()
    return render_index(GenerationConfig(), settings.MAX_TOTAL_QUESTIONS, settings.MAX_UPLOAD_MB)


@app.get("/exams/{exam_id}", response_class=HTMLResponse, tags=["pages"])
async def exam_page(exam_id: str, edit: bool = False, store: ExamStore = Depends(get_store)):
    record = _get_record(store, exam_id)
    return render_exam_page(exam_id, record.exam, editing=edit)


@app.get("/exams/{exam_id}/print", response_class=HTMLResponse, tags=["pages"])
async def print_page(exam_id: str, store: ExamStore = Depends(get_store)):
    record = _get_record(store, exam_id)
    return render_print_page(record.exam)


# ---------------------------------------------------------------------------
# Meta
# ---------------------------------------------------------------------------


@app.get("/health", tags=["meta"])
async def health():
    """Health check."""
    return {"status": "ok", "version": __version__}


@app.get("/api/question-types", response_model=list[QuestionTypeInfo], tags=["meta"])
async def question_types():
    """Question types in display order with their Persian labels."""
    return [
        QuestionTypeInfo(type=t.value, label=QUESTION_TYPE_LABELS[t], section_title=SECTION_TITLES[t])
        for t in TYPE_ORDER
    ]


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------


@app.post("/api/exams", response_model=GenerateResponse, tags=["generate"])
async def create_exam(
    config: GenerationConfig,
    store: ExamStore = Depends(get_store),
    generator: ExamGenerator = Depends(get_generator),
):
    """Generate an exam from pasted text or a URL."""
    if config.source_type == "FILE":
        raise HTTPException(status_code=400, detail=MSG_FILE_REQUIRED)
    return await _generate(config, store, generator)


@app.post("/api/exams/upload", response_model=GenerateResponse, tags=["generate"])
async def create_exam_from_file(
    file: UploadFile = File(..., description="Image or PDF source"),
    config: str = Form(default="{}", description="GenerationConfig JSON"),
    store: ExamStore = Depends(get_store),
    generator: ExamGenerator = Depends(get_generator),
):
    """Generate an exam from an uploaded image or PDF (inline multimodal input)."""
    try:
        parsed = GenerationConfig.model_validate_json(config)
    except ValidationError as exc:
        logger.info("Invalid upload config: %s", exc)
        raise HTTPException(status_code=422, detail=MSG_INVALID_REQUEST) from None

    file_data = await _read_upload(file, get_settings().max_upload_bytes)
    parsed = parsed.model_copy(update={"source_type": "FILE", "file_data": file_data})
    return await _generate(parsed, store, generator)


# ---------------------------------------------------------------------------
# Exams
# ---------------------------------------------------------------------------


@app.get("/api/exams/{exam_id}", response_model=ExamResponse, tags=["exams"])
async def get_exam(exam_id: str, store: ExamStore = Depends(get_store)):
    record = _get_record(store, exam_id)
    return ExamResponse(exam_id=exam_id, exam=record.exam)


@app.put("/api/exams/{exam_id}", response_model=ExamResponse, tags=["exams"])
async def replace_exam(exam_id: str, body: dict[str, Any] = Body(...), store: ExamStore = Depends(get_store)):
    """Replace the whole exam. Pages below 1 are rejected, not clamped."""
    return _apply_edit(store, exam_id, lambda _current: editor.parse_edited_exam(body))


@app.get("/api/exams/{exam_id}/layout", response_model=list[SheetPage], tags=["exams"])
async def get_layout(exam_id: str, store: ExamStore = Depends(get_store)):
    """Sheets with their sections and global question numbers."""
    return paginate(_get_record(store, exam_id).exam)


@app.get("/api/exams/{exam_id}/pdf", tags=["exams"])
async def export_pdf(exam_id: str, store: ExamStore = Depends(get_store)):
    """One PDF page per sheet."""
    from .exporter import PDFExporter

    exam = _get_record(store, exam_id).exam
    loop = asyncio.get_running_loop()
    try:
        data = await loop.run_in_executor(None, PDFExporter().export, exam)
    except Exception as exc:
        logger.exception("PDF export failed for exam %s", exam_id)
        raise HTTPException(status_code=500, detail=MSG_PDF_EXPORT_FAILED) from exc

    return Response(
        content=data,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="exam-{exam_id[:8]}.pdf"'},
    )


@app.post("/api/exams/{exam_id}/validate", response_model=ValidationResult, tags=["exams"])
async def validate(exam_id: str, store: ExamStore = Depends(get_store)):
    record = _get_record(store, exam_id)
    return validate_exam(record.exam, record.config)


# ---------------------------------------------------------------------------
# Editing
# ---------------------------------------------------------------------------


@app.patch("/api/exams/{exam_id}/header", response_model=ExamResponse, tags=["edit"])
async def update_header(exam_id: str, body: FieldUpdate, store: ExamStore = Depends(get_store)):
    return _apply_edit(store, exam_id, editor.update_header, body.field, body.value)


@app.patch("/api/exams/{exam_id}/labels", response_model=ExamResponse, tags=["edit"])
async def update_labels(exam_id: str, body: FieldUpdate, store: ExamStore = Depends(get_store)):
    """Override one printed sheet label (school, course, signature ...)."""
    return _apply_edit(store, exam_id, editor.update_labels, body.field, body.value)


@app.patch("/api/exams/{exam_id}/style", response_model=ExamResponse, tags=["edit"])
async def update_style(exam_id: str, body: FieldUpdate, store: ExamStore = Depends(get_store)):
    """Set font family, font size or text alignment of the sheets."""
    return _apply_edit(store, exam_id, editor.update_style, body.field, body.value)


@app.post("/api/exams/{exam_id}/questions", response_model=ExamResponse, tags=["edit"])
async def add_question(exam_id: str, store: ExamStore = Depends(get_store)):
    return _apply_edit(store, exam_id, editor.add_question)


@app.patch("/api/exams/{exam_id}/questions/{question_id}", response_model=ExamResponse, tags=["edit"])
async def update_question(exam_id: str, question_id: int, body: FieldUpdate, store: ExamStore = Depends(get_store)):
    return _apply_edit(store, exam_id, editor.update_question, question_id, body.field, body.value)


@app.delete("/api/exams/{exam_id}/questions/{question_id}", response_model=ExamResponse, tags=["edit"])
async def delete_question(exam_id: str, question_id: int, store: ExamStore = Depends(get_store)):
    return _apply_edit(store, exam_id, editor.delete_question, question_id)


@app.post("/api/exams/{exam_id}/questions/{question_id}/move", response_model=ExamResponse, tags=["edit"])
async def move_question(exam_id: str, question_id: int, body: MoveRequest, store: ExamStore = Depends(get_store)):
    return _apply_edit(store, exam_id, editor.move_question_page, question_id, body.direction)


@app.post("/api/exams/{exam_id}/questions/{question_id}/options", response_model=ExamResponse, tags=["edit"])
async def add_option(exam_id: str, question_id: int, store: ExamStore = Depends(get_store)):
    return _apply_edit(store, exam_id, editor.add_option, question_id)


@app.put(
    "/api/exams/{exam_id}/questions/{question_id}/options/{index}",
    response_model=ExamResponse,
    tags=["edit"],
)
async def update_option(
    exam_id: str,
    question_id: int,
    index: int,
    body: OptionUpdate,
    store: ExamStore = Depends(get_store),
):
    return _apply_edit(store, exam_id, editor.update_option, question_id, index, body.value)


@app.post(
    "/api/exams/{exam_id}/questions/{question_id}/regenerate",
    response_model=ExamResponse,
    tags=["edit"],
)
async def regenerate_question(
    exam_id: str,
    question_id: int,
    body: RegenerateRequest,
    store: ExamStore = Depends(get_store),
    generator: ExamGenerator = Depends(get_generator),
):
    """Rewrite one question at a new difficulty. On failure the question text is restored."""
    record = _get_record(store, exam_id)
    try:
        record.exam.find_question(question_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=MSG_QUESTION_NOT_FOUND) from None

    loop = asyncio.get_running_loop()
    try:
        exam = await loop.run_in_executor(
            None, generator.regenerate_question, store, exam_id, question_id, body.difficulty
        )
    except ExamGeniusError:
        raise
    except Exception as exc:
        logger.exception("Regeneration of question %d failed", question_id)
        raise GenerationError(MSG_REGENERATION_FAILED) from exc
    return ExamResponse(exam_id=exam_id, exam=exam)


# ---------------------------------------------------------------------------
# Saved settings
# ---------------------------------------------------------------------------


@app.get("/api/config", response_model=GenerationConfig, tags=["config"])
async def load_config(config_store: ConfigStore = Depends(get_config_store)):
    config = config_store.load()
    if config is None:
        raise HTTPException(status_code=404, detail=MSG_NO_SAVED_CONFIG)
    return config


@app.put("/api/config", response_model=GenerationConfig, tags=["config"])
async def save_config(config: GenerationConfig, config_store: ConfigStore = Depends(get_config_store)):
    try:
        config_store.save(config)
    except OSError as exc:
        logger.exception("Saving config failed")
        raise HTTPException(status_code=500, detail=MSG_CONFIG_SAVE_FAILED) from exc
    return config
