import logging
from io import BytesIO
from typing import Optional, Tuple

from fastapi import FastAPI, Form, Request
from fastapi.responses import HTMLResponse, JSONResponse, StreamingResponse
from fastapi.templating import Jinja2Templates

import config
from calculator import NutritionCalculator, nutrition_targets
from models import (
    BiometricInput,
    CalculationResult,
    Intensity,
    InvalidInput,
    NutritionTargets,
    parse_enum,
)
from schemas import BiometricsRequest, TargetsRequest

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

DEFAULT_INTENSITY = parse_enum(Intensity, config.DEFAULT_INTENSITY, "DEFAULT_INTENSITY")

app = FastAPI(title="Nutrition Targets")
templates = Jinja2Templates(directory=config.TEMPLATES_DIR)
calculator = NutritionCalculator()


@app.exception_handler(InvalidInput)
async def invalid_input_handler(request: Request, exc: InvalidInput):
    logger.info("rejected input on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=400,
        content={"detail": exc.message, "field": exc.field},
    )


def _calculate_from_form(
    gender: str,
    age: float,
    height: float,
    weight: float,
    activity_level: str,
    goal: Optional[str],
    intensity: str,
) -> Tuple[BiometricInput, CalculationResult, NutritionTargets]:
    client = BiometricInput(
        gender=gender,
        age=age,
        height_cm=height,
        weight_kg=weight,
        activity_level=activity_level,
    )
    result = calculator.calculate(client)
    selected = nutrition_targets(result, goal or None, intensity or DEFAULT_INTENSITY)
    return client, result, selected


def _form_error(request: Request, exc: InvalidInput) -> HTMLResponse:
    logger.info("rejected form input: %s", exc)
    return templates.TemplateResponse(
        request,
        "form.html",
        {"error": f"Please check {exc.field}: {exc.message}"},
        status_code=400,
    )


def render_pdf(html_content: str) -> BytesIO:
    # weasyprint pulls in pango/cairo, only load it when a report is asked for
    from weasyprint import HTML

    pdf_io = BytesIO()
    HTML(string=html_content).write_pdf(pdf_io)
    pdf_io.seek(0)
    return pdf_io


@app.get("/health", tags=["meta"])
def health() -> dict:
    return {"status": "ok"}


@app.get("/", response_class=HTMLResponse)
async def home(request: Request):
    return templates.TemplateResponse(request, "form.html", {"error": None})


@app.post("/calculate", response_class=HTMLResponse)
async def calculate_view(
    request: Request,
    gender: str = Form(...),
    age: float = Form(...),
    height: float = Form(...),
    weight: float = Form(...),
    activity_level: str = Form(...),
    goal: str = Form(""),
    intensity: str = Form(""),
):
    try:
        client, result, selected = _calculate_from_form(
            gender, age, height, weight, activity_level, goal, intensity
        )
    except InvalidInput as exc:
        return _form_error(request, exc)

    return templates.TemplateResponse(
        request,
        "results.html",
        {
            "client": client,
            "result": result,
            "selected": selected,
        },
    )


@app.post("/report")
async def report_pdf(
    request: Request,
    gender: str = Form(...),
    age: float = Form(...),
    height: float = Form(...),
    weight: float = Form(...),
    activity_level: str = Form(...),
    goal: str = Form(""),
    intensity: str = Form(""),
):
    try:
        client, result, selected = _calculate_from_form(
            gender, age, height, weight, activity_level, goal, intensity
        )
    except InvalidInput as exc:
        return _form_error(request, exc)

    template = templates.get_template("pdf_report.html")
    html_content = template.render(
        client=client,
        result=result,
        selected=selected,
    )

    filename = f"{config.REPORT_FILENAME_PREFIX}_{selected.goal.value.replace(' ', '_').lower()}.pdf"

    return StreamingResponse(
        render_pdf(html_content),
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@app.post("/api/calculate")
def calculate_api(body: BiometricsRequest) -> dict:
    """Full goal x intensity matrix for one set of biometrics."""
    return calculator.calculate(body.to_biometrics()).as_dict()


@app.post("/api/targets")
def targets_api(body: TargetsRequest) -> dict:
    """
    Targets for the chosen goal/intensity, ready to be stored on a profile.
    `goal` falls back to the recommended goal.
    """
    result = calculator.calculate(body.to_biometrics())
    selected = nutrition_targets(result, body.goal, body.intensity or DEFAULT_INTENSITY)
    return selected.as_dict()
