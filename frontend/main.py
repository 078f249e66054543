from __future__ import annotations

import io
import json
import sys
from pathlib import Path
from typing import Any, Optional, Union

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import HTMLResponse, Response
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel, ConfigDict, Field


PROJECT_ROOT = Path(__file__).resolve().parent.parent
FRONTEND_ROOT = Path(__file__).resolve().parent
TEMPLATES_DIR = FRONTEND_ROOT / "templates"
STATIC_DIR = FRONTEND_ROOT / "static"
PARAMETERS_PATH = PROJECT_ROOT / "input_parameters" / "simulation_parameters.json"
PARAMETERS_FACTORY_PATH = PROJECT_ROOT / "input_parameters" / "simulation_parameters.factory.json"

MAX_API_SAMPLE_SIZE = 5000

sys.path.insert(0, str(PROJECT_ROOT / "src"))

from charts import render_rdd_chart  # noqa: E402
from config import PARAMETER_RANGES, SAMPLE_SIZE_OPTIONS, SimulationConfig  # noqa: E402
from explainer import (  # noqa: E402
    ExplainerUnavailable,
    ExplanationClient,
    build_explanation_client,
    get_rdd_explanation,
)
from io_utils import config_from_params, validate_params  # noqa: E402
from simulator import RddDataset, derive_dataset  # noqa: E402


class SimulationParams(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    cutoff: float = 50.0
    effect_size: float = 15.0
    noise_level: float = Field(default=5.0, ge=0)
    sample_size: int = Field(default=200, gt=0, le=MAX_API_SAMPLE_SIZE)
    slope: float = 0.5
    curvature: float = 0.0

    def to_config(self) -> SimulationConfig:
        return SimulationConfig(**self.model_dump())


class ConfigPayload(BaseModel):
    simulation: dict[str, Any]


class SimulateRequest(BaseModel):
    config: SimulationParams = Field(default_factory=SimulationParams)
    seed: Optional[int] = None


app = FastAPI(title="Regression Discontinuity Explorer")
app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def get_explanation_client() -> Union[ExplanationClient, ExplainerUnavailable]:
    return build_explanation_client()


def _read_json(path: Path, missing_status: int) -> dict[str, Any]:
    if not path.exists():
        raise HTTPException(status_code=missing_status, detail=f"Missing file: {path}")
    return json.loads(path.read_text(encoding="utf-8"))


def _write_json_with_backup(path: Path, payload: dict[str, Any]) -> None:
    if path.exists():
        backup_path = path.with_suffix(path.suffix + ".bak")
        backup_path.write_text(path.read_text(encoding="utf-8"), encoding="utf-8")
    path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")


def _fit_payload(dataset: RddDataset) -> dict[str, Any]:
    return {
        "control_fit": {"slope": dataset.control_fit.slope, "intercept": dataset.control_fit.intercept},
        "treated_fit": {"slope": dataset.treated_fit.slope, "intercept": dataset.treated_fit.intercept},
        "estimated_jump": dataset.estimated_jump,
    }


@app.get("/", response_class=HTMLResponse)
def index(request: Request) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "index.html",
        {"ranges": PARAMETER_RANGES, "sample_size_options": SAMPLE_SIZE_OPTIONS},
    )


@app.get("/api/config")
def get_config(
    client: Union[ExplanationClient, ExplainerUnavailable] = Depends(get_explanation_client),
) -> dict[str, Any]:
    saved = _read_json(PARAMETERS_PATH, missing_status=500)
    return {
        "simulation": saved.get("simulation", {}),
        "defaults": SimulationConfig().to_dict(),
        "ranges": {
            field: {"min": low, "max": high, "step": step}
            for field, (low, high, step) in PARAMETER_RANGES.items()
        },
        "sample_size_options": list(SAMPLE_SIZE_OPTIONS),
        "has_factory_defaults": PARAMETERS_FACTORY_PATH.exists(),
        "explainer_available": not isinstance(client, ExplainerUnavailable),
    }


@app.post("/api/config/validate")
def validate_config(payload: ConfigPayload) -> dict[str, Any]:
    errors = validate_params(payload.simulation)
    return {"valid": not errors, "errors": errors}


@app.put("/api/config")
def save_config(payload: ConfigPayload) -> dict[str, Any]:
    errors = validate_params(payload.simulation)
    if errors:
        raise HTTPException(status_code=400, detail={"errors": errors})

    config = config_from_params(payload.simulation)
    _write_json_with_backup(PARAMETERS_PATH, {"simulation": config.to_dict()})
    return {"saved": True, "path": str(PARAMETERS_PATH)}


@app.post("/api/config/factory-reset")
def factory_reset() -> dict[str, Any]:
    factory_payload = _read_json(PARAMETERS_FACTORY_PATH, missing_status=404)
    _write_json_with_backup(PARAMETERS_PATH, factory_payload)
    return {
        "reset": True,
        "simulation": factory_payload.get("simulation", {}),
        "factory_path": str(PARAMETERS_FACTORY_PATH),
    }


@app.post("/api/simulate")
def simulate(payload: SimulateRequest) -> dict[str, Any]:
    dataset = derive_dataset(payload.config.to_config(), seed=payload.seed)
    return {
        "config": dataset.config.to_dict(),
        "observations": [
            {
                "id": o.id,
                "x": o.x,
                "y": o.y,
                "is_treated": o.is_treated,
                "fitted_control": o.fitted_control,
                "fitted_treatment": o.fitted_treatment,
            }
            for o in dataset.observations
        ],
        **_fit_payload(dataset),
    }


@app.post("/api/chart")
def chart(payload: SimulateRequest) -> Response:
    dataset = derive_dataset(payload.config.to_config(), seed=payload.seed)
    buffer = io.BytesIO()
    render_rdd_chart(dataset, buffer, dpi=110)
    return Response(content=buffer.getvalue(), media_type="image/png")


@app.post("/api/explanation")
def explanation(
    params: SimulationParams,
    client: Union[ExplanationClient, ExplainerUnavailable] = Depends(get_explanation_client),
) -> dict[str, Any]:
    text = get_rdd_explanation(params.to_config(), client)
    return {"text": text, "available": not isinstance(client, ExplainerUnavailable)}
