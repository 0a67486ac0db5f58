import logging

from fastapi import FastAPI, Body
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from crew_scheduling.config import configure_logging, load_settings
from crew_scheduling.engine import plan_with_engine
from crew_scheduling.exceptions import SchedulingError
from crew_scheduling.models import ScheduleRequest
from crew_scheduling.output_formatter import summarize

settings = load_settings()
configure_logging(settings)
logger = logging.getLogger(__name__)

app = FastAPI(title="Crew Shift Scheduler")

LIST_FIELDS = ("days", "shifts", "crew")


@app.get("/health")
def health():
    return {"status": "ok"}


@app.post("/plan")
def plan_endpoint(payload: dict = Body(...)):
    """Plan crew for every (day, shift template) in the request."""
    if not all(isinstance(payload.get(key), list) for key in LIST_FIELDS):
        return JSONResponse(status_code=400,
                            content={"error": "Invalid input: days, shifts, and crew must be arrays"})

    payload = dict(payload)
    payload.setdefault("engine", settings.default_engine)
    payload.setdefault("timezone", settings.timezone)

    try:
        request = ScheduleRequest.model_validate(payload)
    except SchedulingError as e:
        return JSONResponse(status_code=400, content={"error": str(e)})
    except ValidationError as e:
        return JSONResponse(status_code=400, content={"error": "Invalid input", "details": e.errors(include_url=False, include_context=False)})

    try:
        result = plan_with_engine(request)
    except Exception:
        logger.exception("Crew scheduling failed")
        return JSONResponse(status_code=500, content={"error": "Failed to run crew scheduling"})

    body = result.model_dump(mode="json", by_alias=True)
    body["engine"] = request.engine
    body["summary"] = summarize(result, request.days, request.shifts)
    return body
