from fastapi import APIRouter
from starlette.responses import Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST, Counter, Histogram

router = APIRouter()

# incremented by the services
CHECKIN_REQUESTS = Counter("checkin_requests_total", "Check-in attempts received")
CHECKIN_RESULTS = Counter(
    "checkin_results_total", "Recorded check-ins by computed status", ["status"]
)
OVERLAP_SCORES = Histogram(
    "overlap_score_percent",
    "Overlap percentage of recorded check-ins",
    buckets=(0, 10, 20, 30, 40, 50, 60, 70, 80, 90, 100),
)
SESSIONS_CREATED = Counter("sessions_created_total", "Sessions created", ["room_size"])
STATUS_OVERRIDES = Counter("attendance_overrides_total", "Faculty status overrides")


@router.get("/metrics")
def metrics():
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
