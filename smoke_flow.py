#!/usr/bin/env python3
"""Smoke test of the attendance flow against a running server.

Start the API first (``cd app && uvicorn main:app``), then run this script.
"""
import math
import sys

import requests

BASE_URL = "http://localhost:8000"
METERS_PER_DEGREE = 6_371_000 * math.pi / 180.0


def _step(label, response, expected):
    if response.status_code != expected:
        print(f"❌ {label}: {response.status_code} - {response.text}")
        return False
    print(f"✅ {label}")
    return True


def run_flow(base_url: str = BASE_URL) -> bool:
    """Create a session, check two students in, override one, export."""
    print("📍 Testing attendance flow")
    print("=" * 50)

    session_data = {
        "faculty_id": "smoke-faculty",
        "faculty_name": "Smoke Test",
        "latitude": 12.9716,
        "longitude": 77.5946,
        "accuracy": 5,
        "room_size": "small",
        "buffer_m": 0,
        "active_duration": 5,
        "roster": [
            {"student_name": "Asha Rao", "registration_number": "SMOKE001"},
            {"student_name": "Ben Okafor", "registration_number": "SMOKE002"},
        ],
    }

    print("\n1. Creating session...")
    try:
        response = requests.post(f"{base_url}/sessions", json=session_data)
    except requests.exceptions.ConnectionError:
        print(f"❌ Cannot connect to server. Make sure it's running on {base_url}")
        return False
    if not _step("Session created", response, 201):
        return False
    code = response.json()["code"]
    print(f"   code={code} radius={response.json()['radius_m']} m")

    print("\n2. Checking in at the anchor and at the room edge...")
    records = []
    for registration, meters_north in (("SMOKE001", 0), ("SMOKE002", 10)):
        check_in = {
            "student_id": registration.lower(),
            "student_name": registration,
            "registration_number": registration,
            "latitude": session_data["latitude"] + meters_north / METERS_PER_DEGREE,
            "longitude": session_data["longitude"],
            "accuracy": 3,
        }
        response = requests.post(f"{base_url}/sessions/{code}/check-in", json=check_in)
        if not _step(f"Check-in {registration}", response, 201):
            return False
        record = response.json()
        records.append(record)
        print(f"   overlap={record['overlap_percentage']}% status={record['status']}")

    print("\n3. Faculty override of the edge check-in...")
    response = requests.patch(
        f"{base_url}/attendance/{records[-1]['id']}/override",
        json={"final_status": "present"},
    )
    if not _step("Override applied", response, 200):
        return False

    print("\n4. Export and close...")
    response = requests.get(f"{base_url}/sessions/{code}/attendance/export", params={"fmt": "csv"})
    if not _step("CSV export", response, 200):
        return False
    if not _step("Session closed", requests.post(f"{base_url}/sessions/{code}/close"), 200):
        return False

    response = requests.post(f"{base_url}/sessions/{code}/check-in", json=check_in)
    if not _step("Check-in after close rejected", response, 410):
        return False

    print("\n🎉 Attendance flow passed!")
    return True


if __name__ == "__main__":
    success = run_flow(sys.argv[1] if len(sys.argv) > 1 else BASE_URL)
    sys.exit(0 if success else 1)
