#!/usr/bin/env python3
"""
Smoke check for a running Patient 360 administration backend.

Walks one freshly created doctor through the whole lifecycle and hits
every read endpoint, then prints a summary.  Requires an admin token,
e.g. from ``python manage.py ensure_admin``:

    API_TOKEN=<key> python api_smoke_check.py

Note: this creates a real doctor account on the target server.
"""
import os
import secrets
import sys
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

BASE_URL = os.getenv("BASE_URL", "http://127.0.0.1:8000").rstrip("/")
API_TOKEN = os.getenv("API_TOKEN", "")
TIMEOUT = float(os.getenv("SMOKE_TIMEOUT", "10"))


@dataclass
class CheckResult:
    success: bool
    endpoint: str
    method: str
    status_code: int
    response_time: float
    error_message: str = ""
    description: str = ""


class SmokeChecker:
    def __init__(self, token: str):
        self.session = requests.Session()
        self.session.headers.update({
            "Authorization": f"Token {token}",
            "Content-Type": "application/json",
        })
        self.results: list[CheckResult] = []

    def check(self, method: str, endpoint: str, data: Optional[Dict[str, Any]] = None,
              expected_status: int = 200, description: str = "") -> Optional[dict]:
        """Call one endpoint, record the outcome and return the JSON body."""
        url = f"{BASE_URL}{endpoint}"
        start = time.time()
        try:
            response = self.session.request(method, url, json=data, timeout=TIMEOUT)
        except requests.RequestException as e:
            elapsed = time.time() - start
            self.results.append(CheckResult(False, endpoint, method, 0, elapsed, str(e), description))
            print(f"FAIL {method} {endpoint} - {e} ({elapsed:.2f}s)")
            return None

        elapsed = time.time() - start
        ok = response.status_code == expected_status
        self.results.append(CheckResult(
            ok, endpoint, method, response.status_code, elapsed,
            "" if ok else response.text[:200], description,
        ))
        print(f"{'ok  ' if ok else 'FAIL'} {method} {endpoint} - {response.status_code} ({elapsed:.2f}s)")
        try:
            return response.json()
        except ValueError:
            return None

    def run(self) -> bool:
        self.check("GET", "/healthz", description="database health")
        self.check("GET", "/api/catalogs", description="reference catalogs")

        suffix = secrets.token_hex(3)
        created = self.check("POST", "/api/admin/doctors", {
            "firstName": "Smoke",
            "lastName": f"Check{suffix}",
            "nationalId": str(10**10 + secrets.randbelow(9 * 10**10)),
            "licenseNumber": f"SMOKE-{suffix}",
            "specializationCode": "general_practitioner",
            "governorateCode": "damascus",
            "clinicAddress": "Smoke test clinic",
            "phoneNumber": "+963000000000",
        }, expected_status=201, description="create doctor")

        if created and created.get("ok"):
            doctor_id = created["doctor"]["id"]
            print(f"     generated email: {created['credentials']['email']}")
            self.check("PUT", f"/api/admin/doctors/{doctor_id}/deactivate",
                       {"reasonCode": "other", "notes": "smoke check"}, description="deactivate doctor")
            self.check("PUT", f"/api/admin/doctors/{doctor_id}/deactivate",
                       {"reasonCode": "other"}, expected_status=409, description="deactivate twice")
            self.check("PUT", f"/api/admin/doctors/{doctor_id}/reactivate", description="reactivate doctor")

        self.check("GET", "/api/admin/doctors?status=active&page=1&pageSize=20", description="list doctors")
        self.check("GET", "/api/admin/patients?page=1&pageSize=20", description="list patients")
        self.check("GET", "/api/admin/audit-logs?limit=20", description="audit trail")
        self.check("GET", "/api/admin/statistics", description="statistics")
        return all(r.success for r in self.results)

    def summary(self) -> None:
        failed = [r for r in self.results if not r.success]
        print(f"\n{len(self.results)} checks, {len(failed)} failed")
        for r in failed:
            print(f"  {r.method} {r.endpoint} [{r.status_code}] {r.description}: {r.error_message}")


def main():
    if not API_TOKEN:
        print("API_TOKEN is not set; create one with `python manage.py ensure_admin`")
        sys.exit(2)
    checker = SmokeChecker(API_TOKEN)
    passed = checker.run()
    checker.summary()
    sys.exit(0 if passed else 1)


if __name__ == "__main__":
    main()
