import time
import requests
from typing import Optional, Dict, Any, List

class ScanTimeout(RuntimeError):
    pass

class LabelScannerClient:
    """Small HTTP client for the scanner API (scripts, other services)."""

    def __init__(self, base_url: str, api_key: Optional[str] = None, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.headers = {"X-Api-Key": api_key} if api_key else {}
        self.http = session or requests.Session()

    def _files(self, filepath: str, content_type: str):
        return {"image": (filepath, open(filepath, "rb"), content_type)}

    def scan(self, filepath: str, *, content_type: str = "image/jpeg", timeout: int = 60) -> Dict[str, Any]:
        """Blocking scan: {scannedData, savedData, dbError}."""
        files = self._files(filepath, content_type)
        try:
            r = self.http.post(f"{self.base_url}/api/scan-image", params={"mode": "sync"},
                               headers=self.headers, files=files, timeout=timeout)
        finally:
            files["image"][1].close()
        r.raise_for_status(); return r.json()

    def submit(self, filepath: str, *, content_type: str = "image/jpeg", timeout: int = 30) -> str:
        files = self._files(filepath, content_type)
        try:
            r = self.http.post(f"{self.base_url}/api/scan-image", params={"mode": "async"},
                               headers=self.headers, files=files, timeout=timeout)
        finally:
            files["image"][1].close()
        r.raise_for_status(); return r.json()["scanId"]

    def status(self, scan_id: str, *, timeout: int = 10) -> Dict[str, Any]:
        r = self.http.get(f"{self.base_url}/api/scan-status", params={"id": scan_id},
                          headers=self.headers, timeout=timeout)
        r.raise_for_status(); return r.json()

    def wait(self, scan_id: str, *, interval: float = 5.0, max_wait: float = 120.0) -> Dict[str, Any]:
        """Poll until the job leaves `processing`."""
        deadline = time.monotonic() + max_wait
        while True:
            job = self.status(scan_id)
            if job.get("status") != "processing":
                return job
            if time.monotonic() >= deadline:
                raise ScanTimeout(f"scan {scan_id} still processing after {max_wait}s")
            time.sleep(interval)

    def products(self, *, limit: int = 20, timeout: int = 10) -> List[Dict[str, Any]]:
        r = self.http.get(f"{self.base_url}/api/products", params={"limit": limit},
                          headers=self.headers, timeout=timeout)
        r.raise_for_status(); return r.json()["items"]
