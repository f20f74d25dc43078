# app/presentation/pages.py
from __future__ import annotations

import html
import os

from fastapi import APIRouter
from fastapi.responses import HTMLResponse, JSONResponse, Response

router = APIRouter()

APP_NAME = "DietOS Scanner"
POLL_INTERVAL_MS = int(os.getenv("SCAN_POLL_INTERVAL_MS", "5000"))

_HEAD = """<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1">
    <meta name="theme-color" content="#000000">
    <link rel="manifest" href="/manifest.webmanifest">
    <title>{title}</title>
    <style>
      body {{ font-family: system-ui, -apple-system, Segoe UI, Roboto, Arial, sans-serif; margin: 0; }}
      header {{ border-bottom: 1px solid #eee; padding: 14px; text-align: center; font-weight: 700; }}
      main {{ max-width: 640px; margin: auto; padding: 16px; }}
      button {{ width: 100%; background: #000; color: #fff; border: 0; padding: 12px; border-radius: 8px; font-size: 16px; }}
      button:disabled {{ background: #888; }}
      .card {{ background: #f4f4f5; padding: 16px; border-radius: 8px; margin-top: 12px; }}
      .error {{ background: #fee2e2; border: 1px solid #f87171; color: #b91c1c; padding: 12px; border-radius: 8px; margin-top: 12px; }}
      .ok {{ background: #dcfce7; color: #15803d; padding: 8px; border-radius: 8px; margin-top: 8px; }}
      progress {{ width: 100%; }}
      .hidden {{ display: none; }}
    </style>
  </head>
  <body>
    <header>{app_name}</header>
    <main>
"""

_FOOT = """    </main>
    <script>
      if ("serviceWorker" in navigator) {{ navigator.serviceWorker.register("/sw.js"); }}
    </script>
    <script>{script}</script>
  </body>
</html>"""

# Shared renderer: fills #result from a ProductRecord JSON
_RENDER_JS = r"""
function esc(s) { const d = document.createElement("div"); d.textContent = String(s); return d.innerHTML; }
function renderProduct(p, saved) {
  const price = (p.price !== null && p.price !== undefined) ? "$" + Number(p.price).toFixed(2) : "Not available";
  const ingredients = p.ingredients && p.ingredients.length ? p.ingredients.map(esc).join(", ") : "Not available";
  const m = p.macronutrients;
  let vit = "<p><strong>Vitamins:</strong> Not available</p>";
  if (p.vitamins && Object.keys(p.vitamins).length) {
    vit = "<p><strong>Vitamins:</strong></p><ul>" +
      Object.entries(p.vitamins).map(([k, v]) => "<li>" + esc(k) + ": " + esc(v) + "</li>").join("") + "</ul>";
  }
  return '<div class="card">' +
    "<p><strong>Name:</strong> " + esc(p.name) + "</p>" +
    "<p><strong>Price:</strong> " + price + "</p>" +
    "<p><strong>Ingredients:</strong> " + ingredients + "</p>" +
    "<p><strong>Macronutrients:</strong></p><ul>" +
    "<li>Calories: " + m.calories + "</li>" +
    "<li>Protein: " + m.protein + "g</li>" +
    "<li>Carbohydrates: " + m.carbohydrates + "g</li>" +
    "<li>Fat: " + m.fat + "g</li></ul>" + vit + "</div>" +
    (saved ? '<div class="ok">Product successfully saved to database.</div>' : "");
}
"""

_SCANNER_BODY = """      <h1>What do you want to scan?</h1>
      <p>Scan product labels to add them to our database.</p>
      <input id="photo" type="file" accept="image/*" capture="environment" class="hidden">
      <button id="scan">Scan Product</button>
      <div id="error" class="error hidden"><strong>Error:</strong> <span></span></div>
      <div id="result"></div>
"""

_SCANNER_JS = _RENDER_JS + r"""
const input = document.getElementById("photo");
const btn = document.getElementById("scan");
const err = document.getElementById("error");
const out = document.getElementById("result");
btn.onclick = () => input.click();
input.onchange = async () => {
  const file = input.files[0];
  if (!file) return;
  btn.disabled = true; btn.textContent = "Scanning...";
  err.classList.add("hidden"); out.innerHTML = "";
  try {
    const fd = new FormData(); fd.append("image", file);
    const rsp = await fetch("/api/scan-image", { method: "POST", body: fd });
    if (!rsp.ok) throw new Error("Failed to initiate scan");
    const data = await rsp.json();
    if (data.dbError) console.warn("Database error:", data.dbError);
    out.innerHTML = renderProduct(data.scannedData, !!data.savedData);
  } catch (e) {
    console.error("Error scanning image:", e);
    err.querySelector("span").textContent = "Failed to scan the image. Please try again.";
    err.classList.remove("hidden");
  }
  btn.disabled = false; btn.textContent = "Scan Product"; input.value = "";
};
"""

_RESULT_BODY = """      <p><a href="/">&larr; Back to Home</a></p>
      <h2>Scan Result</h2>
      <div id="processing">
        <progress id="progress" max="100" value="0"></progress>
        <p>Processing image...</p>
        <p><small>This may take a few moments. Please wait.</small></p>
      </div>
      <div id="error" class="error hidden"></div>
      <div id="result"></div>
"""

_RESULT_JS = _RENDER_JS + r"""
const scanId = __SCAN_ID__;
const pollMs = __POLL_MS__;
const bar = document.getElementById("progress");
async function poll() {
  try {
    const rsp = await fetch("/api/scan-status?id=" + encodeURIComponent(scanId));
    if (!rsp.ok) throw new Error("Failed to check scan status");
    const data = await rsp.json();
    if (data.status === "completed" && data.scannedData) {
      bar.value = 100;
      document.getElementById("processing").classList.add("hidden");
      document.getElementById("result").innerHTML = renderProduct(data.scannedData, !!data.savedData);
    } else if (data.status === "processing") {
      bar.value = Math.min(Number(bar.value) + 10, 90);
      setTimeout(poll, pollMs);
    } else {
      throw new Error(data.error || "Scan failed");
    }
  } catch (e) {
    console.error("Error checking scan status:", e);
    document.getElementById("processing").classList.add("hidden");
    const el = document.getElementById("error");
    el.textContent = "Failed to retrieve scan results. Please try again.";
    el.classList.remove("hidden");
  }
}
poll();
"""

MANIFEST = {
    "name": APP_NAME,
    "short_name": "Scanner",
    "start_url": "/",
    "display": "standalone",
    "background_color": "#ffffff",
    "theme_color": "#000000",
    "icons": [],
}

# Network-only worker: enough for installability, nothing is cached offline
SERVICE_WORKER = "self.addEventListener('fetch', () => {});\n"


def _page(title: str, body: str, script: str) -> str:
    return _HEAD.format(title=html.escape(title), app_name=APP_NAME) + body + _FOOT.format(script=script)


@router.get("/", response_class=HTMLResponse)
async def scanner_page():
    return _page(APP_NAME, _SCANNER_BODY, _SCANNER_JS)


@router.get("/scan-result/{scan_id}", response_class=HTMLResponse)
async def scan_result_page(scan_id: str):
    # scan id goes into JS as a quoted string literal; strip anything but hex/dash
    safe_id = "".join(c for c in scan_id if c.isalnum() or c == "-")
    script = _RESULT_JS.replace("__SCAN_ID__", f'"{safe_id}"').replace("__POLL_MS__", str(POLL_INTERVAL_MS))
    return _page(f"Scan {safe_id} · {APP_NAME}", _RESULT_BODY, script)


@router.get("/manifest.webmanifest")
async def manifest():
    return JSONResponse(MANIFEST, media_type="application/manifest+json")


@router.get("/sw.js")
async def service_worker():
    return Response(SERVICE_WORKER, media_type="application/javascript")
