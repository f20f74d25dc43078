# scripts/scan_label.py
# Send a label photo to a running scanner and print the parsed product.
#   python scripts/scan_label.py photo.jpg
#   python scripts/scan_label.py photo.jpg --async --interval 2
#   python scripts/scan_label.py --list

import argparse, json, mimetypes, os, sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from clients.label_scanner_client import LabelScannerClient, ScanTimeout


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="Scan a product label photo")
    ap.add_argument("photo", nargs="?", help="path to a JPG/PNG/WEBP photo")
    ap.add_argument("--url", default=os.getenv("SCANNER_URL", "http://localhost:8000"))
    ap.add_argument("--api-key", default=os.getenv("SERVICE_API_KEY"))
    ap.add_argument("--async", dest="use_async", action="store_true", help="submit a job and poll")
    ap.add_argument("--interval", type=float, default=5.0)
    ap.add_argument("--list", action="store_true", help="list recently saved products")
    args = ap.parse_args(argv)

    cli = LabelScannerClient(args.url, api_key=args.api_key)

    if args.list:
        print(json.dumps(cli.products(), indent=2, ensure_ascii=False))
        return 0
    if not args.photo:
        ap.error("photo is required unless --list is given")

    ct = mimetypes.guess_type(args.photo)[0] or "image/jpeg"
    if args.use_async:
        scan_id = cli.submit(args.photo, content_type=ct)
        print(f"scan id: {scan_id}", file=sys.stderr)
        try:
            out = cli.wait(scan_id, interval=args.interval)
        except ScanTimeout as e:
            print(str(e), file=sys.stderr)
            return 2
    else:
        out = cli.scan(args.photo, content_type=ct)

    print(json.dumps(out, indent=2, ensure_ascii=False))
    return 1 if out.get("status") == "failed" else 0


if __name__ == "__main__":
    raise SystemExit(main())
