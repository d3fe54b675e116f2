#!/usr/bin/env python3
"""
Invoice Folder Watcher

Watches a folder for new PDF invoices and uploads each one to the
extraction API. Successfully stored invoices are moved to a processed
folder, failures to a failed folder, and every outcome is appended to
processing_log.json next to the watch folder.

Usage:
    python invoice_watcher.py --watch-folder ./invoices-incoming
    python invoice_watcher.py --mode multi --api-url http://127.0.0.1:8000
"""

import argparse
import json
import time
from datetime import datetime
from pathlib import Path

import requests
from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

DEFAULT_API_URL = "http://127.0.0.1:8000"


def upload_invoice(api_url: str, file_path: Path, mode: str | None = None, timeout: int = 120) -> requests.Response:
    """POST one PDF to the extraction endpoint"""
    params = {"mode": mode} if mode else {}
    with open(file_path, "rb") as f:
        files = {"file": (file_path.name, f, "application/pdf")}
        return requests.post(f"{api_url}/invoices/extract", files=files, params=params, timeout=timeout)


def summarize(data: dict) -> list[str]:
    """Short human-readable lines for a successful response"""
    invoices = data["invoices"] if "invoices" in data else [data]
    lines = []
    for invoice in invoices:
        total = invoice.get("totalAmount", invoice.get("grossTotal"))
        company = invoice.get("companyFrom") or (invoice.get("businessInfo") or {}).get("name")
        lines.append(
            f"Invoice #{invoice.get('invoiceNumber') or 'N/A'} | "
            f"{company or 'Unknown'} | {invoice.get('invoiceDate') or 'no date'} | total {total}"
        )
    if data.get("status") == "partial":
        lines.append(f"Partially saved: {data['count']} stored, {len(data['errors'])} failed")
    return lines


class InvoiceHandler(FileSystemEventHandler):
    """Handles new invoice file events"""

    def __init__(self, watch_folder, processed_folder, failed_folder, api_url, mode=None):
        self.watch_folder = Path(watch_folder)
        self.processed_folder = Path(processed_folder)
        self.failed_folder = Path(failed_folder)
        self.api_url = api_url
        self.mode = mode
        self.processed_files = set()

        self.processed_folder.mkdir(exist_ok=True)
        self.failed_folder.mkdir(exist_ok=True)

    def on_created(self, event):
        """Called when a file is created in the watched folder"""
        if event.is_directory:
            return

        file_path = Path(event.src_path)
        if file_path.suffix.lower() != ".pdf":
            return
        if file_path in self.processed_files:
            return

        # Give the writer a moment to finish the file
        time.sleep(1)
        if not file_path.exists():
            return

        self.processed_files.add(file_path)
        self.process_invoice(file_path)

    def process_invoice(self, file_path: Path):
        print("\n" + "=" * 70)
        print(f"NEW INVOICE: {file_path.name} ({file_path.stat().st_size:,} bytes)")
        print("=" * 70)

        try:
            response = upload_invoice(self.api_url, file_path, self.mode)
        except requests.exceptions.Timeout:
            self.handle_result(file_path, None, "Timeout")
            return
        except requests.exceptions.RequestException as e:
            self.handle_result(file_path, None, str(e))
            return

        if response.status_code == 200:
            self.handle_result(file_path, response.json(), None)
        else:
            try:
                error = response.json().get("error", response.text)
            except ValueError:
                error = response.text
            self.handle_result(file_path, None, f"API returned {response.status_code}: {error}")

    def handle_result(self, file_path: Path, data: dict | None, error: str | None):
        if error is None:
            for line in summarize(data):
                print(f"   {line}")
            destination = self.processed_folder
        else:
            print(f"   Processing failed: {error}")
            destination = self.failed_folder

        dest_path = destination / file_path.name
        file_path.rename(dest_path)
        print(f"   Moved to: {dest_path}")

        self.log_processing(file_path.name, data, error, dest_path)

    def log_processing(self, filename: str, data: dict | None, error: str | None, dest_path: Path):
        """Append the outcome to processing_log.json"""
        log_file = self.watch_folder.parent / "processing_log.json"

        if log_file.exists():
            with open(log_file, "r") as f:
                log_data = json.load(f)
        else:
            log_data = []

        log_data.append({
            "timestamp": datetime.now().isoformat(),
            "filename": filename,
            "error": error,
            "response": data,
            "destination": str(dest_path),
        })

        with open(log_file, "w") as f:
            json.dump(log_data, f, indent=2)


def main():
    parser = argparse.ArgumentParser(
        description="Watch a folder for invoices and upload them for extraction"
    )
    parser.add_argument("--watch-folder", default="./invoices-incoming",
                        help="Folder to watch for new invoices (default: ./invoices-incoming)")
    parser.add_argument("--processed-folder", default="./invoices-processed",
                        help="Folder for stored invoices (default: ./invoices-processed)")
    parser.add_argument("--failed-folder", default="./invoices-failed",
                        help="Folder for failed uploads (default: ./invoices-failed)")
    parser.add_argument("--mode", choices=["single", "multi"], default=None,
                        help="Extraction mode (default: server setting)")
    parser.add_argument("--api-url", default=DEFAULT_API_URL,
                        help=f"API base URL (default: {DEFAULT_API_URL})")
    args = parser.parse_args()

    watch_folder = Path(args.watch_folder)
    watch_folder.mkdir(exist_ok=True)

    event_handler = InvoiceHandler(
        args.watch_folder,
        args.processed_folder,
        args.failed_folder,
        api_url=args.api_url,
        mode=args.mode,
    )
    observer = Observer()
    observer.schedule(event_handler, str(watch_folder), recursive=False)
    observer.start()

    print("=" * 70)
    print("INVOICE WATCHER")
    print("=" * 70)
    print(f"Watching:  {watch_folder.absolute()}")
    print(f"Processed: {Path(args.processed_folder).absolute()}")
    print(f"Failed:    {Path(args.failed_folder).absolute()}")
    print(f"API:       {args.api_url}")
    print("Drop PDF invoices into the watch folder. Press Ctrl+C to stop.")
    print("=" * 70)

    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        print("\nStopping watcher...")
        observer.stop()

    observer.join()


if __name__ == "__main__":
    main()
