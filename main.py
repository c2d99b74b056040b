"""
main.py — recruitment exam portal entry point

Runs the API with uvicorn. ``--open`` also opens the portal in a browser
once the server answers.
"""

import argparse
import logging
import socket
import sys
import threading
import time
import webbrowser

from config import DEFAULT_HOST, DEFAULT_PORT, LOG_FILE

# ── Logging ──────────────────────────────────────────────────────────────────
try:
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        handlers=[
            logging.FileHandler(LOG_FILE, encoding='utf-8'),
            logging.StreamHandler(sys.stdout)
        ]
    )
except PermissionError:
    # Log file not writable: console only
    logging.basicConfig(level=logging.INFO)

logger = logging.getLogger(__name__)

# ── Server utilities ─────────────────────────────────────────────────────────

def _wait_for_server(host: str, port: int, timeout: float = 15.0) -> bool:
    deadline = time.time() + timeout
    while time.time() < deadline:
        try:
            with socket.create_connection((host, port), timeout=0.5):
                return True
        except OSError:
            time.sleep(0.1)
    return False


def _open_when_ready(host: str, port: int) -> None:
    # 0.0.0.0 is not browsable
    browse_host = "127.0.0.1" if host in ("0.0.0.0", "") else host
    if _wait_for_server(browse_host, port):
        webbrowser.open(f"http://{browse_host}:{port}")
    else:
        logger.error("Server did not come up in time; not opening a browser.")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Recruitment exam portal")
    parser.add_argument("--host", default=DEFAULT_HOST)
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    parser.add_argument("--open", action="store_true", help="open the portal in a browser")
    args = parser.parse_args(argv)

    import uvicorn
    from api.app import create_app

    try:
        app = create_app()
    except RuntimeError as e:
        logger.error(str(e))
        return 1

    if args.open:
        threading.Thread(target=_open_when_ready, args=(args.host, args.port), daemon=True).start()

    logger.info(f"=== Recruitment Exam Portal starting on {args.host}:{args.port} ===")
    uvicorn.run(app, host=args.host, port=args.port, log_level="info")
    return 0


if __name__ == "__main__":
    sys.exit(main())
