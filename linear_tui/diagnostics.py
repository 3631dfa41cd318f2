from __future__ import annotations

import json
import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Dict, Mapping, Optional


class DiagnosticSink:
    """Observer for request/response pairs. Every hook is a no-op here."""

    def log_request(self, method: str, url: str, variables: Optional[Dict[str, object]]) -> None:
        pass

    def log_response(self, status: int, duration: float, size: int, error: Optional[BaseException] = None) -> None:
        pass

    def log_error(self, context: str, error: Optional[BaseException]) -> None:
        pass

    def log_info(self, message: str, *args: object) -> None:
        pass


class NullSink(DiagnosticSink):
    pass


class FileDiagnosticSink(DiagnosticSink):
    """Append-only debug log. Query text is never written."""

    def __init__(self, path: str = "debug.log", logger_name: str = "linear_tui.debug"):
        self.path = path
        self.logger = logging.getLogger(logger_name)
        self.logger.propagate = False
        self.logger.setLevel(logging.DEBUG)
        for h in list(self.logger.handlers):
            self.logger.removeHandler(h)
            h.close()
        fh = RotatingFileHandler(path, mode="a", maxBytes=2000000, backupCount=2, encoding="utf-8")
        fh.setFormatter(logging.Formatter('[%(asctime)s] %(levelname)s: %(message)s', datefmt='%Y-%m-%d %H:%M:%S'))
        self.logger.addHandler(fh)

    def close(self) -> None:
        for h in list(self.logger.handlers):
            self.logger.removeHandler(h)
            h.close()

    def log_request(self, method, url, variables):
        try:
            lines = ["Linear API Request", f"  Method: {method}", f"  URL: {url}"]
            if variables:
                lines.append("  Variables: " + json.dumps(variables, indent=2, default=str))
            self.logger.debug("\n".join(lines))
        except Exception:
            pass

    def log_response(self, status, duration, size, error=None):
        try:
            lines = ["Linear API Response", f"  Status: {status}", f"  Duration: {duration:.3f}s"]
            if error is not None:
                lines.append(f"  Error: {error}")
            elif size:
                lines.append(f"  Response: {size} bytes")
            self.logger.debug("\n".join(lines))
        except Exception:
            pass

    def log_error(self, context, error):
        try:
            self.logger.error("%s - %s", context, error)
        except Exception:
            pass

    def log_info(self, message, *args):
        try:
            self.logger.info(message, *args)
        except Exception:
            pass


def sink_from_env(environ: Optional[Mapping[str, str]] = None, path: str = "debug.log") -> DiagnosticSink:
    env = os.environ if environ is None else environ
    if not env.get("DEBUG"):
        return NullSink()
    try:
        return FileDiagnosticSink(path)
    except OSError:
        logging.getLogger("linear_tui").warning("Unable to open debug log %s; diagnostics disabled", path, exc_info=True)
        return NullSink()
