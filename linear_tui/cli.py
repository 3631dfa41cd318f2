from __future__ import annotations

import argparse
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import List, Optional

from .app import EffectRunner, run_ui
from .config import DEFAULT_CONFIG_PATH, Config, load_config
from .diagnostics import DiagnosticSink, sink_from_env
from .errors import LinearError, OperationCancelled
from .orchestrator import Orchestrator
from .service import LinearService

DEFAULT_LOG_PATH = os.path.expanduser("~/.config/linear-tui/linear-tui.log")


def setup_logging(log_level: str = 'ERROR', log_path: str = DEFAULT_LOG_PATH) -> logging.Logger:
    logger = logging.getLogger('linear_tui')
    # Always reset handlers so --log-level reliably controls file output.
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()
    logger.setLevel(logging.DEBUG)
    d = os.path.dirname(log_path)
    if d:
        os.makedirs(d, exist_ok=True)
    fh = RotatingFileHandler(log_path, maxBytes=2000000, backupCount=2, encoding='utf-8')
    lvl = getattr(logging, str(log_level).upper(), None)
    fh.setLevel(lvl if isinstance(lvl, int) else logging.ERROR)
    fh.setFormatter(logging.Formatter('%(asctime)s %(levelname)s %(message)s'))
    logger.addHandler(fh)
    return logger


def build_service(cfg: Config, sink: Optional[DiagnosticSink] = None) -> LinearService:
    """Raises LinearError (validation) when no API key is configured."""
    return LinearService(cfg.api_key, sink=sink)


def _summary(service: LinearService) -> int:
    try:
        issues, projects = service.load_dashboard()
    except (LinearError, OperationCancelled) as e:
        print(str(e), file=sys.stderr)
        return 1
    team = service.get_default_team()
    print(f"Team: {team.name if team else '-'}")
    print(f"Issues: {len(issues)}")
    for issue in issues[:10]:
        print(f"  {issue.id:<10} {issue.status or '-':<12} {issue.title}")
    print(f"Projects: {len(projects)}")
    for project in projects:
        print(f"  {project.name} ({int(project.progress * 100)}%)")
    return 0


def main(argv: Optional[List[str]] = None) -> None:
    ap = argparse.ArgumentParser(description="Terminal dashboard for Linear issues and projects")
    ap.add_argument("--config", default=DEFAULT_CONFIG_PATH, help="Path to JSON/YAML config")
    ap.add_argument("--log-level", default="ERROR", help="File log level (DEBUG, INFO, WARNING, ERROR)")
    ap.add_argument("--log-file", default=DEFAULT_LOG_PATH, help="Path to the rotating log file")
    ap.add_argument("--no-ui", action="store_true", help="Print a non-interactive summary and exit")
    args = ap.parse_args(argv)

    logger = setup_logging(args.log_level, args.log_file)
    try:
        cfg = load_config(args.config)
    except (OSError, ValueError) as e:
        print(f"Config error: {e}", file=sys.stderr)
        sys.exit(2)
    sink = sink_from_env({'DEBUG': '1'} if cfg.debug_mode else {})

    def factory() -> LinearService:
        return build_service(load_config(args.config), sink)

    service: Optional[LinearService] = None
    startup_error: Optional[LinearError] = None
    try:
        service = build_service(cfg, sink)
    except LinearError as e:
        logger.error("Startup: %s", e)
        startup_error = e

    if args.no_ui:
        if service is None:
            print(str(startup_error), file=sys.stderr)
            sys.exit(1)
        sys.exit(_summary(service))

    orch = Orchestrator(service_ready=service is not None, startup_error=startup_error)
    run_ui(orch, EffectRunner(factory, service), cfg.theme)


if __name__ == "__main__":
    main()
