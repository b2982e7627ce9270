from __future__ import annotations

import datetime as _dt
import html
import json
import logging
import re
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

from harness.config import REPO_ROOT

logger = logging.getLogger(__name__)

OUTCOMES = ("passed", "failed", "skipped", "xfailed", "xpassed")


def _sanitize_name(nodeid: str) -> str:
    """Convert a pytest node id into a filename-safe slug."""
    return re.sub(r"[^A-Za-z0-9._-]+", "_", nodeid)


@dataclass
class TestResult:
    __test__ = False

    nodeid: str
    outcome: str
    duration: float
    screenshot: str | None = None
    page_source: str | None = None
    message: str | None = None


class TestRunReporter:
    """
    Collect per-test results for one pytest run and write report.html and
    report.json under reports/<timestamp>/. On the call stage the active
    browser's screenshot and page source are saved next to the report.
    """

    __test__ = False

    def __init__(self, repo_root: Path | None = None) -> None:
        self.repo_root = repo_root or REPO_ROOT
        self.run_started_at = _dt.datetime.now()
        ts = self.run_started_at.strftime("%Y-%m-%d_%H-%M-%S")

        self.run_dir = self.repo_root / "reports" / ts
        self.artifacts_dir = self.run_dir / "artifacts"
        self.artifacts_dir.mkdir(parents=True, exist_ok=True)

        self.results: list[TestResult] = []
        self.report_path: Path | None = None

    def record(self, item: Any, report: Any, driver: Any | None, *, stage: str) -> TestResult:
        """
        Store the outcome of one stage (setup/call/teardown). A later failing
        stage overwrites the earlier record but keeps its artifacts.
        """
        existing = self._find(item.nodeid)
        notes: list[str] = []

        screenshot = existing.screenshot if existing else None
        page_source = existing.page_source if existing else None
        if stage == "call" and driver is not None:
            screenshot = self._save_screenshot(item.nodeid, driver, notes) or screenshot
            page_source = self._save_page_source(item.nodeid, driver, notes) or page_source

        message = self._message_for(report)
        if message is None and existing is not None:
            message = existing.message
        props = self._props_text(report)
        text = "\n".join(part for part in (message, *notes, props) if part)

        duration = getattr(report, "duration", 0.0) or 0.0
        if existing is not None and stage != "call":
            duration = existing.duration or duration

        result = TestResult(
            nodeid=item.nodeid,
            outcome=self._status_for(report),
            duration=duration,
            screenshot=screenshot,
            page_source=page_source,
            message=text or None,
        )
        if existing is None:
            self.results.append(result)
        else:
            self.results[self.results.index(existing)] = result
        return result

    def finalize(self) -> Path:
        """Write the HTML and JSON reports once; later calls return the same path."""
        if self.report_path is not None and self.report_path.exists():
            return self.report_path

        self.report_path = self.run_dir / "report.html"
        finished_at = _dt.datetime.now()
        self._write_json(finished_at)
        self.report_path.write_text(self._render_html(finished_at), encoding="utf-8")
        logger.info("Report written to %s", self.report_path)
        return self.report_path

    def summary(self) -> dict[str, int]:
        counts = {name: 0 for name in OUTCOMES}
        for res in self.results:
            if res.outcome in counts:
                counts[res.outcome] += 1
        counts["total"] = len(self.results)
        return counts

    # ------------------------------------------------------------------ #

    def _find(self, nodeid: str) -> TestResult | None:
        return next((r for r in self.results if r.nodeid == nodeid), None)

    def _save_screenshot(self, nodeid: str, driver: Any, notes: list[str]) -> str | None:
        path = self.artifacts_dir / f"{_sanitize_name(nodeid)}.png"
        try:
            if driver.save_screenshot(str(path)):
                return str(path.relative_to(self.run_dir))
            notes.append("(Screenshot error: save_screenshot returned False)")
        except Exception as exc:  # pragma: no cover - best effort
            notes.append(f"(Screenshot error: {exc})")
        return None

    def _save_page_source(self, nodeid: str, driver: Any, notes: list[str]) -> str | None:
        path = self.artifacts_dir / f"{_sanitize_name(nodeid)}.html"
        try:
            path.write_text(driver.page_source or "", encoding="utf-8")
            return str(path.relative_to(self.run_dir))
        except Exception as exc:  # pragma: no cover - best effort
            notes.append(f"(Page source error: {exc})")
        return None

    def _status_for(self, report: Any) -> str:
        if getattr(report, "wasxfail", False):
            return "xfailed" if getattr(report, "skipped", False) or getattr(report, "failed", False) else "xpassed"
        return getattr(report, "outcome", "unknown")

    def _message_for(self, report: Any) -> str | None:
        if getattr(report, "failed", False) or getattr(report, "skipped", False):
            text = (getattr(report, "longreprtext", "") or "").strip()
            return text or None
        return None

    def _props_text(self, report: Any) -> str:
        lines = []
        for key, value in getattr(report, "user_properties", None) or []:
            try:
                val_str = json.dumps(value, indent=2, default=str)
            except TypeError:
                val_str = repr(value)
            lines.append(f"{key}: {val_str}")
        return "\n".join(lines)

    def _write_json(self, finished_at: _dt.datetime) -> None:
        payload = {
            "started_at": self.run_started_at.isoformat(),
            "finished_at": finished_at.isoformat(),
            "summary": self.summary(),
            "results": [asdict(r) for r in self.results],
        }
        (self.run_dir / "report.json").write_text(json.dumps(payload, indent=2), encoding="utf-8")

    def _render_row(self, res: TestResult) -> str:
        def link(rel: str | None, label: str) -> str:
            if not rel:
                return "<span class='muted'>n/a</span>"
            return f"<a href='{html.escape(rel)}' target='_blank'>{label}</a>"

        shot = (
            link(res.screenshot, f"<img src='{html.escape(res.screenshot)}' alt='screenshot' />")
            if res.screenshot
            else link(None, "")
        )
        message = f"<pre>{html.escape(res.message)}</pre>" if res.message else "<span class='muted'>-</span>"
        return (
            f"<tr class='status-{html.escape(res.outcome)}'>"
            f"<td>{html.escape(res.nodeid)}</td>"
            f"<td class='status'>{html.escape(res.outcome)}</td>"
            f"<td>{res.duration:.2f}s</td>"
            f"<td class='shot'>{shot}</td>"
            f"<td>{link(res.page_source, 'page source')}</td>"
            f"<td>{message}</td>"
            "</tr>"
        )

    def _render_html(self, finished_at: _dt.datetime) -> str:
        counts = self.summary()
        pills = "\n    ".join(
            f"<div class='pill {name}'>{name.capitalize()}: {counts[name]}</div>" for name in OUTCOMES
        )
        rows = "\n".join(self._render_row(r) for r in self.results) or (
            "<tr><td colspan='6' class='muted'>No tests collected.</td></tr>"
        )
        return f"""<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8" />
  <title>WebDriver Harness Report - {self.run_started_at:%Y-%m-%d %H:%M:%S}</title>
  <style>
    body {{ font-family: Arial, sans-serif; margin: 24px; }}
    .meta, .muted {{ color: #777; }}
    .summary {{ display: flex; gap: 12px; margin: 16px 0; }}
    .pill {{ padding: 6px 10px; border-radius: 14px; font-weight: 600; background: #f5f5f5; }}
    .passed {{ background: #e6ffed; color: #18794e; }}
    .failed {{ background: #ffe8e6; color: #c52727; }}
    .xpassed {{ background: #fff4db; color: #946200; }}
    table {{ border-collapse: collapse; width: 100%; }}
    th, td {{ border: 1px solid #ddd; padding: 8px; vertical-align: top; text-align: left; }}
    tr.status-failed {{ background: #fff4f4; }}
    td.status {{ font-weight: 700; }}
    td.shot img {{ max-width: 320px; border: 1px solid #ccc; }}
    pre {{ white-space: pre-wrap; margin: 0; }}
  </style>
</head>
<body>
  <h1>WebDriver Harness Report</h1>
  <div class="meta">
    Started: {self.run_started_at:%Y-%m-%d %H:%M:%S} &middot; Finished: {finished_at:%Y-%m-%d %H:%M:%S}
  </div>
  <div class="summary">
    {pills}
    <div class="pill">Total: {counts['total']}</div>
  </div>
  <table>
    <thead>
      <tr><th>Test</th><th>Status</th><th>Duration</th><th>Screenshot</th><th>Page source</th><th>Details</th></tr>
    </thead>
    <tbody>
{rows}
    </tbody>
  </table>
</body>
</html>
"""
