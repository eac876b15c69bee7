# utils.py
"""
Utility helpers: JSON loading, report generation, and console output.

- Uses Rich for colorful, wrapped tables in the terminal.
- Saves JSON, CSV, and HTML reports; the JSON report also carries per-resource evaluation results.
"""

from dataclasses import asdict
from datetime import datetime, timezone
from html import escape
from typing import Any, Dict, List, Optional, Sequence, Tuple
import csv
import json
import os
from json import JSONDecodeError

from rich.console import Console
from rich.table import Table
from rich.text import Text

from eks_scanner.models import Finding

_console = Console()

def load_json_file(path: str) -> Any:
    """
    Load JSON from a file and return the decoded document.
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Input JSON file not found: {path}.")
    try:
        with open(path, "r", encoding="utf-8-sig") as fh:
            return json.load(fh)
    except JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {path}: {e.msg} (line {e.lineno} column {e.colno})") from e

def ensure_reports_dir(path: str = "reports") -> str:
    os.makedirs(path, exist_ok=True)
    return path

def findings_to_table_rows(findings: List[Finding]) -> List[List[str]]:
    rows: List[List[str]] = []
    for f in findings:
        rows.append([str(f.resource), str(f.issue), str(f.severity), str(f.details or "")])
    return rows

def results_to_dicts(results: Sequence[Tuple[Any, Any]]) -> List[Dict[str, Any]]:
    """
    Flatten (snapshot, EvaluationResult) pairs for the JSON report.
    """
    out: List[Dict[str, Any]] = []
    for snapshot, result in results:
        entry = {
            "resourceType": snapshot.resource_type,
            "resourceId": snapshot.resource_id,
            "status": snapshot.status.value,
        }
        if snapshot.arn:
            entry["arn"] = snapshot.arn
        entry.update(result.to_dict())
        out.append(entry)
    return out

def save_report(findings: List[Finding], mode: str, extra: dict = None, out_dir: str = "reports",
                results: Optional[Sequence[Tuple[Any, Any]]] = None) -> Dict[str, str]:
    """
    Save JSON, CSV, and HTML reports and return their paths.
    """
    out_dir = ensure_reports_dir(out_dir)
    now = datetime.now(timezone.utc).replace(microsecond=0, tzinfo=None).isoformat() + "Z"
    result_dicts = results_to_dicts(results or [])
    report = {
        "scan_time": now,
        "mode": mode,
        "summary": {
            "findings_count": len(findings),
            "resources_evaluated": len(result_dicts),
            "vulnerable_resources": sum(1 for r in result_dicts if r["vulnerable"]),
        },
        "findings": [asdict(f) for f in findings],
        "results": result_dicts,
    }
    if extra:
        report["extra"] = extra

    base_ts = now.replace(":", "-")
    json_path = os.path.join(out_dir, f"scan-{base_ts}-{mode}.json")
    csv_path = os.path.join(out_dir, f"scan-{base_ts}-{mode}.csv")
    html_path = os.path.join(out_dir, f"scan-{base_ts}-{mode}.html")

    # JSON
    with open(json_path, "w", encoding="utf-8") as fh:
        json.dump(report, fh, indent=2)

    # CSV
    fieldnames = ["resource", "issue", "severity", "details", "rule_id", "check"]
    with open(csv_path, "w", encoding="utf-8", newline="") as fh:
        writer = csv.DictWriter(fh, fieldnames=fieldnames)
        writer.writeheader()
        for f in report["findings"]:
            row = {k: f.get(k, "") for k in fieldnames[:4]}
            row["rule_id"] = f["metadata"].get("rule_id", "")
            row["check"] = f["metadata"].get("check", "")
            writer.writerow(row)

    # HTML
    html_rows: List[str] = []
    html_rows.append("<!doctype html>")
    html_rows.append("<html><head><meta charset='utf-8'><title>EKS Policy Scan Report</title>")
    html_rows.append("<style>body{font-family:Arial,Helvetica,sans-serif;margin:20px}table{border-collapse:collapse;width:100%}th,td{border:1px solid #ddd;padding:8px}th{background:#f2f2f2;text-align:left}tr:nth-child(even){background:#fafafa}pre{white-space:pre-wrap;word-wrap:break-word}</style>")
    html_rows.append("</head><body>")
    html_rows.append(f"<h2>Scan Report - {now} - mode: {escape(mode)}</h2>")
    html_rows.append(f"<p>Total findings: {len(report['findings'])}</p>")
    html_rows.append(f"<p>Vulnerable resources: {report['summary']['vulnerable_resources']}"
                     f" of {report['summary']['resources_evaluated']}</p>")
    if extra:
        html_rows.append("<div><strong>Metadata:</strong><ul>")
        for k, v in extra.items():
            html_rows.append(f"<li>{escape(str(k))}: {escape(str(v))}</li>")
        html_rows.append("</ul></div>")
    html_rows.append("<table><thead><tr><th>Resource</th><th>Issue</th><th>Severity</th><th>Details</th></tr></thead><tbody>")
    for f in report["findings"]:
        resource = escape(str(f.get("resource", "")))
        issue = escape(str(f.get("issue", "")))
        severity = escape(str(f.get("severity", "")))
        details = escape(str(f.get("details", "")))
        html_rows.append(f"<tr><td>{resource}</td><td>{issue}</td><td>{severity}</td><td><pre>{details}</pre></td></tr>")
    html_rows.append("</tbody></table></body></html>")
    with open(html_path, "w", encoding="utf-8") as fh:
        fh.write("\n".join(html_rows))

    return {"json": json_path, "csv": csv_path, "html": html_path}

# --- Console printing with color/wrapping ---

def _rich_severity_text(sev: int) -> Text:
    """
    Return a Rich Text object styled by severity.
    """
    if sev >= 8:
        return Text(str(sev), style="bold red")
    if sev >= 5:
        return Text(str(sev), style="bold yellow")
    return Text(str(sev), style="green")

def print_summary_and_report_path(findings: List[Finding], report_paths: Dict[str, str], show_top: int = 5,
                                  print_full_table: bool = False, console: Console = None):
    """
    Print a compact summary and a colorful table of findings.
    """
    console = console or _console
    total = len(findings)
    console.print("\nScan summary:")
    console.print(f"- Total findings: {total}")
    if total:
        table = Table(show_header=True, header_style="bold cyan")
        table.add_column("Resource", style="cyan", overflow="fold")
        table.add_column("Issue", style="magenta")
        table.add_column("Severity", justify="right")
        table.add_column("Details", overflow="fold")
        shown = findings if print_full_table else findings[:show_top]
        for f, r in zip(shown, findings_to_table_rows(shown)):
            table.add_row(r[0], r[1], _rich_severity_text(f.severity), r[3])
        console.print(table)
    console.print("\nSaved reports:")
    console.print(f"- JSON: {report_paths.get('json')}")
    console.print(f"- CSV:  {report_paths.get('csv')}")
    console.print(f"- HTML: {report_paths.get('html')}\n")
