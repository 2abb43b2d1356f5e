# checks/report.py

import csv
import json
import logging
import os

import pandas as pd
from colorama import init, Fore, Style

# Initialize colorama
init()

logger = logging.getLogger("snift.report")

NESTED_FIELDS = ("SCORE_BREAKDOWN", "BADGES", "INCIDENTS", "MESSAGES")


def output_message(symbol, message, level="info"):
    """Generic function to print messages with different colors and symbols based on the level."""
    colors = {
        "good": Fore.GREEN + Style.BRIGHT,
        "warning": Fore.YELLOW + Style.BRIGHT,
        "bad": Fore.RED + Style.BRIGHT,
        "indifferent": Fore.BLUE + Style.BRIGHT,
        "error": Fore.RED + Style.BRIGHT + "!!! ",
        "info": Fore.WHITE + Style.BRIGHT,
    }
    color = colors.get(level, Fore.WHITE + Style.BRIGHT)
    print(color + f"{symbol} {message}" + Style.RESET_ALL)


def score_level(score):
    if score is None:
        return "info"
    return "good" if score >= 0.8 else "warning" if score >= 0.6 else "bad"


def write_to_excel(data, file_name="output.xlsx"):
    """Writes results to an Excel file, appending if the file exists."""
    flat_data = _flatten_results(data)
    if os.path.exists(file_name) and os.path.getsize(file_name) > 0:
        existing_df = pd.read_excel(file_name)
        new_df = pd.DataFrame(flat_data)
        combined_df = pd.concat([existing_df, new_df])
        combined_df.to_excel(file_name, index=False)
    else:
        pd.DataFrame(flat_data).to_excel(file_name, index=False)


def write_to_csv(data, file_name="output.csv"):
    """Writes results to a CSV file."""
    flat_data = _flatten_results(data)
    if not flat_data:
        return

    fieldnames = list(flat_data[0].keys())
    with open(file_name, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        writer.writerows(flat_data)


def write_to_markdown(data, file_name="output.md"):
    """Writes results to a formatted Markdown file."""
    if not data:
        return

    lines = ["# Snift Website Security Report\n"]

    for result in data:
        url = result.get("URL", "unknown")
        score = result.get("SCORE")
        lines.append(f"## {url}: Score: {score:.2f} "
                     f"({result.get('ACHIEVED_SCORE')}/{result.get('MAXIMUM_SCORE')})")
        lines.append("")

        lines.append("| Check | Score | Message |")
        lines.append("|-------|-------|---------|")
        for check in result.get("SCORE_BREAKDOWN", []):
            message = str(check.get("message", "")).replace("|", "\\|")
            lines.append(f"| {check['check']} | {check['score']}/{check['max']} | {message} |")
        lines.append("")

        badges = result.get("BADGES", [])
        if badges:
            lines.append(f"### Badges ({len(badges)})")
            lines.append("")
            for badge in badges:
                lines.append(f"- **{badge['code']}** {badge['title']}")
            lines.append("")

        cert = result.get("CERTIFICATE") or {}
        if cert:
            lines.append("### Certificate")
            lines.append("")
            if cert.get("error"):
                lines.append(f"- Error: `{cert['error']}`")
            else:
                lines.append(f"- Issuer: {cert.get('issuer')}")
                lines.append(f"- Common name: {cert.get('common_name')}")
                lines.append(f"- Valid until: {cert.get('not_after')}")
            lines.append("")

        lines.append("---")
        lines.append("")

    with open(file_name, "w", encoding="utf-8") as f:
        f.write("\n".join(lines))


def output_json(results):
    """Output results as JSON to stdout."""
    print(json.dumps(results, indent=2, default=str))


def _flatten_results(data):
    """Flatten results for tabular output (remove nested dicts/lists)."""
    flat = []
    for result in data:
        row = {}
        for k, v in result.items():
            if k in NESTED_FIELDS:
                continue
            elif isinstance(v, (dict, list)):
                row[k] = str(v)
            else:
                row[k] = v
        row["BADGES"] = ", ".join(b["code"] for b in result.get("BADGES", []))
        flat.append(row)
    return flat


def printer(**kwargs):
    """Print one score result to the terminal."""
    url = kwargs.get("URL")
    score = kwargs.get("SCORE")
    achieved = kwargs.get("ACHIEVED_SCORE")
    maximum = kwargs.get("MAXIMUM_SCORE")
    checks = kwargs.get("SCORE_BREAKDOWN", [])
    badges = kwargs.get("BADGES", [])
    cert = kwargs.get("CERTIFICATE") or {}
    server = kwargs.get("SERVER")
    xss_report_url = kwargs.get("XSS_REPORT_URL")

    output_message("[*]", f"URL: {url}", "indifferent")
    output_message("[*]", f"Domain: {kwargs.get('DOMAIN')}", "indifferent")
    if score is not None:
        output_message("[*]", f"Security Score: {score:.2f} ({achieved}/{maximum})", score_level(score))

    for check in checks:
        if check["max"] == 0:
            level = "indifferent"
        elif check["passed"]:
            level = "good"
        elif check["score"] > 0:
            level = "warning"
        else:
            level = "bad"
        symbol = "[+]" if level == "good" else "[-]" if level == "bad" else "[?]" if level == "warning" else "[*]"
        output_message(symbol, f"{check['check']}: {check['score']}/{check['max']} {check['message']}", level)

    if xss_report_url:
        output_message("[*]", f"XSS violation reports are sent to: {xss_report_url}", "indifferent")

    if server:
        output_message("[*]", f"Server: {server['name']} ({server['vendor']})", "indifferent")

    if cert.get("error"):
        output_message("[-]", f"Certificate error: {cert['error']}", "bad")
    elif cert:
        output_message("[*]", f"Certificate issuer: {cert.get('issuer')}", "info")
        output_message("[*]", f"Certificate common name: {cert.get('common_name')}", "info")
        output_message("[*]", f"Certificate valid: {cert.get('not_before')} -> {cert.get('not_after')}", "info")

    if badges:
        output_message("[+]", f"{len(badges)} badge(s) earned:", "good")
        for badge in badges:
            output_message("   ", f"{badge['code']}: {badge['title']}", "good")

    print()  # Padding
