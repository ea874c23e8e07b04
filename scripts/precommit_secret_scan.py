#!/usr/bin/env python3
"""
Block commits that stage obvious secrets.

Install as .git/hooks/pre-commit (or call it from one). Scans the STAGED
content of added/copied/modified files, not the working tree. Set
SKIP_SECRET_SCAN=1 to bypass in an emergency.
"""
from __future__ import annotations

import os
import re
import subprocess
import sys
from dataclasses import dataclass
from typing import List, Optional, Pattern, Sequence, Tuple

MAX_SCAN_CHARS = 2_000_000

PATTERNS: List[Tuple[str, Pattern[str]]] = [
    # Private keys / certs
    ("Private key block", re.compile(r"-----BEGIN (?:RSA |EC |OPENSSH )?PRIVATE KEY-----")),
    # Common secret-ish env vars / JSON keys
    ("Azure client secret key", re.compile(r"\bCLIENT_SECRET\b|\bAZURE_CLIENT_SECRET\b|\bAAD_CLIENT_SECRET\b", re.IGNORECASE)),
    ("Generic 'secret' assignment", re.compile(r"\b(secret|client_secret|app_secret)\b\s*[:=]\s*[\"'][^\"']{8,}[\"']", re.IGNORECASE)),
    ("Password assignment", re.compile(r"\b(password|passwd|pwd)\b\s*[:=]\s*[\"'][^\"']{8,}[\"']", re.IGNORECASE)),
    # Tokens
    ("JWT (eyJ...)", re.compile(r"\beyJ[a-zA-Z0-9_-]{10,}\.[a-zA-Z0-9_-]{10,}\.[a-zA-Z0-9_-]{10,}\b")),
    ("GitHub token", re.compile(r"\bgh[pousr]_[A-Za-z0-9_]{20,}\b")),
    ("Slack token", re.compile(r"\bxox[baprs]-[A-Za-z0-9-]{10,}\b")),
]

# Paths matching these are not scanned, e.g. re.compile(r"(?:^|/)\.env\.example$")
ALLOW_FILE_PATTERNS: List[Pattern[str]] = []


@dataclass
class Violation:
    file: str
    rule: str
    match: str


def _git(*args: str) -> str:
    return subprocess.run(
        ["git", *args],
        check=True,
        capture_output=True,
        text=True,
    ).stdout.strip()


def staged_files() -> List[str]:
    out = _git("diff", "--cached", "--name-only", "--diff-filter=ACM")
    return [line for line in out.splitlines() if line]


def staged_content(path: str) -> Optional[str]:
    """Read a file from the index; None when it cannot be read as text."""
    try:
        return subprocess.run(
            ["git", "show", f":{path}"],
            check=True,
            capture_output=True,
        ).stdout.decode("utf-8")
    except (subprocess.CalledProcessError, UnicodeDecodeError):
        return None


def is_allowed_file(path: str) -> bool:
    return any(p.search(path) for p in ALLOW_FILE_PATTERNS)


def is_probably_text(content: str) -> bool:
    return "\x00" not in content


def scan_content(path: str, content: Optional[str]) -> List[Violation]:
    if not content or not is_probably_text(content) or len(content) > MAX_SCAN_CHARS:
        return []
    violations = []
    for rule, pattern in PATTERNS:
        m = pattern.search(content)
        if m:
            violations.append(Violation(file=path, rule=rule, match=m.group(0)[:120]))
    return violations


def scan_files(files: Sequence[str]) -> List[Violation]:
    violations: List[Violation] = []
    for path in files:
        if is_allowed_file(path):
            continue
        violations.extend(scan_content(path, staged_content(path)))
    return violations


def report(violations: Sequence[Violation]) -> None:
    print("\nCommit blocked: possible secret(s) detected in STAGED files:\n", file=sys.stderr)
    for v in violations:
        print(f"- {v.file}\n  Rule: {v.rule}\n  Snip: {v.match}\n", file=sys.stderr)
    print(
        "\n".join(
            [
                "Fix options:",
                "1) Remove the secret from the file and commit again.",
                "2) Move it to local.settings.json / .env.local (ignored) and reference via env vars.",
                "3) If this is a false positive, rewrite the value to a safe placeholder.",
                "",
                "Emergency bypass (use sparingly):",
                "  SKIP_SECRET_SCAN=1 git commit -m \"...\"",
                "",
            ]
        ),
        file=sys.stderr,
    )


def main() -> int:
    if os.getenv("SKIP_SECRET_SCAN") == "1":
        return 0
    violations = scan_files(staged_files())
    if violations:
        report(violations)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
