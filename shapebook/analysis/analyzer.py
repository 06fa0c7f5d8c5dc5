"""Analyzer collaborator: result model, JSON payload parsing and backends."""

from __future__ import annotations

import json
import logging
import os
import subprocess
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from shapebook.lsp.types import (
    Diagnostic,
    HoverEntry,
    Position,
    diagnostic_from_lsp,
    hover_entry_from_lsp,
)

logger = logging.getLogger(__name__)

HOVER_ENTRY_KEYS = ("hoverEntries", "hover_entries", "hovers")


class AnalyzerError(RuntimeError):
    """Raised when the analyzer cannot produce a result for a text."""


class AnalyzerUnavailableError(AnalyzerError):
    """Raised when the analyzer program cannot be started at all."""


@dataclass(frozen=True)
class AnalysisResult:
    diagnostics: tuple[Diagnostic, ...] = field(default_factory=tuple)
    hover_entries: tuple[HoverEntry, ...] = field(default_factory=tuple)


EMPTY_RESULT = AnalysisResult()


@runtime_checkable
class Analyzer(Protocol):
    def analyze(self, text: str) -> AnalysisResult: ...


@runtime_checkable
class HoverProvider(Protocol):
    def hover(self, position: Position) -> Any: ...


def parse_analysis_payload(payload: object) -> AnalysisResult:
    """Build a result from ``{"diagnostics": [...], "hoverEntries": [...]}``.

    Items are LSP shaped (``range``/``message``/``severity`` and
    ``range``/``payload`` or ``range``/``contents``); malformed items are
    skipped.
    """
    if not isinstance(payload, dict):
        raise AnalyzerError(f"Analyzer output must be a JSON object, found {type(payload).__name__}.")

    diagnostics: list[Diagnostic] = []
    raw_diagnostics = payload.get("diagnostics")
    if isinstance(raw_diagnostics, list):
        for item in raw_diagnostics:
            diag = diagnostic_from_lsp(item)
            if diag is not None:
                diagnostics.append(diag)

    hovers: list[HoverEntry] = []
    for key in HOVER_ENTRY_KEYS:
        raw_hovers = payload.get(key)
        if not isinstance(raw_hovers, list):
            continue
        for item in raw_hovers:
            entry = hover_entry_from_lsp(item)
            if entry is not None:
                hovers.append(entry)
        break

    return AnalysisResult(diagnostics=tuple(diagnostics), hover_entries=tuple(hovers))


class NullAnalyzer:
    """Analyzer used when none is configured: never annotates anything."""

    def analyze(self, text: str) -> AnalysisResult:
        return EMPTY_RESULT


class CommandAnalyzer:
    """Run an external analyzer: source text on stdin, JSON result on stdout."""

    def __init__(
        self,
        program: str = "shapels",
        args: list[str] | None = None,
        *,
        timeout_s: float = 10.0,
        cwd: str = "",
    ) -> None:
        self.program = str(program or "").strip() or "shapels"
        self.args = [str(item) for item in (args or [])]
        self.timeout_s = max(0.1, float(timeout_s or 10.0))
        self.cwd = str(cwd or "").strip()

    def command(self) -> list[str]:
        return [self.program, *self.args]

    def analyze(self, text: str) -> AnalysisResult:
        cmd = self.command()
        try:
            proc = subprocess.run(
                cmd,
                input=str(text or ""),
                capture_output=True,
                encoding="utf-8",
                timeout=self.timeout_s,
                cwd=self.cwd if self.cwd and os.path.isdir(self.cwd) else None,
            )
        except FileNotFoundError as exc:
            raise AnalyzerUnavailableError(f"Analyzer program not found: {self.program}") from exc
        except subprocess.TimeoutExpired as exc:
            raise AnalyzerError(f"Analyzer timed out after {self.timeout_s:g}s") from exc
        except OSError as exc:
            raise AnalyzerUnavailableError(f"Could not start analyzer '{self.program}': {exc}") from exc

        stdout = (proc.stdout or "").strip()
        if not stdout:
            stderr = (proc.stderr or "").strip()
            detail = stderr.splitlines()[0] if stderr else f"exit code {proc.returncode}"
            raise AnalyzerError(f"Analyzer produced no output ({detail})")

        try:
            payload = json.loads(stdout)
        except ValueError as exc:
            raise AnalyzerError(f"Analyzer output is not valid JSON: {exc}") from exc

        result = parse_analysis_payload(payload)
        logger.debug(
            "%s: %d diagnostics, %d hover entries",
            self.program,
            len(result.diagnostics),
            len(result.hover_entries),
        )
        return result
