"""
Conversion trace for postman2insomnia.

Records the decisions taken while converting one Postman document (auth
inferred from headers, unknown body modes, collection-variable rewrites,
schema detection) and writes them as a Markdown report next to the
converted output.
"""

import json
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

# Entry kind -> report heading, in report order
SECTIONS = {
    'decision': 'Decisions',
    'warning': 'Warnings',
    'source': 'Postman Fragments',
}


class VerbosityLevel(Enum):
    MINIMAL = 1
    NORMAL = 2
    DETAILED = 3
    DEBUG = 4

    @classmethod
    def from_string(cls, level: str) -> 'VerbosityLevel':
        """
        Raises:
            ValueError: If level is not minimal, normal, detailed or debug
        """
        try:
            return cls[level.upper()]
        except KeyError:
            names = [member.name.lower() for member in cls]
            raise ValueError(f"Unknown verbosity level: {level}. Must be one of: {names}")


class TraceLogger:
    """
    Buffered Markdown trace of one document conversion.

    A disabled logger accepts every call and keeps nothing, so the
    importer and factories log unconditionally.
    """

    def __init__(
        self,
        enabled: bool = True,
        verbosity: VerbosityLevel = VerbosityLevel.NORMAL,
        output_directory: Path = Path("trace_logs"),
        log_file_name: Optional[str] = None
    ):
        self.enabled = enabled
        self.verbosity = verbosity
        self.output_directory = Path(output_directory)
        self.log_file_name = log_file_name
        self.entries: List[Dict[str, Any]] = []
        self.started = datetime.now()

    @classmethod
    def disabled(cls) -> 'TraceLogger':
        return cls(enabled=False)

    def _record(self, kind: str, title: str, payload: Any, level: VerbosityLevel) -> None:
        if not self.enabled or level.value > self.verbosity.value:
            return
        self.entries.append({
            'kind': kind,
            'title': title,
            'payload': payload,
            'level': level.name,
            'at': datetime.now().strftime('%H:%M:%S.%f')[:-3],
        })

    def log_decision(self, decision: str, context: Optional[Dict[str, Any]] = None,
                     verbosity_required: VerbosityLevel = VerbosityLevel.NORMAL) -> None:
        self._record('decision', decision, context or {}, verbosity_required)

    def log_warning(self, warning: str, context: Optional[Dict[str, Any]] = None,
                    verbosity_required: VerbosityLevel = VerbosityLevel.MINIMAL) -> None:
        self._record('warning', warning, context or {}, verbosity_required)

    def log_source_data(self, label: str, fragment: Any,
                        verbosity_required: VerbosityLevel = VerbosityLevel.DETAILED) -> None:
        """Keep the Postman fragment a decision was based on."""
        self._record('source', label, fragment, verbosity_required)

    def write_log(self, source_file: str, output_file: str) -> Optional[Path]:
        """
        Write the report for one conversion.

        Returns:
            Path of the Markdown file, or None when tracing is disabled
        """
        if not self.enabled:
            return None

        self.output_directory.mkdir(parents=True, exist_ok=True)
        if self.log_file_name:
            log_path = self.output_directory / self.log_file_name
        else:
            log_path = self._unused_path(f"{Path(source_file).stem}_{self.started:%Y%m%d_%H%M%S}")
        log_path.write_text(self.render(source_file, output_file), encoding='utf-8')
        return log_path

    def _unused_path(self, base: str) -> Path:
        """Reports from inputs sharing a stem get _2, _3, ... suffixes."""
        log_path = self.output_directory / f"{base}.md"
        counter = 2
        while log_path.exists():
            log_path = self.output_directory / f"{base}_{counter}.md"
            counter += 1
        return log_path

    def render(self, source_file: str, output_file: str) -> str:
        lines = [
            f"# Conversion trace: {Path(source_file).name} → {Path(output_file).name}",
            "",
            f"- Started: {self.started.isoformat(timespec='seconds')}",
            f"- Verbosity: {self.verbosity.name.lower()}",
            "",
        ]

        for kind, heading in SECTIONS.items():
            entries = [e for e in self.entries if e['kind'] == kind]
            lines.append(f"## {heading} ({len(entries)})")
            lines.append("")
            for entry in entries:
                lines.append(f"- `{entry['at']}` **{entry['title']}** ({entry['level'].lower()})")
                lines.extend(self._render_payload(kind, entry['payload']))
            lines.append("")

        return "\n".join(lines)

    @staticmethod
    def _render_payload(kind: str, payload: Any) -> List[str]:
        if kind != 'source':
            return [f"    - {key}: `{value}`" for key, value in payload.items()]
        try:
            text = json.dumps(payload, indent=2, default=str)
        except (TypeError, ValueError):
            text = repr(payload)
        return ["", "    ```json"] + [f"    {line}" for line in text.splitlines()] + ["    ```"]
