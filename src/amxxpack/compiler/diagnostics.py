"""Classification of amxxpc output.

amxxpc prints a banner, one line per diagnostic, and a status trailer::

    AMX Mod X Compiler 1.9.0.5294
    Copyright (c) 1997-2006 ITB CompuPhase
    Copyright (c) 2004-2013 AMX Mod X Team

    test.sma(5) : error 017: undefined symbol "foo"
    test.sma(8 -- 9) : warning 217: loose indentation

    1 Error.
    Could not locate output file compiled/test.amxx (compile failed).

Lines matching the diagnostic grammar become typed messages, known
banner/status lines feed the compiler verdict, and anything else is
``#echo`` output.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from amxxpack.compiler.models import DiagnosticMessage, MessageType
from amxxpack.output import BuildLogger
from amxxpack.paths import display_path

DIAGNOSTIC_PATTERN = re.compile(
    r"^(?P<filename>.+?)\((?P<start>\d+)(?:\s*--\s*(?P<end>\d+))?\)\s*:\s*"
    r"(?P<type>fatal error|error|warning)\s+(?P<code>\d+)\s*:\s*(?P<text>.*)$",
    re.IGNORECASE,
)

ERROR_SUMMARY_PATTERN = re.compile(r"^\d+\s+Errors?\.$", re.IGNORECASE)
ABORTED_PATTERN = re.compile(r"^Compilation aborted\.?$", re.IGNORECASE)
MISSING_OUTPUT_PATTERN = re.compile(r"^Could not locate output file\b.*$", re.IGNORECASE)
DONE_PATTERN = re.compile(r"^Done\.$")

STATUS_PATTERNS = (
    re.compile(r"^AMX Mod X Compiler\b", re.IGNORECASE),
    re.compile(r"^Copyright \(c\)", re.IGNORECASE),
    re.compile(r"^(Header|Code|Data|Stack/heap) size:", re.IGNORECASE),
    re.compile(r"^Total requirements:", re.IGNORECASE),
    re.compile(r"^\d+\s+Warnings?\.$", re.IGNORECASE),
    ERROR_SUMMARY_PATTERN,
    ABORTED_PATTERN,
    MISSING_OUTPUT_PATTERN,
    DONE_PATTERN,
)


@dataclass(frozen=True)
class ParsedOutput:
    """Classified compiler output.

    Attributes:
        messages: Diagnostics in emission order.
        error_summary: "N Errors." trailer, if printed.
        aborted: Compiler printed "Compilation aborted.".
        missing_output: "Could not locate output file ..." line, if printed.
        done: Compiler printed "Done.".
    """

    messages: tuple[DiagnosticMessage, ...]
    error_summary: str | None = None
    aborted: bool = False
    missing_output: str | None = None
    done: bool = False

    @property
    def has_errors(self) -> bool:
        return self.aborted or any(m.type.is_error for m in self.messages)

    @property
    def failure_reason(self) -> str | None:
        """Best human-readable failure reason found in the output."""
        if self.missing_output:
            return self.missing_output
        if self.aborted:
            return "Compilation aborted."
        if self.error_summary:
            return self.error_summary
        for message in self.messages:
            if message.type.is_error:
                return message.text
        return None


def parse_line(line: str) -> DiagnosticMessage | None:
    """Classify one output line.

    Returns:
        A DiagnosticMessage, or None for blank and status lines.
    """
    line = line.strip()
    if not line:
        return None

    match = DIAGNOSTIC_PATTERN.match(line)
    if match:
        end = match.group("end")
        return DiagnosticMessage(
            type=MessageType(match.group("type").lower()),
            code=match.group("code"),
            text=match.group("text").strip(),
            filename=match.group("filename").strip(),
            start_line=int(match.group("start")),
            end_line=int(end) if end is not None else None,
        )

    if any(pattern.match(line) for pattern in STATUS_PATTERNS):
        return None

    return DiagnosticMessage(type=MessageType.ECHO, text=line)


def parse_output(output: str) -> ParsedOutput:
    """Classify the full combined output of one compiler run."""
    messages: list[DiagnosticMessage] = []
    error_summary: str | None = None
    aborted = False
    missing_output: str | None = None
    done = False

    for raw_line in output.splitlines():
        line = raw_line.strip()

        if ERROR_SUMMARY_PATTERN.match(line):
            error_summary = line
        elif ABORTED_PATTERN.match(line):
            aborted = True
        elif MISSING_OUTPUT_PATTERN.match(line):
            missing_output = line
        elif DONE_PATTERN.match(line):
            done = True

        message = parse_line(line)
        if message is not None:
            messages.append(message)

    return ParsedOutput(
        messages=tuple(messages),
        error_summary=error_summary,
        aborted=aborted,
        missing_output=missing_output,
        done=done,
    )


def format_message(message: DiagnosticMessage, compiled_file: Path | str) -> str:
    """Format a diagnostic for display.

    Messages without a filename refer to ``compiled_file``.
    """
    if message.type == MessageType.ECHO:
        return message.text

    location = display_path(message.filename or compiled_file)
    if message.start_line is not None:
        location = f"{location}({message.start_line})"

    parts = [location, message.type.value]
    if message.code:
        parts.append(message.code)
    return f"{' '.join(parts)} : {message.text}"


def log_message(log: BuildLogger, message: DiagnosticMessage, compiled_file: Path | str) -> None:
    """Route a diagnostic to the log level matching its severity."""
    text = format_message(message, compiled_file)

    if message.type.is_error:
        log.error(text)
    elif message.type == MessageType.WARNING:
        log.warning(text)
    else:
        log.debug(text)
