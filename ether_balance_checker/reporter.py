from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List

from colorama import Fore, Style, init

from ether_balance_checker.invariant_checker import InvariantResult


@dataclass
class ReportEntry:
    check: str
    name: str
    passed: bool
    message: str


class Reporter:
    def __init__(self, use_color: bool = True) -> None:
        init(autoreset=True)
        self.use_color = use_color
        self.entries: List[ReportEntry] = []

    def add_invariant(self, check: str, invariant: InvariantResult) -> None:
        self.entries.append(
            ReportEntry(
                check=check,
                name=invariant.name,
                passed=invariant.passed,
                message=invariant.message,
            )
        )

    def add_error(self, check: str, exc: BaseException) -> None:
        self.entries.append(
            ReportEntry(
                check=check,
                name=type(exc).__name__,
                passed=False,
                message=str(exc),
            )
        )

    @property
    def has_failures(self) -> bool:
        return any(not entry.passed for entry in self.entries)

    def render(self, use_color: bool | None = None) -> str:
        use_color = self.use_color if use_color is None else use_color
        lines = ["====== BALANCE CHANGE REPORT ======"]

        for entry in self.entries:
            marker = "[PASS]" if entry.passed else "[FAIL]"
            if use_color:
                color = Fore.GREEN if entry.passed else Fore.RED
                marker = f"{color}{marker}{Style.RESET_ALL}"
            first, *rest = entry.message.splitlines() or [""]
            lines.append(f"{marker} {entry.check}: {entry.name} - {first}")
            lines.extend(f"    {line}" for line in rest)

        passed_count = sum(1 for entry in self.entries if entry.passed)
        failed_count = len(self.entries) - passed_count
        lines.append("===================================")
        lines.append(f"Summary: passed={passed_count}, failed={failed_count}, total={len(self.entries)}")
        return "\n".join(lines)

    def print(self) -> None:
        print(self.render())

    def write(self, path: str | Path) -> None:
        output_path = Path(path)
        output_path.write_text(self.render(use_color=False), encoding="utf-8")
