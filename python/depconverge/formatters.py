"""Plain text and JSON summaries of an analysis result."""

import json
from typing import List

from .convergence import FULL_CONVERGENCE
from .result import AnalysisResult, IdentityDetail


class OutputFormatter:
    """Formatter for the CLI output formats."""

    @staticmethod
    def format_as_json(result: AnalysisResult) -> str:
        """Format the result as JSON."""
        return json.dumps(result.to_dict(), indent=2) + '\n'

    @staticmethod
    def format_as_text(result: AnalysisResult) -> str:
        """Format the statistics and, when the build diverges, the evidence."""
        lines = OutputFormatter._format_stats(result)

        if result.convergence < FULL_CONVERGENCE or result.snapshot_count > 0:
            lines.append("")
            if result.is_reactor_build:
                lines.append("Dependencies used in modules")
            else:
                lines.append("Dependencies used in this project")

            for detail in result.conflict_details():
                lines.extend(OutputFormatter._format_detail(detail, result.is_reactor_build))
            for detail in result.snapshot_details():
                lines.extend(OutputFormatter._format_detail(detail, result.is_reactor_build))

        return '\n'.join(lines) + '\n'

    @staticmethod
    def _format_stats(result: AnalysisResult) -> List[str]:
        lines = ["Statistics:"]
        if result.is_reactor_build:
            lines.append(f"  Number of modules: {result.module_count}")
        lines.extend([
            f"  Number of dependencies (NOD): {result.dependency_count}",
            f"  Number of unique artifacts (NOA): {result.artifact_count}",
            f"  Number of version-conflicting artifacts (NOC): {result.conflicting_count}",
            f"  Number of SNAPSHOT artifacts (NOS): {result.snapshot_count}",
            f"  Convergence (NOD/NOA): {result.convergence} %",
        ])

        if result.is_release_ready:
            lines.append("  Ready for release (100% convergence and no SNAPSHOTS): Success")
        else:
            lines.append("  Ready for release (100% convergence and no SNAPSHOTS): Error")
            if result.convergence < FULL_CONVERGENCE:
                lines.append("    You do not have 100% convergence.")
            if result.snapshot_count > 0:
                lines.append("    You have SNAPSHOT dependencies.")
        return lines

    @staticmethod
    def _format_detail(detail: IdentityDetail, numbered: bool) -> List[str]:
        lines = ["", detail.identity.key]
        for version in detail.versions:
            lines.append(f"  {version.version}")
            for i, evidence in enumerate(version.evidence):
                marker = f"{chr(ord('a') + i % 26)}. " if numbered else ""
                tree_lines = evidence.tree.get_tree_representation().split('\n')
                lines.append(f"    {marker}{tree_lines[0]}")
                indent = "    " + " " * len(marker)
                lines.extend(indent + line for line in tree_lines[1:])
        return lines
