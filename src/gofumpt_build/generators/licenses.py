"""License report generator.

Builds the compliance document shipped with the plugin: the project's own
license, a separator banner, then one block per third-party Go module as
reported by ``go-licenses``. The project's own module is excluded from the
report.
"""

from __future__ import annotations

import re
import tempfile
from pathlib import Path

import structlog

from gofumpt_build.config import BuildConfig
from gofumpt_build.errors import ManifestError
from gofumpt_build.process import CommandRunner, run_command
from gofumpt_build.writer import GeneratedArtifact, WriteResult

logger = structlog.get_logger(__name__)

_MODULE_RE = re.compile(r"^module[ \t]+(\S+)", re.MULTILINE)

RULE = "=" * 80

LICENSE_SEPARATOR = (
    "\n\n"
    f"{RULE}\n"
    "Third-party licenses\n"
    f"{RULE}\n"
    "\n"
    "This plugin includes the following third-party Go modules.\n"
)

# go-licenses template: name, optional version, license name, blank line,
# license body, each entry preceded by the rule.
REPORT_TEMPLATE = (
    "{{ range . }}\n"
    f"{RULE}\n"
    "{{ .Name }}{{ if .Version }} {{ .Version }}{{ end }}\n"
    "License: {{ .LicenseName }}\n"
    "\n"
    "{{ licenseText . }}\n"
    "{{ end }}\n"
)


def parse_module_path(text: str, *, file_path: str | None = None) -> str:
    """Extract the module path from go.mod content.

    Only the first line-anchored ``module <path>`` declaration counts.
    Surrounding quotes (allowed by the go.mod grammar) are stripped.

    Args:
        text: go.mod content.
        file_path: Manifest path, used in the error message.

    Returns:
        The module path, e.g. ``"github.com/jakebailey/dprint-plugin-gofumpt"``.

    Raises:
        ManifestError: If there is no module declaration.

    Example:
        >>> parse_module_path("module example.com/foo\\n\\ngo 1.22\\n")
        'example.com/foo'
    """
    match = _MODULE_RE.search(text)
    if match is None:
        raise ManifestError("No 'module' declaration found", file_path=file_path)
    return match.group(1).strip('"`')


def render_license(self_license: str, report: str) -> str:
    """Concatenate the license document and normalize its ending.

    Trailing whitespace is removed and exactly one newline appended.
    """
    return (self_license + LICENSE_SEPARATOR + report).rstrip() + "\n"


def run_license_report(
    config: BuildConfig,
    module_path: str,
    run: CommandRunner = run_command,
) -> str:
    """Run go-licenses for every dependency except ``module_path``.

    The template is written to a temporary file for the duration of the
    call.

    Returns:
        The rendered report text.

    Raises:
        CommandError: If go-licenses fails.
    """
    with tempfile.TemporaryDirectory(prefix="gofumpt-build-") as tmp:
        template = Path(tmp) / "licenses.tpl"
        template.write_text(REPORT_TEMPLATE, encoding="utf-8")
        argv = [
            config.go_licenses,
            "report",
            "./...",
            "--ignore",
            module_path,
            "--template",
            str(template),
        ]
        stdout = run(argv, config.work_dir, config.env).check()
    return stdout.decode("utf-8")


def generate_licenses(config: BuildConfig, run: CommandRunner = run_command) -> WriteResult:
    """Generate the aggregated license document.

    Args:
        config: Build configuration.
        run: Command runner used to invoke go-licenses.

    Returns:
        WriteResult for the license output path.

    Raises:
        ManifestError: If go.mod has no module declaration.
        CommandError: If go-licenses fails.
    """
    manifest = config.path(config.manifest_file)
    module_path = parse_module_path(manifest.read_text(encoding="utf-8"), file_path=str(manifest))
    self_license = config.path(config.license_file).read_text(encoding="utf-8")

    logger.info("license_report_started", module=module_path)
    report = run_license_report(config, module_path, run)

    text = render_license(self_license, report)
    result = GeneratedArtifact.from_text(config.path(config.license_output), text).write()
    logger.info("licenses_generated", status=result.status.value)
    return result
