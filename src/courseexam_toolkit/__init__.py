"""Top-level package for the CourseExam contributor toolkit.

Provides subpackages:
- courseexam_toolkit.core – block models and exam-format schema checks
- courseexam_toolkit.exam_md – exam.md parsing, normalization and guards
- courseexam_toolkit.publishing – naming and job staging helpers
- courseexam_toolkit.sources – text extraction from exam/solution files
"""

def _get_version() -> str:
    """Get version from pyproject.toml (dev) or importlib.metadata (installed)."""
    from importlib.metadata import PackageNotFoundError, version as pkg_version
    from pathlib import Path

    # In dev mode, read directly from pyproject.toml
    pyproject = Path(__file__).resolve().parent.parent.parent / "pyproject.toml"
    if pyproject.exists():
        try:
            for line in pyproject.read_text(encoding="utf-8").splitlines():
                if line.strip().startswith("version"):
                    # Parse: version = "0.3.0"
                    return line.split("=")[1].strip().strip('"').strip("'")
        except OSError:
            pass

    try:
        return pkg_version("courseexam-toolkit")
    except PackageNotFoundError:
        return "0.0.0"

__version__ = _get_version()
__all__: list[str] = ["__version__"]
