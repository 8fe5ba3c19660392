"""gofmt integration for generated source.

The subprocess call is wrapped so that a missing gofmt binary degrades to
a warning and the unformatted text. A non-zero exit means the generated
code does not parse, which is a real generation failure.
"""

from __future__ import annotations

import logging
import subprocess

from structmap.domain.errors import GenerationError

logger = logging.getLogger(__name__)

GOFMT_TIMEOUT_SECONDS = 30


def _run_gofmt(source: str, binary: str) -> subprocess.CompletedProcess[str]:
    """Pipe *source* through ``gofmt``. Raises on failure."""
    return subprocess.run(
        [binary],
        input=source,
        capture_output=True,
        text=True,
        check=True,
        timeout=GOFMT_TIMEOUT_SECONDS,
    )


def format_source(source: str, binary: str = "gofmt") -> tuple[str, list[str]]:
    """Format Go *source*; returns ``(text, warnings)``.

    Raises:
        GenerationError: if gofmt rejects the source.
    """
    try:
        completed = _run_gofmt(source, binary)
    except subprocess.CalledProcessError as exc:
        msg = f"gofmt rejected the generated source: {exc.stderr.strip()}"
        raise GenerationError(msg, stderr=exc.stderr) from exc
    except (OSError, subprocess.TimeoutExpired) as exc:
        logger.debug("gofmt unavailable: %s", exc)
        return source, [f"{binary} not available, output left unformatted"]
    return completed.stdout, []
