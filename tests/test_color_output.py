import os
import subprocess
import sys


def _write_values(tmp_path):
    src = tmp_path / "values.txt"
    src.write_text("".join(f"{i}\n" for i in range(100)), encoding="utf-8")
    return src


def test_summarize_no_color(tmp_path):
    src = _write_values(tmp_path)
    proc = subprocess.run(
        [sys.executable, "-m", "tailquant.cli", "summarize", str(src), "--no-color"],
        capture_output=True,
        text=True,
    )
    assert proc.returncode == 0
    assert "\x1b[" not in proc.stdout  # no ANSI escapes


def test_summarize_color_if_rich(tmp_path):
    # If rich is installed in environment, we expect ANSI codes unless --no-color provided.
    try:
        import rich  # noqa: F401
    except ImportError:
        return  # skip silently if rich not available
    src = _write_values(tmp_path)
    env = os.environ.copy()
    env["FORCE_COLOR"] = "1"
    proc = subprocess.run(
        [sys.executable, "-m", "tailquant.cli", "summarize", str(src)],
        capture_output=True,
        text=True,
        env=env,
    )
    assert proc.returncode == 0
    # Accept plain output if rich failed to color (rare Windows CI cases), but the table must be there.
    assert "p50" in proc.stdout and "p99" in proc.stdout
