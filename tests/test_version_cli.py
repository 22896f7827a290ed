import re
import subprocess
import sys


def test_cli_version_matches_package():
    proc = subprocess.run([sys.executable, '-m', 'tailquant.cli', '--version'], capture_output=True, text=True)
    assert proc.returncode == 0
    out = (proc.stdout + proc.stderr).strip()
    # Expect something like: tailquant X.Y.Z
    m = re.match(r'tailquant\s+(\d+\.\d+\.\d+)', out)
    assert m, f'Unexpected version output: {out}'
    import tailquant
    assert m.group(1) == tailquant.__version__


def test_version_subcommand():
    proc = subprocess.run([sys.executable, '-m', 'tailquant.cli', 'version'], capture_output=True, text=True)
    assert proc.returncode == 0
    assert proc.stdout.startswith('tailquant ')
