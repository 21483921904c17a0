import os
import subprocess
import sys
from pathlib import Path


ROOT = Path(__file__).resolve().parent.parent


def run_script(name, *args):
    env = dict(os.environ)
    env['PYTHONPATH'] = os.pathsep.join(filter(None, [str(ROOT), env.get('PYTHONPATH')]))
    env.pop('DEBUG', None)

    return subprocess.run(
        [sys.executable, str(ROOT / 'scripts' / name), *[str(_) for _ in args]],
        capture_output=True,
        text=True,
        env=env,
    )


def test_readclx(tmp_path, build_archive, four_groups):
    path = tmp_path / 'towners.clx'
    path.write_bytes(build_archive(four_groups))

    result = run_script('readclx.py', path)

    assert result.returncode == 0
    assert result.stdout.splitlines()[0] == '4 groups, 224 bytes (table of 16 bytes)'


def test_readclx_malformed(tmp_path):
    path = tmp_path / 'broken.clx'
    path.write_bytes(b'\x00\x00\x00\x40\x00')

    result = run_script('readclx.py', path)

    assert result.returncode == 1
    assert 'Traceback' not in result.stderr
    assert 'failed to read' in result.stderr


def test_readclx_short_frame(tmp_path, build_archive):
    path = tmp_path / 'short.clx'
    path.write_bytes(build_archive([[b'\x00\x06\x00\x01']]))

    result = run_script('readclx.py', path)

    assert result.returncode == 1
    assert 'Traceback' not in result.stderr
    assert 'failed to read' in result.stderr


def test_clx_rm_groups(tmp_path, build_archive, four_groups):
    path = tmp_path / 'towners.clx'
    path.write_bytes(build_archive(four_groups))

    result = run_script('clx_rm_groups.py', path, 1, 2)

    assert result.returncode == 0
    assert (tmp_path / 'towners.clx.stripped').read_bytes() == build_archive([four_groups[0], four_groups[3]])
