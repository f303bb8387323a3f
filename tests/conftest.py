import pytest


@pytest.fixture
def write_gcode(tmp_path):
    def _write(text: str, name: str = "input.gcode"):
        path = tmp_path / name
        path.write_bytes(text.encode("utf-8"))
        return path
    return _write
