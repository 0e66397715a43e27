import pytest

from listmover.models import ExitStatus, TransferSpec


@pytest.fixture
def write_list(tmp_path):
    """Write lines to a list file and return its path."""
    def _write(lines, name="list.txt"):
        path = tmp_path / name
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path
    return _write


@pytest.fixture
def source_tree(tmp_path):
    """A small source tree: src/A/x.txt, src/A/B/y.txt, src/C/z.txt."""
    root = tmp_path / "src"
    (root / "A" / "B").mkdir(parents=True)
    (root / "C").mkdir()
    (root / "A" / "x.txt").write_text("x", encoding="utf-8")
    (root / "A" / "B" / "y.txt").write_text("y", encoding="utf-8")
    (root / "C" / "z.txt").write_text("z", encoding="utf-8")
    return root


@pytest.fixture
def target(tmp_path):
    path = tmp_path / "out"
    path.mkdir()
    return path


class FakeTransfer:
    """Records specs and runs a callback instead of touching the disk."""

    def __init__(self, code=1, action=None):
        self.code = code
        self.action = action
        self.specs = []

    def execute(self, spec: TransferSpec) -> ExitStatus:
        self.specs.append(spec)
        if self.action:
            self.action(spec)
        return ExitStatus(self.code, f"code {self.code}")


@pytest.fixture
def fake_transfer():
    return FakeTransfer