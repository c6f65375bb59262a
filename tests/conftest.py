import sys
from pathlib import Path


def _add_import_roots() -> None:
    root = Path(__file__).resolve().parents[1]
    for import_root in (root / "src", root / "tests" / "unit"):
        if str(import_root) not in sys.path:
            sys.path.insert(0, str(import_root))


_add_import_roots()
